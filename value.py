"""
value.py - The parsed JSON tree.

Value is a closed set of variants: Null, Bool, String, Number, Array and
Object. Trees are built bottom-up by the grammar and handed to the caller;
the parser keeps no reference to them afterwards.

Numbers are a single variant. Literals without a fraction or exponent keep
an int, everything else is a float, and equality is numeric across both
forms, so Number(1) == Number(1.0).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Union


class Value:
    """Base class of every tree node."""

    def to_python(self) -> Any:
        raise NotImplementedError


def _quote(s: str) -> str:
    out = ['"']
    for ch in s:
        if ch == '"':
            out.append('\\"')
        elif ch == "\\":
            out.append("\\\\")
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\t":
            out.append("\\t")
        elif ch < " ":
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


@dataclass(frozen=True)
class Null(Value):
    def to_python(self) -> None:
        return None

    def __str__(self):
        return "null"


@dataclass(frozen=True)
class Bool(Value):
    value: bool

    def to_python(self) -> bool:
        return self.value

    def __str__(self):
        return "true" if self.value else "false"


@dataclass(frozen=True)
class String(Value):
    value: str

    def to_python(self) -> str:
        return self.value

    def __str__(self):
        return _quote(self.value)


@dataclass(frozen=True)
class Number(Value):
    value: Union[int, float]

    def is_integer(self) -> bool:
        return isinstance(self.value, int)

    def to_python(self) -> Union[int, float]:
        return self.value

    def __str__(self):
        return repr(self.value)


@dataclass
class Array(Value):
    items: List[Value] = field(default_factory=list)

    def __len__(self):
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]

    def take(self, index: int) -> Value:
        """Return the element at index, leaving Null in its slot."""
        taken = self.items[index]
        self.items[index] = Null()
        return taken

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]

    def __str__(self):
        return "[" + ", ".join(str(item) for item in self.items) + "]"


@dataclass
class Object(Value):
    members: Dict[str, Value] = field(default_factory=dict)

    def __len__(self):
        return len(self.members)

    def __iter__(self) -> Iterator[str]:
        return iter(self.members)

    def __contains__(self, key: str) -> bool:
        return key in self.members

    def __getitem__(self, key: str) -> Value:
        return self.members[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.members.get(key, default)

    def keys(self):
        return self.members.keys()

    def take(self, key: str) -> Value:
        """Return the member under key, leaving Null in its slot."""
        taken = self.members[key]
        self.members[key] = Null()
        return taken

    def to_python(self) -> dict:
        return {key: val.to_python() for key, val in self.members.items()}

    def __str__(self):
        return "{" + ", ".join(f"{_quote(k)}: {v}" for k, v in self.members.items()) + "}"
