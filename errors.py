# errors.py
# Error taxonomy for the JSON parser.

from enum import Enum

from combinators import Input


class ErrorKind(str, Enum):
    UNRECOGNIZED_CHARACTER = "unrecognized_character"
    MALFORMED_LITERAL = "malformed_literal"
    UNTERMINATED_STRING = "unterminated_string"
    INVALID_ESCAPE = "invalid_escape"
    CONTROL_CHARACTER = "control_character"
    MALFORMED_NUMBER = "malformed_number"
    MISSING_COLON = "missing_colon"
    MISSING_COMMA = "missing_comma"
    EXPECTED_KEY = "expected_key"
    UNCLOSED_ARRAY = "unclosed_array"
    UNCLOSED_OBJECT = "unclosed_object"
    LEADING_COMMA = "leading_comma"
    TRAILING_COMMA = "trailing_comma"
    UNEXPECTED_TOKEN = "unexpected_token"
    TRAILING_CHARACTERS = "trailing_characters"
    DUPLICATE_KEY = "duplicate_key"
    NESTING_TOO_DEEP = "nesting_too_deep"
    EARLY_END_OF_INPUT = "early_end_of_input"


class ParseError(SyntaxError):
    """
    Terminal parse failure with its location.

    Subclasses SyntaxError so callers catching the built-in keep working.
    `position` is the character offset; `line` and `column` are 1-based.
    """

    def __init__(self, kind: ErrorKind, message: str, where: Input):
        self.kind = kind
        self.message = message
        self.position = where.offset
        self.line, self.column = where.location()
        super().__init__(self._render())

    def _render(self) -> str:
        return f"{self.message} at line {self.line}, column {self.column} (offset {self.position})"

    def __str__(self):
        return self._render()

