import pytest

import json_parser as jp
from value import Array, Bool, Null, Number, Object, String


def test_display_round_trips_through_parser():
    text = '{"a": [1, 2.5, true, null], "b": {"c": "d"}}'
    value = jp.parse(text)
    assert str(value) == text
    assert jp.parse(str(value)) == value


def test_string_display_escapes():
    assert str(String('say "hi"\n')) == '"say \\"hi\\"\\n"'
    assert str(String("tab\there")) == '"tab\\there"'
    assert str(String("\x01")) == '"\\u0001"'
    assert str(String("back\\slash")) == '"back\\\\slash"'


def test_number_equality_is_numeric():
    assert Number(1) == Number(1.0)
    assert Number(2) != Number(3)
    assert Number(1).is_integer()
    assert not Number(1.0).is_integer()
    assert str(Number(5000000.0)) == "5000000.0"


def test_variants_do_not_compare_equal_across_kinds():
    assert Bool(True) != Number(1)
    assert Null() != Bool(False)
    assert String("1") != Number(1)


def test_to_python_converts_whole_tree():
    value = jp.parse('{"xs": [1, -2.5, "s"], "ok": false, "none": null}')
    assert value.to_python() == {"xs": [1, -2.5, "s"], "ok": False, "none": None}


def test_array_access():
    arr = jp.parse("[10, 20, 30]")
    assert len(arr) == 3
    assert arr[1] == Number(20)
    assert [item.to_python() for item in arr] == [10, 20, 30]


def test_array_take_leaves_null():
    arr = Array([Number(1), String("x")])
    assert arr.take(1) == String("x")
    assert arr.items == [Number(1), Null()]
    with pytest.raises(IndexError):
        arr.take(5)


def test_object_access():
    obj = jp.parse('{"a": 1, "b": null}')
    assert "a" in obj
    assert "z" not in obj
    assert list(obj) == ["a", "b"]
    assert list(obj.keys()) == ["a", "b"]
    assert obj.get("z") is None
    assert obj.get("a") == Number(1)


def test_object_take_leaves_null():
    obj = Object({"k": Array([Bool(True)])})
    taken = obj.take("k")
    assert taken == Array([Bool(True)])
    assert obj["k"] == Null()
    with pytest.raises(KeyError):
        obj.take("missing")


def test_object_keeps_insertion_order():
    obj = jp.parse('{"z": 1, "a": 2, "m": 3}')
    assert list(obj) == ["z", "a", "m"]
    assert str(obj) == '{"z": 1, "a": 2, "m": 3}'


def test_empty_containers_display():
    assert str(Array()) == "[]"
    assert str(Object()) == "{}"
