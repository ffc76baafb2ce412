import pytest

from jsonmetrics.errors import QueryNotFound, UnsupportedCoercion
from jsonmetrics.fields.coerce import COERCIONS, coerce_value, format_number, source_kind


@pytest.mark.parametrize(
    "value, target, expected",
    [
        # -> string
        (True, "string", "true"),
        (False, "string", "false"),
        (1, "string", "1"),
        (1.1, "string", "1.1"),
        (2.0, "string", "2"),
        (-0.5, "string", "-0.5"),
        ("Bilbo", "string", "Bilbo"),
        # -> int
        (True, "int", 1),
        (False, "int", 0),
        (3.1, "int", 3),
        (-3.9, "int", -3),
        ("4", "int", 4),
        ("-12", "int", -12),
        # -> float
        (True, "float", 1.0),
        (False, "float", 0.0),
        (3, "float", 3.0),
        ("4.1", "float", 4.1),
        ("1e3", "float", 1000.0),
        # -> bool
        (True, "bool", True),
        (1, "bool", True),
        (0, "bool", False),
        (0.0, "bool", False),
        (-2.5, "bool", True),
        ("true", "bool", True),
        ("false", "bool", False),
        ("1", "bool", True),
        ("0", "bool", False),
        # native
        (True, None, True),
        (2, None, 2),
        (2.1, None, 2.1),
        ("Baggins", None, "Baggins"),
    ],
)
def test_coercion_matrix(value, target, expected):
    actual = coerce_value(value, target)
    assert actual == expected
    assert type(actual) is type(expected)


@pytest.mark.parametrize(
    "value, target",
    [
        ("four", "int"),
        ("4.0", "int"),
        (" 4", "int"),
        ("1_000", "int"),
        ("", "int"),
        ("abc", "float"),
        ("nan", "float"),
        ("1e999", "float"),
        ("yes", "bool"),
        ("True", "bool"),
        ("", "bool"),
        (2 ** 63, "int"),
        (2 ** 63, None),
        (1e300, "int"),
        ([1, 2], "string"),
        ({"a": 1}, None),
        (1, "json"),
    ],
)
def test_unsupported_coercions(value, target):
    with pytest.raises(UnsupportedCoercion):
        coerce_value(value, target, query="q")


def test_null_is_absence():
    with pytest.raises(QueryNotFound, match="'q'"):
        coerce_value(None, "int", query="q", field="f")


def test_error_carries_query_and_field():
    with pytest.raises(UnsupportedCoercion) as exc:
        coerce_value("four", "int", query="q", field="f")
    assert exc.value.query == "q"
    assert exc.value.field == "f"
    assert "'four'" in str(exc.value)


def test_int64_bounds_accepted():
    assert coerce_value(str(2 ** 63 - 1), "int") == 2 ** 63 - 1
    assert coerce_value(-(2 ** 63), "int") == -(2 ** 63)


def test_table_covers_every_scalar_pair():
    for kind in ("bool", "int", "float", "string"):
        for target in ("string", "int", "float", "bool", None):
            assert (kind, target) in COERCIONS


def test_source_kind_bool_before_int():
    assert source_kind(True) == "bool"
    assert source_kind(1) == "int"


def test_roundtrips():
    assert coerce_value(coerce_value("1", "int"), "string") == "1"
    assert coerce_value(coerce_value(1.1, "string"), "float") == 1.1
    assert coerce_value(coerce_value(1, "string"), "int") == 1


def test_format_number_large_values():
    assert format_number(1e21) == "1e+21"
    assert format_number(12345678901234567890) == "12345678901234567890"


def test_negative_zero_keeps_its_sign():
    assert format_number(-0.0) == "-0.0"
    assert format_number(0.0) == "0"
    assert coerce_value(coerce_value(-0.0, "string"), "float") == 0.0
    assert str(coerce_value(coerce_value(-0.0, "string"), "float")) == "-0.0"
