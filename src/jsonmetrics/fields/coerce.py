from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple, Union
import math
import re

from jsonmetrics.errors import QueryNotFound, UnsupportedCoercion

TypedField = Union[str, int, float, bool]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_BOOL_TEXT = {"true": True, "false": False, "1": True, "0": False}


class _Reject(Exception):
    """Raised by a table entry; turned into UnsupportedCoercion by coerce_value."""


def source_kind(value: Any) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _checked_int(v: int) -> int:
    if not INT64_MIN <= v <= INT64_MAX:
        raise _Reject(f"{v} overflows int64")
    return v


def format_number(v: Union[int, float]) -> str:
    """Shortest text that reads back to the same number (1 -> "1", 1.1 -> "1.1", 2.0 -> "2", -0.0 -> "-0.0")."""
    if isinstance(v, int):
        return str(v)
    if v.is_integer() and abs(v) < 1e21 and not (v == 0 and math.copysign(1.0, v) < 0):
        return str(int(v))
    return repr(v)


def _float_to_int(v: float) -> int:
    if not math.isfinite(v):
        raise _Reject(f"{v} is not finite")
    return _checked_int(math.trunc(v))


def _int_to_float(v: int) -> float:
    try:
        return float(v)
    except OverflowError:
        raise _Reject(f"{v} overflows float") from None


def _str_to_int(s: str) -> int:
    if not _INT_RE.fullmatch(s):
        raise _Reject(f"{s!r} is not an integer literal")
    return _checked_int(int(s))


def _str_to_float(s: str) -> float:
    if not _FLOAT_RE.fullmatch(s):
        raise _Reject(f"{s!r} is not a number literal")
    v = float(s)
    if not math.isfinite(v):
        raise _Reject(f"{s!r} is out of float range")
    return v


def _str_to_bool(s: str) -> bool:
    try:
        return _BOOL_TEXT[s]
    except KeyError:
        raise _Reject(f"{s!r} is not one of {sorted(_BOOL_TEXT)}") from None


# (source kind, target type) -> converter; target None keeps the decoded type
COERCIONS: Dict[Tuple[str, Optional[str]], Callable[[Any], TypedField]] = {
    ("bool", "string"): lambda v: "true" if v else "false",
    ("bool", "int"): lambda v: 1 if v else 0,
    ("bool", "float"): lambda v: 1.0 if v else 0.0,
    ("bool", "bool"): lambda v: v,
    ("bool", None): lambda v: v,

    ("int", "string"): format_number,
    ("int", "int"): _checked_int,
    ("int", "float"): _int_to_float,
    ("int", "bool"): lambda v: v != 0,
    ("int", None): _checked_int,

    ("float", "string"): format_number,
    ("float", "int"): _float_to_int,
    ("float", "float"): lambda v: v,
    ("float", "bool"): lambda v: v != 0.0,
    ("float", None): lambda v: v,

    ("string", "string"): lambda v: v,
    ("string", "int"): _str_to_int,
    ("string", "float"): _str_to_float,
    ("string", "bool"): _str_to_bool,
    ("string", None): lambda v: v,
}


def coerce_value(
    value: Any,
    target: Optional[str],
    *,
    query: Optional[str] = None,
    field: Optional[str] = None,
) -> TypedField:
    """
    Convert a located scalar to `target` (string|int|float|bool), or keep its
    decoded type when `target` is None.

    null is absence and raises QueryNotFound; anything else that cannot be
    converted raises UnsupportedCoercion.
    """
    kind = source_kind(value)
    where = f"query {query!r}" if query is not None else "value"
    if kind == "null":
        raise QueryNotFound(f"{where} resolved to null", query=query, field=field)

    fn = COERCIONS.get((kind, target))
    if fn is None:
        raise UnsupportedCoercion(
            f"{where}: cannot convert {kind} to {target or 'a scalar field'}",
            query=query,
            field=field,
        )
    try:
        return fn(value)
    except _Reject as e:
        raise UnsupportedCoercion(
            f"{where}: cannot convert {kind} to {target or kind}: {e}",
            query=query,
            field=field,
        ) from None
