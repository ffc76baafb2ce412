from __future__ import annotations

import json
import math
from typing import Any, Union

from jsonmetrics.errors import InvalidDocument


def _reject_constant(name: str):
    # json accepts NaN/Infinity/-Infinity, which are not JSON
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(literal: str) -> float:
    v = float(literal)
    if not math.isfinite(v):
        raise ValueError(f"number {literal} out of range")
    return v


def decode_document(buf: Union[bytes, bytearray, str]) -> Any:
    """
    Decode one JSON document into a plain Python tree.

    Integral literals come back as ``int`` and fractional/exponent literals as
    ``float``; the coercer relies on that distinction for native types.
    """
    if isinstance(buf, (bytes, bytearray)):
        try:
            text = bytes(buf).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidDocument(f"input is not valid UTF-8: {e}") from e
    else:
        text = buf

    if not text.strip():
        raise InvalidDocument("empty input")

    try:
        return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except json.JSONDecodeError as e:
        raise InvalidDocument(f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e
    except ValueError as e:
        raise InvalidDocument(f"invalid JSON: {e}") from e
