from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

FIELD_TYPES = frozenset({"string", "int", "float", "bool"})


@dataclass(frozen=True)
class FieldSpec:
    name: str                   # destination key in Metric.fields
    query: str                  # locator expression, e.g. "temperature" or "sensor.readings[0]"
    type: Optional[str] = None  # string|int|float|bool, None keeps the decoded type

    def __post_init__(self):
        if not self.name:
            raise ValueError("FieldSpec.name must be non-empty")
        if not self.query:
            raise ValueError(f"FieldSpec {self.name!r}: query must be non-empty")
        if self.type is not None and self.type not in FIELD_TYPES:
            raise ValueError(
                f"FieldSpec {self.name!r}: unknown type {self.type!r}, "
                f"expected one of {sorted(FIELD_TYPES)}"
            )


@dataclass(frozen=True)
class RecordSpec:
    metric_name: str
    fields: Tuple[FieldSpec, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # accept any sequence from callers, store a tuple
        object.__setattr__(self, "fields", tuple(self.fields))
