from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class Metric:
    """
    One extracted record, shaped like a time-series measurement.

    Invariants:
    - fields hold only str/int/float/bool values
    - tags are reserved and currently always empty
    - built in one pass; never returned partially filled
    """

    name: str
    fields: Dict[str, Any]
    time: datetime
    tags: Dict[str, str] = field(default_factory=dict)
