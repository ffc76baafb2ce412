from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
import json

import pandas as pd

from .types import Metric

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ============================================================================
# Metric → dict / JSONL
# ============================================================================

def metric_to_dict(m: Metric) -> Dict[str, Any]:
    return {
        "name": m.name,
        "tags": dict(m.tags),
        "fields": dict(m.fields),
        "timestamp": m.time.isoformat(),
    }


def emit_metrics_jsonl(
    metrics: List[Metric],
    outpath: Path,
    *,
    dry_run: bool = False,
) -> Optional[str]:
    """Write metrics to JSONL, one object per line. Returns the text on dry run."""
    lines = [json.dumps(metric_to_dict(m), ensure_ascii=False) for m in metrics]
    text = "\n".join(lines) + ("\n" if lines else "")
    if dry_run:
        return text

    outpath = Path(outpath).expanduser().resolve()
    outpath.parent.mkdir(parents=True, exist_ok=True)
    outpath.write_text(text, encoding="utf-8")
    return None


# ============================================================================
# Metric → line protocol
# ============================================================================

def _escape(s: str, chars: str) -> str:
    s = s.replace("\\", "\\\\").replace("\n", "\\n")
    for c in chars:
        s = s.replace(c, "\\" + c)
    return s


def _format_field_value(v: Any) -> str:
    # bool before int: bool is an int subclass
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, int):
        return f"{v}i"
    if isinstance(v, float):
        return repr(v)
    if isinstance(v, str):
        return '"' + v.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'
    raise TypeError(f"Unsupported field value type: {type(v).__name__}")


def unix_nanos(t: datetime) -> int:
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    delta = t - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000


def to_line_protocol(m: Metric) -> str:
    """
    Serialize one metric as an InfluxDB line protocol line (no trailing newline):

      file,host=a explicitstringtypeName="Bilbo",n=1i 3600000000000
    """
    if not m.fields:
        raise ValueError(f"metric {m.name!r} has no fields; line protocol needs at least one")

    head = _escape(m.name, ", ")
    for k in sorted(m.tags):
        head += f",{_escape(k, ',= ')}={_escape(m.tags[k], ',= ')}"
    body = ",".join(
        f"{_escape(k, ',= ')}={_format_field_value(m.fields[k])}" for k in sorted(m.fields)
    )
    return f"{head} {body} {unix_nanos(m.time)}"


# ============================================================================
# Metric → table
# ============================================================================

def metrics_to_frame(metrics: List[Metric]) -> pd.DataFrame:
    """One row per metric: name, timestamp, then one `fields.<key>` column per field."""
    rows = []
    for m in metrics:
        row: Dict[str, Any] = {"name": m.name, "timestamp": m.time.isoformat()}
        row.update({f"fields.{k}": v for k, v in m.fields.items()})
        rows.append(row)
    return pd.DataFrame(rows)
