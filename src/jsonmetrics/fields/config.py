from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import json

import yaml

from jsonmetrics.schemas.models import ParserConfigModel
from .types import FieldSpec, RecordSpec

TYPE_ALIASES: Dict[str, str] = {
    "string": "string",
    "str": "string",
    "int": "int",
    "integer": "int",
    "float": "float",
    "double": "float",
    "bool": "bool",
    "boolean": "bool",
}


@dataclass
class ParserSettings:
    query_syntax: str = "key"
    configs: List[RecordSpec] = field(default_factory=list)


def normalize_type(typ: Optional[str]) -> Optional[str]:
    if typ is None or str(typ).strip() == "":
        return None
    key = str(typ).strip().lower()
    if key not in TYPE_ALIASES:
        raise ValueError(f"Unknown field type {typ!r}. Choose one of {sorted(TYPE_ALIASES)}")
    return TYPE_ALIASES[key]


def normalize_fields(fields: List[dict]) -> List[FieldSpec]:
    out: List[FieldSpec] = []
    for f in fields or []:
        out.append(FieldSpec(
            name=f["name"],
            query=f["query"],
            type=normalize_type(f.get("type")),
        ))
    return out


def build_config(spec: Dict[str, Any]) -> RecordSpec:
    if "metric_name" not in spec:
        raise KeyError("metric config missing 'metric_name'")
    return RecordSpec(
        metric_name=str(spec["metric_name"]),
        fields=normalize_fields(spec.get("fields", [])),
    )


def _metric_blocks(spec: Dict[str, Any]) -> Dict[str, Any]:
    """Accept either {metrics: [...]} or a single bare {metric_name, fields}."""
    if "metrics" in spec:
        return spec
    if "metric_name" in spec:
        rest = {k: v for k, v in spec.items() if k not in ("metric_name", "fields")}
        rest["metrics"] = [{"metric_name": spec["metric_name"], "fields": spec.get("fields", [])}]
        return rest
    raise ValueError("config must contain 'metrics' or 'metric_name'")


def build_settings(spec: Dict[str, Any]) -> ParserSettings:
    """
    Validate a config mapping and normalise it into ParserSettings.

    Raises pydantic.ValidationError for shape errors and ValueError for
    unknown types or query syntaxes.
    """
    if not isinstance(spec, dict):
        raise ValueError(f"config must be a mapping; got {type(spec).__name__}")
    model = ParserConfigModel.model_validate(_metric_blocks(spec))
    return ParserSettings(
        query_syntax=model.query_syntax,
        configs=[build_config(m.model_dump()) for m in model.metrics],
    )


def load_config(path: Path) -> ParserSettings:
    """Load a YAML or JSON parser config file."""
    path = Path(path).expanduser().resolve()
    if not path.is_file():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as f:
        try:
            spec = json.load(f) if path.suffix.lower() == ".json" else yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: invalid YAML: {e}") from e
    if spec is None:
        raise ValueError(f"{path}: empty config")
    return build_settings(spec)
