from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
import logging

from jsonmetrics.errors import QueryNotFound
from jsonmetrics.fields.coerce import TypedField, coerce_value
from jsonmetrics.fields.config import ParserSettings
from jsonmetrics.fields.decode import decode_document
from jsonmetrics.fields.query import KeyLocator, Locator, get_locator
from jsonmetrics.fields.types import RecordSpec
from jsonmetrics.metric.types import Metric


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Parser:
    """
    Turns one JSON document into one Metric per configured RecordSpec.

    Each call runs decode -> locate -> coerce -> assemble and stops at the
    first failure; no partial metric is returned. Configuration, clock and
    locator are only read after construction, so one Parser can serve
    concurrent callers.
    """

    configs: Sequence[RecordSpec] = field(default_factory=tuple)
    time_func: Callable[[], datetime] = utcnow
    locator: Locator = field(default_factory=KeyLocator)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("jsonmetrics"))

    def __post_init__(self):
        self.configs = tuple(self.configs)
        for spec in self.configs:
            if not spec.fields:
                self.logger.warning("metric %r has no fields configured", spec.metric_name)
            dupes = [n for n, c in Counter(f.name for f in spec.fields).items() if c > 1]
            if dupes:
                self.logger.warning(
                    "metric %r: field names %s configured more than once; last one wins",
                    spec.metric_name, dupes,
                )
            # malformed queries fail here, not on the first document
            for f in spec.fields:
                try:
                    self.locator.parse(f.query)
                except ValueError as e:
                    raise ValueError(f"metric {spec.metric_name!r} field {f.name!r}: {e}") from e

    @classmethod
    def from_settings(
        cls,
        settings: ParserSettings,
        *,
        time_func: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "Parser":
        kwargs: Dict[str, Any] = {
            "configs": settings.configs,
            "locator": get_locator(settings.query_syntax),
        }
        if time_func is not None:
            kwargs["time_func"] = time_func
        if logger is not None:
            kwargs["logger"] = logger
        return cls(**kwargs)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def parse_line(self, line: Union[str, bytes]) -> Optional[Metric]:
        """Parse one line (text or UTF-8 bytes) and return the metric for the first RecordSpec."""
        tree = decode_document(line)
        if not self.configs:
            self.logger.warning("parse_line called with no metrics configured")
            return None
        return self._build(tree, self.configs[0])

    def parse(self, buf: bytes) -> List[Metric]:
        """Parse a whole buffer; one metric per RecordSpec, in declaration order."""
        tree = decode_document(buf)
        return [self._build(tree, spec) for spec in self.configs]

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------
    def _build(self, tree: Any, spec: RecordSpec) -> Metric:
        fields: Dict[str, TypedField] = {}
        for f in spec.fields:
            value, found = self.locator.locate(tree, f.query)
            if not found:
                raise QueryNotFound(
                    f"metric {spec.metric_name!r} field {f.name!r}: query {f.query!r} not found",
                    query=f.query,
                    field=f.name,
                )
            fields[f.name] = coerce_value(value, f.type, query=f.query, field=f.name)

        metric = Metric(name=spec.metric_name, tags={}, fields=fields, time=self.time_func())
        self.logger.debug("built metric %r with %d field(s)", metric.name, len(fields))
        return metric
