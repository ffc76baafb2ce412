from jsonmetrics.errors import ParseError, InvalidDocument, QueryNotFound, UnsupportedCoercion
from jsonmetrics.fields.types import FieldSpec, RecordSpec
from jsonmetrics.metric.types import Metric
from jsonmetrics.parser import Parser

__version__ = "0.1.0"

__all__ = [
    "FieldSpec",
    "RecordSpec",
    "Metric",
    "Parser",
    "ParseError",
    "InvalidDocument",
    "QueryNotFound",
    "UnsupportedCoercion",
]
