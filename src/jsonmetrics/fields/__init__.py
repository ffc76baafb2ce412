from . import types
from . import decode
from . import query
from . import coerce
from . import config

__all__ = [
    "types",
    "decode",
    "query",
    "coerce",
    "config",
]
