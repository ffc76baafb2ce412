from . import types
from . import emit

__all__ = [
    "types",
    "emit",
]
