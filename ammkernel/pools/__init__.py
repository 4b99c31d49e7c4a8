"""Pool management package.

Provides the Registry that creates and looks up pools by canonical pair key.
"""

from .registry import Registry
from .types import PairKey

__all__ = [
    "PairKey",
    "Registry",
]
