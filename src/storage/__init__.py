"""Package storage access.

- structure.py: classification of mods-directory entries
- reader.py: uniform file access over directories, symlinks and archives
"""

from .structure import StorageKind, classify
from .reader import PackageReader

__all__ = [
    "StorageKind",
    "classify",
    "PackageReader",
]
