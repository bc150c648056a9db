"""Structural classification of storage entries under the mods directory."""

from __future__ import annotations

import logging
import os
from enum import Enum

from common.errors import InvalidStructure
from constants import Constants

logger = logging.getLogger(__name__)


class StorageKind(Enum):
    """How a package variant is laid out on disk."""

    DIRECTORY = "directory"
    SYMLINK = "symlink"
    ARCHIVE = "archive"

    @property
    def is_unpacked(self) -> bool:
        """True for layouts that expose files directly on the filesystem."""
        return self is not StorageKind.ARCHIVE


def classify(entry: str) -> StorageKind:
    """Classify one storage entry.

    Rules, first match wins:
      * name ends in the archive extension -> ARCHIVE
      * entry is a symbolic link -> SYMLINK
      * a manifest sits directly inside the entry -> DIRECTORY

    Args:
        entry: Path of the entry inside the mods directory.

    Returns:
        The StorageKind of the entry.

    Raises:
        InvalidStructure: when none of the rules match.
    """
    name = os.path.basename(os.path.normpath(entry))
    if name.lower().endswith(Constants.ARCHIVE_EXTENSION.lower()):
        return StorageKind.ARCHIVE
    if os.path.islink(entry):
        return StorageKind.SYMLINK
    if os.path.isdir(entry) and os.path.isfile(os.path.join(entry, Constants.MANIFEST_FILE)):
        return StorageKind.DIRECTORY
    raise InvalidStructure(entry, f"no {Constants.MANIFEST_FILE} found and not an archive or symlink")
