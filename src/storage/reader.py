"""Virtual file access over directory, symlink and archive package variants.

Every layer above this module reads package files through
:class:`PackageReader`; the storage kind is dispatched here and nowhere else.
"""

from __future__ import annotations

import logging
import os
import posixpath
import threading
import zipfile
from typing import Dict, List, Optional

from common.errors import InvalidStructure, PackageFileNotFound
from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from storage.structure import StorageKind

logger = logging.getLogger(__name__)


def _normalize_name(relative_name: str) -> Optional[str]:
    """Return a clean posix-style relative name, or None if it escapes the root."""
    name = relative_name.replace("\\", "/").strip()
    if not name or name.startswith("/"):
        return None
    name = posixpath.normpath(name)
    if name == "." or name == ".." or name.startswith("../"):
        return None
    return name


class PackageReader:
    """Reads files out of a single package variant by relative name.

    For archives the zip handle is opened on first access and kept, so the
    central directory is parsed once per reader. It is released by
    :meth:`close`, or when the ``with reader:`` scope that opened it ends.
    A scope entered while the handle is already open leaves it open. The
    reader may move between threads but is not meant for concurrent use.
    """

    def __init__(self, path: str, kind: StorageKind):
        self.path = path
        self.kind = kind
        self._index: Optional[Dict[str, str]] = None
        self._zip: Optional[zipfile.ZipFile] = None
        self._scopes: List[bool] = []  # per open scope: did it open the handle
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"PackageReader({self.path!r}, {self.kind.value})"

    # ------------------------------------------------------------------
    # Archive handle
    # ------------------------------------------------------------------

    def __enter__(self) -> "PackageReader":
        with self._lock:
            opened = False
            if self.kind is StorageKind.ARCHIVE and self._zip is None:
                self._zip = self._open_archive()
                opened = True
            self._scopes.append(opened)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        with self._lock:
            opened = self._scopes.pop() if self._scopes else False
            if opened:
                self._close_archive()

    @property
    def is_open(self) -> bool:
        """True while an archive handle is held."""
        return self._zip is not None

    def close(self) -> None:
        """Release the archive handle, if any. The index is kept."""
        with self._lock:
            self._scopes = [False] * len(self._scopes)
            self._close_archive()

    def _open_archive(self) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(self.path, "r")
        except (zipfile.BadZipFile, IsADirectoryError) as exc:
            raise InvalidStructure(self.path, f"unreadable archive: {exc}") from exc

    def _close_archive(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def _archive(self) -> zipfile.ZipFile:
        """Return the open handle, opening it on first use."""
        with self._lock:
            if self._zip is None:
                self._zip = self._open_archive()
            return self._zip

    # ------------------------------------------------------------------
    # Archive index
    # ------------------------------------------------------------------

    def _archive_index(self, zf: zipfile.ZipFile) -> Dict[str, str]:
        """Map logical names to member names.

        The content root is the archive root when the manifest sits there,
        otherwise the first top-level folder holding a manifest. Members
        outside the content root are not visible.
        """
        if self._index is not None:
            return self._index
        members = []
        for member in zf.namelist():
            if member.endswith("/"):
                continue
            logical = _normalize_name(member)
            if logical is not None:
                members.append((logical, member))

        manifest = Constants.MANIFEST_FILE
        logical_names = {logical for logical, _ in members}
        lead = ""
        if manifest not in logical_names:
            for logical, _ in members:
                head, sep, rest = logical.partition("/")
                if sep and rest == manifest:
                    lead = f"{head}/"
                    break

        index: Dict[str, str] = {}
        for logical, member in members:
            if lead and not logical.startswith(lead):
                continue
            index.setdefault(logical[len(lead):], member)
        self._index = index
        if is_debug_enabled(logger):
            logger.debug(
                "Indexed archive",
                extra=extra_context(
                    event="archive_index", component="reader", target=self.path, count=len(index)
                ),
            )
        return index

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read_file(self, relative_name: str) -> bytes:
        """Return the bytes of *relative_name* inside this variant.

        Raises:
            PackageFileNotFound: if the file does not exist in the variant.
        """
        name = _normalize_name(relative_name)
        if name is None:
            raise PackageFileNotFound(self.path, relative_name)

        if self.kind is StorageKind.ARCHIVE:
            zf = self._archive()
            member = self._archive_index(zf).get(name)
            if member is None:
                raise PackageFileNotFound(self.path, relative_name)
            return zf.read(member)

        full = os.path.join(self.path, *name.split("/"))
        try:
            with open(full, "rb") as fh:
                return fh.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise PackageFileNotFound(self.path, relative_name) from exc

    def list_files(self, prefix: str = "") -> List[str]:
        """List logical file names under a directory *prefix*, sorted."""
        base = _normalize_name(prefix) if prefix else ""
        if base is None:
            return []
        lead = f"{base}/" if base else ""

        if self.kind is StorageKind.ARCHIVE:
            names = list(self._archive_index(self._archive()))
            return sorted(n for n in names if n.startswith(lead))

        top = os.path.join(self.path, *base.split("/")) if base else self.path
        found: List[str] = []
        for dirpath, _dirnames, filenames in os.walk(top, followlinks=True):
            rel_dir = os.path.relpath(dirpath, self.path).replace(os.sep, "/")
            for filename in filenames:
                found.append(filename if rel_dir == "." else f"{rel_dir}/{filename}")
        return sorted(found)
