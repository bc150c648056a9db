"""Exception hierarchy shared by the resolver stages."""

from __future__ import annotations

from typing import Optional, Sequence


class ModGateError(Exception):
    """Base class for all resolver errors."""


class InvalidStructure(ModGateError):
    """Raised when a storage entry is neither a directory, symlink nor archive."""

    def __init__(self, entry: str, reason: str = "not a recognised package layout"):
        super().__init__(f"Invalid package structure '{entry}': {reason}")
        self.entry = entry
        self.reason = reason


class PackageFileNotFound(ModGateError, FileNotFoundError):
    """Raised when a virtual read misses."""

    def __init__(self, entry: str, relative_name: str):
        super().__init__(f"File '{relative_name}' not found in '{entry}'")
        self.entry = entry
        self.relative_name = relative_name


class MalformedManifest(ModGateError):
    """Raised when a manifest does not match the expected schema.

    ``package_name`` is set when the document was readable far enough to
    name the package it belongs to.
    """

    def __init__(self, message: str, package_name: Optional[str] = None, entry: Optional[str] = None):
        super().__init__(message)
        self.package_name = package_name
        self.entry = entry


class MalformedDependency(ModGateError):
    """Raised when a raw dependency string does not follow the grammar."""

    def __init__(self, raw: str, reason: str = "unrecognised dependency syntax"):
        super().__init__(f"Malformed dependency '{raw}': {reason}")
        self.raw = raw


class InvalidModList(ModGateError):
    """Raised when the persisted activation list cannot be decoded."""


class IncompatiblePackages(ModGateError):
    """Raised when two enabled packages declare each other incompatible."""

    def __init__(self, package: str, target: str):
        super().__init__(f"Package '{package}' is incompatible with enabled package '{target}'")
        self.package = package
        self.target = target


class CyclicDependency(ModGateError):
    """Raised when the precedence graph has no valid linear order."""

    def __init__(self, members: Sequence[str]):
        self.members = list(members)
        self.name = self.members[0] if self.members else ""
        super().__init__("Dependency cycle detected: " + " -> ".join(self.members + self.members[:1]))


class MissingDependency(ModGateError):
    """Raised in strict mode when a declared requirement cannot be met."""

    def __init__(self, package: str, target: str, reason: str):
        super().__init__(f"Package '{package}' dependency on '{target}' not met: {reason}")
        self.package = package
        self.target = target
        self.reason = reason
