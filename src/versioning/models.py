"""Data models for package variants, dependency relations and load orders."""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import semantic_version

from storage.reader import PackageReader
from storage.structure import StorageKind


class RelationKind(Enum):
    """Strength of a declared inter-package link."""
    REQUIRED = "required"
    OPTIONAL = "optional"
    OPTIONAL_HIDDEN = "optional_hidden"
    INCOMPATIBLE = "incompatible"
    ORDER_INDEPENDENT = "order_independent"

    @property
    def affects_order(self) -> bool:
        """True when the relation places its target before the declaring package."""
        return self in (RelationKind.REQUIRED, RelationKind.OPTIONAL, RelationKind.OPTIONAL_HIDDEN)


class ComparatorOp(Enum):
    """Version comparators allowed in a dependency constraint."""
    EQ = "="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="

    def holds(self, actual: semantic_version.Version, expected: semantic_version.Version) -> bool:
        """Return True when ``actual <op> expected``."""
        return _OPERATORS[self](actual, expected)


_OPERATORS: Dict[ComparatorOp, Callable[[Any, Any], bool]] = {
    ComparatorOp.EQ: operator.eq,
    ComparatorOp.GT: operator.gt,
    ComparatorOp.GE: operator.ge,
    ComparatorOp.LT: operator.lt,
    ComparatorOp.LE: operator.le,
}


class EnabledState(Enum):
    """Activation state of a package."""
    DISABLED = "disabled"
    ENABLED = "enabled"


@dataclass(frozen=True)
class DependencyRelation:
    """A typed dependency parsed from a raw manifest string."""
    target: str
    kind: RelationKind
    op: Optional[ComparatorOp] = None
    version: Optional[semantic_version.Version] = None

    def is_satisfied_by(self, version: Optional[semantic_version.Version]) -> bool:
        """Check the version constraint against a candidate version.

        Relations without a constraint, and targets without a version (the
        bundled base package), always satisfy.
        """
        if self.op is None or self.version is None or version is None:
            return True
        return self.op.holds(version, self.version)

    def __str__(self) -> str:
        prefix = {
            RelationKind.INCOMPATIBLE: "! ",
            RelationKind.OPTIONAL: "? ",
            RelationKind.OPTIONAL_HIDDEN: "(?) ",
            RelationKind.ORDER_INDEPENDENT: "~ ",
        }.get(self.kind, "")
        constraint = f" {self.op.value} {self.version}" if self.op and self.version else ""
        return f"{prefix}{self.target}{constraint}"


@dataclass
class ManifestDescriptor:
    """Decoded manifest of one package variant."""
    name: str
    version: semantic_version.Version
    dependencies: Optional[List[str]]  # None when the manifest omits the key
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PackageVariant:
    """One on-disk candidate for a package name."""
    name: str
    path: str
    kind: StorageKind
    version: semantic_version.Version
    relations: List[DependencyRelation]
    sequence: int  # discovery order, lower was seen first
    reader: PackageReader = field(repr=False, compare=False)
    manifest: Optional[ManifestDescriptor] = field(default=None, repr=False, compare=False)


@dataclass
class Package:
    """A resolved package: a name, its state and the selected variant.

    The bundled base package has no variant.
    """
    name: str
    state: EnabledState = EnabledState.ENABLED
    variant: Optional[PackageVariant] = None

    @property
    def enabled(self) -> bool:
        return self.state is EnabledState.ENABLED

    @property
    def version(self) -> Optional[semantic_version.Version]:
        return self.variant.version if self.variant else None

    @property
    def relations(self) -> List[DependencyRelation]:
        return list(self.variant.relations) if self.variant else []

    @property
    def reader(self) -> Optional[PackageReader]:
        return self.variant.reader if self.variant else None

    @property
    def kind(self) -> Optional[StorageKind]:
        return self.variant.kind if self.variant else None


@dataclass(frozen=True)
class ResolvedLoadOrder:
    """Immutable load order handed to the script host."""
    packages: Tuple[Package, ...]
    settings_path: Optional[str] = None
    warnings: Tuple[str, ...] = ()  # skipped entries and unmet requirements

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages)

    def __len__(self) -> int:
        return len(self.packages)

    def __getitem__(self, index: int) -> Package:
        return self.packages[index]

    def names(self) -> List[str]:
        """Package names in load order."""
        return [p.name for p in self.packages]

    def index(self, name: str) -> int:
        """Position of *name* in the order; ValueError when absent."""
        return self.names().index(name)

    def close(self) -> None:
        """Release the archive handles held by the packages' readers."""
        for package in self.packages:
            if package.reader is not None:
                package.reader.close()
