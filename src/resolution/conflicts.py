"""Checks over the enabled set before ordering: incompatibilities and unmet requirements."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

from common.errors import IncompatiblePackages
from versioning.models import Package, RelationKind
from .naming import natural_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnsatisfiedDependency:
    """A declared relation the enabled set does not meet."""
    package: str
    target: str
    reason: str


def _enabled_by_name(packages: Iterable[Package]) -> Dict[str, Package]:
    return {p.name: p for p in packages if p.enabled}


def check_conflicts(packages: Iterable[Package]) -> None:
    """Fail on the first incompatible relation whose target is enabled.

    Packages are scanned in natural name order, relations in declaration
    order, so the reported pair is stable. A package naming itself is
    ignored, as it is for ordering.

    Raises:
        IncompatiblePackages: naming the declaring package and its target.
    """
    enabled = _enabled_by_name(packages)
    for name in sorted(enabled, key=natural_key):
        for relation in enabled[name].relations:
            if relation.target == name:
                continue
            if relation.kind is RelationKind.INCOMPATIBLE and relation.target in enabled:
                raise IncompatiblePackages(name, relation.target)


def check_requirements(packages: Iterable[Package]) -> List[UnsatisfiedDependency]:
    """Report required targets that are missing and version constraints not met.

    Optional relations only contribute when their target is enabled; a
    constraint on such a target must still hold.
    """
    enabled = _enabled_by_name(packages)
    issues: List[UnsatisfiedDependency] = []
    for name in sorted(enabled, key=natural_key):
        for relation in enabled[name].relations:
            if relation.kind is RelationKind.INCOMPATIBLE:
                continue
            target = enabled.get(relation.target)
            if target is None:
                if relation.kind is RelationKind.REQUIRED:
                    issues.append(UnsatisfiedDependency(name, relation.target, "not installed or disabled"))
                continue
            if not relation.is_satisfied_by(target.version):
                issues.append(
                    UnsatisfiedDependency(
                        name,
                        relation.target,
                        f"requires {relation.op.value} {relation.version}, found {target.version}",
                    )
                )
    for issue in issues:
        logger.warning("%s: dependency %s %s", issue.package, issue.target, issue.reason)
    return issues
