"""Token parsing utilities for manifest versions and dependency strings."""

import re
from typing import Optional

import semantic_version

from common.errors import MalformedDependency
from .models import ComparatorOp, DependencyRelation, RelationKind

_VERSION_RE = re.compile(r"^\s*([0-9]+)\.([0-9]+)\.([0-9]+)\s*$")

# <prefix>? <name> (<op> <version>)?
# Names may contain spaces; they run up to the comparator and are trimmed.
_DEPENDENCY_RE = re.compile(
    r"""^\s*
    (?P<prefix>\(\?\)|[!?~])?\s*
    (?P<name>[^\s<>=!?~(](?:[^<>=]*?[^\s<>=])?)\s*
    (?:(?P<op><=|>=|=|<|>)\s*(?P<version>\S+))?
    \s*$""",
    re.VERBOSE,
)

_PREFIXES = {
    None: RelationKind.REQUIRED,
    "!": RelationKind.INCOMPATIBLE,
    "?": RelationKind.OPTIONAL,
    "(?)": RelationKind.OPTIONAL_HIDDEN,
    "~": RelationKind.ORDER_INDEPENDENT,
}


def parse_version(text: str) -> Optional[semantic_version.Version]:
    """Parse ``major.minor.patch`` made of non-negative integers.

    Leading zeros are tolerated ("0.18.01"), prerelease and build tags are
    not. Returns None when the text does not match.
    """
    if not isinstance(text, str):
        return None
    m = _VERSION_RE.match(text)
    if not m:
        return None
    major, minor, patch = (int(g) for g in m.groups())
    return semantic_version.Version(major=major, minor=minor, patch=patch)


def parse_dependency(raw: str) -> DependencyRelation:
    """Parse a raw dependency string into a DependencyRelation.

    Examples: ``"base >= 1.1.0"``, ``"? bobs-metals"``, ``"(?) helper"``,
    ``"! conflicting-mod"``, ``"~ sibling = 2.0.0"``.

    Raises:
        MalformedDependency: when the string does not follow the grammar.
    """
    if not isinstance(raw, str):
        raise MalformedDependency(repr(raw), "dependency must be a string")
    m = _DEPENDENCY_RE.match(raw)
    if not m:
        raise MalformedDependency(raw)

    op = None
    version = None
    if m.group("op"):
        version = parse_version(m.group("version"))
        if version is None:
            raise MalformedDependency(raw, f"invalid version '{m.group('version')}'")
        op = ComparatorOp(m.group("op"))

    return DependencyRelation(
        target=m.group("name"),
        kind=_PREFIXES[m.group("prefix")],
        op=op,
        version=version,
    )
