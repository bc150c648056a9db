"""Selection of the winning variant among same-name candidates."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Sequence, Tuple

import semantic_version

from .models import PackageVariant

logger = logging.getLogger(__name__)


def variant_rank(variant: PackageVariant) -> Tuple[semantic_version.Version, int, int]:
    """Sort key for same-name variants; the largest key wins.

    Higher version first, then unpacked layouts (directory or symlink) over
    archives, then earlier discovery.
    """
    return (variant.version, 1 if variant.kind.is_unpacked else 0, -variant.sequence)


def select_variant(candidates: Sequence[PackageVariant]) -> PackageVariant:
    """Pick the single winning variant for one package name.

    Raises:
        ValueError: on an empty candidate list or mixed package names.
    """
    if not candidates:
        raise ValueError("No variants to select from")
    names = {c.name for c in candidates}
    if len(names) > 1:
        raise ValueError(f"Variants of different packages passed together: {sorted(names)}")

    winner = max(candidates, key=variant_rank)
    if len(candidates) > 1:
        logger.info(
            "Selected %s %s (%s) from %d variants",
            winner.name,
            winner.version,
            winner.kind.value,
            len(candidates),
        )
    return winner


def group_variants(variants: Iterable[PackageVariant]) -> Dict[str, List[PackageVariant]]:
    """Group variants by package name, keeping first-seen name order."""
    groups: Dict[str, List[PackageVariant]] = OrderedDict()
    for variant in variants:
        groups.setdefault(variant.name, []).append(variant)
    return groups


def select_all(variants: Iterable[PackageVariant]) -> Dict[str, PackageVariant]:
    """Select one winner per package name."""
    return {name: select_variant(group) for name, group in group_variants(variants).items()}
