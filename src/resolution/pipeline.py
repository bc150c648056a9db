"""End-to-end resolution: discovery through load order.

Nothing is returned unless every stage succeeds; a failure after discovery
propagates and every reader opened during discovery is closed. On success
only the readers of packages in the order stay open; the caller releases
them with ResolvedLoadOrder.close().
"""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Dict, Iterable, List, Optional

from common.errors import MalformedManifest, MissingDependency, ModGateError
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from versioning.models import Package, PackageVariant, ResolvedLoadOrder
from versioning.selector import select_all
from .conflicts import check_conflicts, check_requirements
from .discovery import DiscoveryFailure, discover_variants
from .enablement import EnablementRecord, load_mod_list, resolve_enablement
from .load_order import resolve_order

logger = logging.getLogger(__name__)


def _release(variants: Iterable[PackageVariant]) -> None:
    for variant in variants:
        variant.reader.close()


def _unrecoverable_failure(
    failures: List[DiscoveryFailure],
    selected: Dict[str, PackageVariant],
    record: EnablementRecord,
) -> Optional[MalformedManifest]:
    """Return the manifest error of a wanted package left with no valid variant."""
    for failure in failures:
        name = failure.package_name
        if not isinstance(failure.error, MalformedManifest) or not name:
            continue
        if name in selected or name == Constants.BASE_PACKAGE:
            continue
        if record.get(name, True):
            return failure.error
    return None


def build_packages(
    selected: Dict[str, PackageVariant],
    record: EnablementRecord,
) -> List[Package]:
    """Combine selected variants and enablement into Package objects.

    The base package is included without a variant.
    """
    states = resolve_enablement(selected.keys(), record)
    packages = []
    for name, state in states.items():
        packages.append(Package(name=name, state=state, variant=selected.get(name)))
    return packages


def resolve(
    mods_dir: str,
    *,
    mod_list_path: Optional[str] = None,
    workers: Optional[int] = None,
    strict: Optional[bool] = None,
) -> ResolvedLoadOrder:
    """Resolve the load order for the packages stored under *mods_dir*.

    Args:
        mods_dir: Storage root holding the packages, activation list and settings.
        mod_list_path: Activation list override; defaults to the one in *mods_dir*.
        workers: Discovery thread count; defaults to Constants.DISCOVERY_WORKERS.
        strict: Raise on unmet requirements; defaults to Constants.STRICT_REQUIREMENTS.

    Raises:
        InvalidModList, MalformedManifest, IncompatiblePackages,
        MissingDependency, CyclicDependency
    """
    strict = Constants.STRICT_REQUIREMENTS if strict is None else strict
    mod_list_path = mod_list_path or os.path.join(mods_dir, Constants.MOD_LIST_FILE)

    with Timer() as t:
        record = load_mod_list(mod_list_path)
        discovery = discover_variants(mods_dir, workers=workers)
        selected = select_all(discovery.variants)
        winners = {id(v) for v in selected.values()}
        _release(v for v in discovery.variants if id(v) not in winners)

        try:
            fatal = _unrecoverable_failure(discovery.failures, selected, record)
            if fatal is not None:
                raise fatal

            packages = build_packages(selected, record)
            check_conflicts(packages)

            issues = check_requirements(packages)
            if strict and issues:
                first = issues[0]
                raise MissingDependency(first.package, first.target, first.reason)

            order = resolve_order(packages, settings_path=discovery.settings_path)
        except ModGateError:
            _release(selected.values())
            raise
        _release(p.variant for p in packages if p.variant and not p.enabled)
        warnings = [f"skipped {os.path.basename(f.entry)}: {f.error}" for f in discovery.failures]
        warnings.extend(f"{i.package}: dependency {i.target} {i.reason}" for i in issues)
        order = dataclasses.replace(order, warnings=tuple(warnings))

    logger.info("Resolved load order of %d packages: %s", len(order), ", ".join(order.names()))
    if is_debug_enabled(logger):
        logger.debug(
            "Resolution finished",
            extra=extra_context(
                event="function_exit",
                component="pipeline",
                action="resolve",
                outcome="success",
                count=len(order),
                duration_ms=t.duration_ms(),
            ),
        )
    return order
