"""Discovery of package variants under a mods directory.

Each storage entry is classified, its manifest is read through a
PackageReader and decoded. Entries are independent, so they may be processed
on a thread pool; results are merged in the calling thread in discovery
order.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from common.errors import (
    InvalidStructure,
    MalformedDependency,
    MalformedManifest,
    ModGateError,
    PackageFileNotFound,
)
from common.logging_utils import (
    Timer,
    extra_context,
    is_debug_enabled,
    log_discovered_entries,
)
from constants import Constants
from storage.reader import PackageReader
from storage.structure import classify
from versioning.manifest import parse_manifest
from versioning.models import DependencyRelation, PackageVariant
from versioning.parser import parse_dependency

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryFailure:
    """A storage entry that could not be turned into a variant."""
    entry: str
    error: ModGateError

    @property
    def package_name(self) -> Optional[str]:
        return getattr(self.error, "package_name", None)


@dataclass
class DiscoveryResult:
    """Variants found under a mods directory, in discovery order."""
    variants: List[PackageVariant] = field(default_factory=list)
    failures: List[DiscoveryFailure] = field(default_factory=list)
    settings_path: Optional[str] = None


def list_entries(mods_dir: str) -> List[str]:
    """Return candidate storage entries, sorted by name.

    The activation list and the settings blob are siblings of the packages
    and are skipped.
    """
    reserved = {Constants.MOD_LIST_FILE, Constants.SETTINGS_FILE}
    names = sorted(n for n in os.listdir(mods_dir) if n not in reserved and not n.startswith("."))
    return [os.path.join(mods_dir, n) for n in names]


def _parse_relations(raw_deps: Optional[List[str]], name: str, entry: str) -> List[DependencyRelation]:
    if raw_deps is None:
        if Constants.IMPLICIT_BASE_DEPENDENCY and name != Constants.BASE_PACKAGE:
            raw_deps = [Constants.BASE_PACKAGE]
        else:
            raw_deps = []
    relations = []
    for raw in raw_deps:
        try:
            relations.append(parse_dependency(raw))
        except MalformedDependency as exc:
            raise MalformedManifest(str(exc), package_name=name, entry=entry) from exc
    return relations


def load_variant(entry: str, sequence: int) -> PackageVariant:
    """Classify *entry* and decode its manifest into a PackageVariant.

    The reader keeps its archive handle open for later reads through the
    variant; it is closed here if the manifest cannot be loaded.

    Raises:
        InvalidStructure, PackageFileNotFound, MalformedManifest
    """
    kind = classify(entry)
    reader = PackageReader(entry, kind)
    try:
        data = reader.read_file(Constants.MANIFEST_FILE)
        manifest = parse_manifest(data, entry=entry)
        relations = _parse_relations(manifest.dependencies, manifest.name, entry)
    except ModGateError:
        reader.close()
        raise
    return PackageVariant(
        name=manifest.name,
        path=entry,
        kind=kind,
        version=manifest.version,
        relations=relations,
        sequence=sequence,
        reader=reader,
        manifest=manifest,
    )


def _load_or_fail(args: Tuple[str, int]) -> Union[PackageVariant, DiscoveryFailure]:
    entry, sequence = args
    try:
        return load_variant(entry, sequence)
    except (InvalidStructure, PackageFileNotFound, MalformedManifest) as exc:
        return DiscoveryFailure(entry=entry, error=exc)


def discover_variants(mods_dir: str, workers: Optional[int] = None) -> DiscoveryResult:
    """Discover every package variant under *mods_dir*.

    Args:
        mods_dir: The storage root.
        workers: Thread count for manifest loading; 1 runs inline.

    Returns:
        DiscoveryResult with variants and per-entry failures.
    """
    workers = workers if workers is not None else Constants.DISCOVERY_WORKERS
    entries = list_entries(mods_dir)
    if is_debug_enabled(logger):
        log_discovered_entries(logger, mods_dir, [os.path.basename(e) for e in entries])

    jobs = [(entry, i) for i, entry in enumerate(entries)]
    with Timer() as t:
        if workers and workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(_load_or_fail, jobs))
        else:
            outcomes = [_load_or_fail(job) for job in jobs]

    result = DiscoveryResult()
    settings = os.path.join(mods_dir, Constants.SETTINGS_FILE)
    if os.path.isfile(settings):
        result.settings_path = settings

    for outcome in outcomes:
        if isinstance(outcome, DiscoveryFailure):
            logger.warning("Skipping %s: %s", os.path.basename(outcome.entry), outcome.error)
            result.failures.append(outcome)
            continue
        if outcome.name == Constants.BASE_PACKAGE:
            outcome.reader.close()
            logger.warning(
                "Skipping %s: '%s' is bundled and cannot be overridden",
                os.path.basename(outcome.path),
                Constants.BASE_PACKAGE,
            )
            continue
        result.variants.append(outcome)

    if is_debug_enabled(logger):
        logger.debug(
            "Discovery finished",
            extra=extra_context(
                event="function_exit",
                component="discovery",
                action="discover_variants",
                count=len(result.variants),
                duration_ms=t.duration_ms(),
            ),
        )
    return result
