"""Merge of the persisted activation list with discovered packages."""

from __future__ import annotations

import json
import logging
import os
from typing import Dict, Iterable

from common.errors import InvalidModList
from constants import Constants
from versioning.manifest import MOD_LIST_SCHEMA, first_schema_error
from versioning.models import EnabledState

logger = logging.getLogger(__name__)

EnablementRecord = Dict[str, bool]


def load_mod_list(path: str) -> EnablementRecord:
    """Read the activation list (``mod-list.json``).

    A missing file means every package is enabled, i.e. an empty record.
    When a name appears twice the last entry wins.

    Raises:
        InvalidModList: when the file exists but cannot be decoded.
    """
    if not os.path.isfile(path):
        logger.info("No activation list at %s; enabling everything", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8-sig") as fh:
            doc = json.load(fh)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidModList(f"Cannot read activation list {path}: {exc}") from exc

    problem = first_schema_error(MOD_LIST_SCHEMA, doc)
    if problem:
        raise InvalidModList(f"{path}: {problem}")
    return {item["name"]: item["enabled"] for item in doc["mods"]}


def resolve_enablement(discovered: Iterable[str], record: EnablementRecord) -> Dict[str, EnabledState]:
    """Decide the enabled state of each discovered package.

    Packages default to enabled unless the record disables them. The base
    package is always present and enabled. Record entries for packages that
    were not discovered are dropped.
    """
    states: Dict[str, EnabledState] = {Constants.BASE_PACKAGE: EnabledState.ENABLED}
    for name in discovered:
        if name == Constants.BASE_PACKAGE:
            continue
        enabled = record.get(name, True)
        states[name] = EnabledState.ENABLED if enabled else EnabledState.DISABLED
        if not enabled:
            logger.info("Package %s disabled by activation list", name)

    if record.get(Constants.BASE_PACKAGE) is False:
        logger.warning("Ignoring request to disable '%s'", Constants.BASE_PACKAGE)
    unknown = sorted(set(record) - set(states))
    if unknown:
        logger.debug("Activation list names not discovered: %s", ", ".join(unknown))
    return states
