"""Constants used in the project."""

import json
import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONFIG_ERROR = 2
    EXIT_WARNINGS = 3
    INCOMPATIBLE_PACKAGES = 4
    CYCLIC_DEPENDENCY = 5
    MISSING_DEPENDENCY = 6
    MALFORMED_PACKAGE = 7


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    BASE_PACKAGE = "base"
    MANIFEST_FILE = "info.json"
    MOD_LIST_FILE = "mod-list.json"
    SETTINGS_FILE = "mod-settings.dat"
    ARCHIVE_EXTENSION = ".zip"
    LOCALE_DIR = "locale"
    LOCALE_EXTENSION = ".cfg"
    DEFAULT_LANGUAGE = "en"
    EXPORT_FORMATS = ["json", "csv"]
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "MODGATE_LOG_LEVEL"

    # Resolver tunables (overridable from YAML config and CLI)
    DISCOVERY_WORKERS = 1
    STRICT_REQUIREMENTS = False
    IMPLICIT_BASE_DEPENDENCY = False

    CONFIG_SECTION = "resolver"
    DEFAULT_CONFIG_PATHS = [
        "modgate.yml",
        "modgate.yaml",
        os.path.join("~", ".config", "modgate", "modgate.yml"),
    ]


# Config keys accepted under the "resolver" section, mapped onto Constants.
_CONFIG_KEYS = {
    "base_package": ("BASE_PACKAGE", str),
    "manifest_file": ("MANIFEST_FILE", str),
    "mod_list_file": ("MOD_LIST_FILE", str),
    "settings_file": ("SETTINGS_FILE", str),
    "archive_extension": ("ARCHIVE_EXTENSION", str),
    "workers": ("DISCOVERY_WORKERS", int),
    "strict": ("STRICT_REQUIREMENTS", bool),
    "implicit_base_dependency": ("IMPLICIT_BASE_DEPENDENCY", bool),
}


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load a YAML (or JSON) configuration file.

    When *path* is None the default locations are probed in order and the
    first existing file wins. A missing file yields an empty dict.

    Args:
        path (str, optional): Explicit config file path.

    Returns:
        dict: Parsed configuration mapping.
    """
    candidates = [path] if path else Constants.DEFAULT_CONFIG_PATHS
    for candidate in candidates:
        full = os.path.expanduser(candidate)
        if not os.path.isfile(full):
            if path:
                logger.warning("Config file not found: %s", full)
            continue
        with open(full, "r", encoding="utf-8") as fh:
            if full.lower().endswith(".json"):
                data = json.load(fh)
            else:
                import yaml  # pylint: disable=import-outside-toplevel

                data = yaml.safe_load(fh)
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level is not a mapping", full)
            return {}
        logger.debug("Loaded config from %s", full)
        return data
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply the ``resolver`` section of a config mapping onto Constants.

    Unknown keys are ignored with a warning; values that cannot be coerced
    raise ValueError.
    """
    section = cfg.get(Constants.CONFIG_SECTION, {}) if isinstance(cfg, dict) else {}
    if not isinstance(section, dict):
        raise ValueError(f"'{Constants.CONFIG_SECTION}' config section must be a mapping")
    for key, value in section.items():
        target = _CONFIG_KEYS.get(key)
        if target is None:
            logger.warning("Unknown config key: %s.%s", Constants.CONFIG_SECTION, key)
            continue
        attr, kind = target
        if kind is bool and not isinstance(value, bool):
            raise ValueError(f"{Constants.CONFIG_SECTION}.{key} must be a boolean")
        setattr(Constants, attr, kind(value))
