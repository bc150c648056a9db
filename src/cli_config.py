"""CLI configuration overrides for resolver tunables.

Extracted from modgate.py to keep the entrypoint slim. Precedence, lowest to
highest: Constants defaults, YAML/JSON config file, CLI flags.
"""

from __future__ import annotations

import logging

from constants import Constants, _load_yaml_config, apply_config

logger = logging.getLogger(__name__)


def load_config(args) -> None:
    """Load the config file named by ``--config`` (or a default location) onto Constants.

    Raises:
        ValueError, OSError: when the file exists but is unusable.
    """
    cfg = _load_yaml_config(getattr(args, "CONFIG", None))
    if cfg:
        apply_config(cfg)


def apply_resolver_overrides(args) -> None:
    """Apply CLI overrides for resolver flags (CLI has highest precedence)."""
    workers = getattr(args, "WORKERS", None)
    if workers is not None:
        if workers < 1:
            raise ValueError("--workers must be at least 1")
        Constants.DISCOVERY_WORKERS = workers
    if getattr(args, "STRICT", False):
        Constants.STRICT_REQUIREMENTS = True
    if getattr(args, "IMPLICIT_BASE", False):
        Constants.IMPLICIT_BASE_DEPENDENCY = True
    logger.debug(
        "Resolver settings: workers=%s strict=%s implicit_base=%s",
        Constants.DISCOVERY_WORKERS,
        Constants.STRICT_REQUIREMENTS,
        Constants.IMPLICIT_BASE_DEPENDENCY,
    )
