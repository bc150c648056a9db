"""Hand-off of a resolved load order to the script host.

The scripting runtime is an external collaborator. It receives the immutable
order and, through each package's reader, pulls the files its control scripts
reference without knowing how the package is stored.
"""

from __future__ import annotations

import logging
from typing import Protocol

from common.logging_utils import Timer
from versioning.models import ResolvedLoadOrder

logger = logging.getLogger(__name__)


class ScriptHost(Protocol):
    """What the resolver needs from a script runtime."""

    def load(self, order: ResolvedLoadOrder) -> None:
        """Execute the packages' control scripts in order."""


def hand_off(order: ResolvedLoadOrder, host: ScriptHost) -> None:
    """Pass *order* to *host*. Errors raised by the host propagate unchanged.

    Package readers stay open for the host; it releases them with
    ``order.close()`` (or per package with ``reader.close()``) when done.
    """
    logger.info("Handing %d packages to %s", len(order), type(host).__name__)
    with Timer() as t:
        host.load(order)
    logger.debug("Script host finished in %d ms", t.duration_ms())
