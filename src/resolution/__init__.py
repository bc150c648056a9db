"""Resolution stages over discovered package variants.

- discovery.py: storage entries -> package variants
- enablement.py: activation list merge
- conflicts.py: incompatibility and requirement checks
- load_order.py: deterministic topological order
- pipeline.py: the stages chained together
"""

from .pipeline import resolve  # noqa: F401
from .load_order import resolve_order  # noqa: F401
from .conflicts import check_conflicts, check_requirements  # noqa: F401
from .enablement import load_mod_list, resolve_enablement  # noqa: F401
from .discovery import discover_variants  # noqa: F401

__all__ = [
    "resolve",
    "resolve_order",
    "check_conflicts",
    "check_requirements",
    "load_mod_list",
    "resolve_enablement",
    "discover_variants",
]
