"""Natural, case-insensitive ordering of package names."""

from typing import Any, Tuple

from natsort import natsort_keygen, ns

_natural = natsort_keygen(alg=ns.IGNORECASE)


def natural_key(name: str) -> Tuple[Any, str]:
    """Sort key comparing only alphanumeric characters, digits numerically.

    ``"mod2" < "mod10"`` and ``"Alpha" == "alpha"`` for the first component;
    the raw name breaks remaining ties so the order is total.
    """
    alnum = "".join(ch for ch in name if ch.isalnum())
    return (_natural(alnum), name)
