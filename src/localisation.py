"""Locale key/value data assembled from packages' ``locale/<lang>/*.cfg`` files.

The files are a flat sectioned format::

    ; comment
    [item-name]
    iron-gear=Iron gear wheel

which maps to ``{"item-name.iron-gear": "Iron gear wheel"}``.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from constants import Constants
from versioning.models import ResolvedLoadOrder

logger = logging.getLogger(__name__)

LocaleData = Dict[str, str]

_SECTION_RE = re.compile(r"^\[\s*([^\]]*?)\s*\]$")
_ENTRY_RE = re.compile(r"^([^=]+?)\s*=(.*)$")


def parse_locale(text: str) -> LocaleData:
    """Parse one locale file into ``"<category>.<key>" -> text``.

    Keys that appear before any section header are stored under the bare
    key. Lines that are neither headers nor entries are ignored.
    """
    entries: LocaleData = {}
    category: Optional[str] = None
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in ";#":
            continue
        m = _SECTION_RE.match(line)
        if m:
            category = m.group(1)
            continue
        m = _ENTRY_RE.match(line)
        if not m:
            continue
        key = m.group(1).strip()
        full_key = f"{category}.{key}" if category else key
        entries[full_key] = m.group(2).strip()
    return entries


def load_locale(order: ResolvedLoadOrder, language: str = Constants.DEFAULT_LANGUAGE) -> LocaleData:
    """Merge locale files of every package in load order.

    Later packages override keys defined by earlier ones. Packages without a
    reader (the bundled base) and unreadable files are skipped.
    """
    merged: LocaleData = {}
    prefix = f"{Constants.LOCALE_DIR}/{language}"
    for package in order:
        reader = package.reader
        if reader is None:
            continue
        with reader:
            for name in reader.list_files(prefix):
                if not name.endswith(Constants.LOCALE_EXTENSION):
                    continue
                try:
                    text = reader.read_file(name).decode("utf-8-sig")
                except UnicodeDecodeError as exc:
                    logger.warning("Skipping locale %s in %s: %s", name, package.name, exc)
                    continue
                merged.update(parse_locale(text))
    logger.debug("Loaded %d locale entries for '%s'", len(merged), language)
    return merged
