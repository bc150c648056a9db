"""Manifest (info.json) decoding and JSON Schema validation.

Schema checks use jsonschema Draft7 the same way for both documents the
resolver consumes: package manifests and the persisted activation list.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from jsonschema import Draft7Validator

from common.errors import MalformedManifest
from .models import ManifestDescriptor
from .parser import parse_version

MANIFEST_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "version"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "version": {"type": "string"},
        "dependencies": {"type": "array", "items": {"type": "string"}},
    },
}

MOD_LIST_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["mods"],
    "properties": {
        "mods": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "enabled"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "enabled": {"type": "boolean"},
                },
            },
        },
    },
}

_KNOWN_KEYS = {"name", "version", "dependencies"}


def first_schema_error(schema: Dict[str, Any], data: Any) -> Optional[str]:
    """Return a message for the first schema violation, or None if valid."""
    validator = Draft7Validator(schema)
    errs = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if not errs:
        return None
    first = errs[0]
    path = "/".join(str(p) for p in first.path)
    return f"Invalid document at '{path}': {first.message}"


def parse_manifest(data: bytes, entry: Optional[str] = None) -> ManifestDescriptor:
    """Decode manifest bytes into a ManifestDescriptor.

    Args:
        data: Raw manifest bytes (UTF-8 JSON, BOM tolerated).
        entry: Storage entry the bytes came from, for error messages.

    Raises:
        MalformedManifest: on undecodable JSON, schema violations or a
            version that is not three non-negative integers.
    """
    try:
        doc = json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedManifest(f"Manifest is not valid JSON: {exc}", entry=entry) from exc

    name = doc.get("name") if isinstance(doc, dict) else None
    name = name if isinstance(name, str) and name else None

    problem = first_schema_error(MANIFEST_SCHEMA, doc)
    if problem:
        raise MalformedManifest(problem, package_name=name, entry=entry)

    version = parse_version(doc["version"])
    if version is None:
        raise MalformedManifest(
            f"Invalid version '{doc['version']}' (expected major.minor.patch)",
            package_name=name,
            entry=entry,
        )

    return ManifestDescriptor(
        name=doc["name"],
        version=version,
        dependencies=list(doc["dependencies"]) if "dependencies" in doc else None,
        extra={k: v for k, v in doc.items() if k not in _KNOWN_KEYS},
    )
