"""Builders for on-disk package variants used across the test suite."""

import json
import os
import zipfile


def manifest_bytes(name, version="1.0.0", dependencies=None, **extra):
    doc = {"name": name, "version": version}
    if dependencies is not None:
        doc["dependencies"] = dependencies
    doc.update(extra)
    return json.dumps(doc).encode("utf-8")


def make_directory_mod(root, name, version="1.0.0", dependencies=None, folder=None, files=None):
    """Create ``<root>/<name>_<version>/info.json`` plus extra files."""
    path = os.path.join(str(root), folder or f"{name}_{version}")
    os.makedirs(path, exist_ok=True)
    with open(os.path.join(path, "info.json"), "wb") as fh:
        fh.write(manifest_bytes(name, version, dependencies))
    for rel, content in (files or {}).items():
        full = os.path.join(path, *rel.split("/"))
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, "wb") as fh:
            fh.write(content if isinstance(content, bytes) else content.encode("utf-8"))
    return path


def make_archive_mod(root, name, version="1.0.0", dependencies=None, top_folder=True, files=None, archive_name=None):
    """Create ``<root>/<name>_<version>.zip``, optionally with a top-level folder."""
    stem = f"{name}_{version}"
    path = os.path.join(str(root), archive_name or f"{stem}.zip")
    lead = f"{stem}/" if top_folder else ""
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr(f"{lead}info.json", manifest_bytes(name, version, dependencies))
        for rel, content in (files or {}).items():
            zf.writestr(f"{lead}{rel}", content)
    return path


def make_symlink_mod(root, target_root, name, version="1.0.0", dependencies=None, files=None, link_name=None):
    """Create a directory variant in *target_root* and link it into *root*."""
    target = make_directory_mod(target_root, name, version, dependencies, files=files)
    link = os.path.join(str(root), link_name or f"{name}_{version}_link")
    os.symlink(target, link, target_is_directory=True)
    return link


def write_mod_list(root, entries):
    """Write mod-list.json from ``{name: enabled}``."""
    path = os.path.join(str(root), "mod-list.json")
    doc = {"mods": [{"name": n, "enabled": e} for n, e in entries.items()]}
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(doc, fh)
    return path


def variant(name, version="1.0.0", kind=None, sequence=0, dependencies=()):
    """In-memory PackageVariant; the reader points at a path that is never read."""
    # pylint: disable=import-outside-toplevel
    from storage.reader import PackageReader
    from storage.structure import StorageKind
    from versioning.models import PackageVariant
    from versioning.parser import parse_dependency, parse_version

    kind = kind or StorageKind.DIRECTORY
    path = f"/mods/{name}_{version}_{sequence}"
    return PackageVariant(
        name=name,
        path=path,
        kind=kind,
        version=parse_version(version),
        relations=[parse_dependency(d) for d in dependencies],
        sequence=sequence,
        reader=PackageReader(path, kind),
    )


def package(name, *dependencies, version="1.0.0", enabled=True):
    """In-memory Package with a directory variant."""
    # pylint: disable=import-outside-toplevel
    from constants import Constants
    from versioning.models import EnabledState, Package

    state = EnabledState.ENABLED if enabled else EnabledState.DISABLED
    if name == Constants.BASE_PACKAGE:
        return Package(name=name, state=state)
    return Package(name=name, state=state, variant=variant(name, version, dependencies=dependencies))
