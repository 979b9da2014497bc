"""Infrastructure: ``package.json`` loading.

Reads a manifest from disk and maps it onto
:class:`~link_lib.core.models.Manifest`.  I/O and JSON errors are
re-raised as :class:`~link_lib.exceptions.LinkLibError` subclasses.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from link_lib.core.models import (
    DEPENDENCIES,
    DEV_DEPENDENCIES,
    OPTIONAL_DEPENDENCIES,
    PEER_DEPENDENCIES,
    Manifest,
)
from link_lib.exceptions import ManifestNotFoundError, ManifestParseError, MissingPackageNameError

MANIFEST_NAME: str = "package.json"


def manifest_path(directory: Path) -> Path:
    return directory / MANIFEST_NAME


def read_manifest(directory: Path, *, role: str = "package") -> Manifest:
    """Load ``<directory>/package.json``.

    Parameters
    ----------
    directory:
        Directory expected to contain the manifest.
    role:
        ``"app"`` or ``"library"``; used only in error messages.

    Raises
    ------
    ManifestNotFoundError
        When the file does not exist.
    ManifestParseError
        When the file cannot be read or is not a JSON object.
    """
    path = manifest_path(directory)
    if not path.is_file():
        raise ManifestNotFoundError(
            f"No {MANIFEST_NAME} in {role}: {directory}",
            hint=f"Check that {directory} is the {role} root.",
        )

    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestParseError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestParseError(
            f"Invalid JSON in {path}: {exc.msg} (line {exc.lineno}, column {exc.colno})",
        ) from exc

    if not isinstance(raw, dict):
        raise ManifestParseError(f"{path} must contain a JSON object.")

    return _parse_manifest(path, raw)


def read_library_manifest(directory: Path) -> Manifest:
    """Load a library manifest and require a non-empty ``name``.

    Raises
    ------
    MissingPackageNameError
        When the manifest declares no name.
    """
    manifest = read_manifest(directory, role="library")
    if not manifest.name:
        raise MissingPackageNameError(
            f'Library has no "name" in {manifest.path}',
            hint='Add a "name" field to the library package.json.',
        )
    return manifest


# ---------------------------------------------------------------------------
# Raw-dict → domain-model parsers (pure)
# ---------------------------------------------------------------------------

def _parse_manifest(path: Path, raw: dict[str, Any]) -> Manifest:
    name = raw.get("name")
    version = raw.get("version")
    return Manifest(
        path=path,
        name=name.strip() if isinstance(name, str) else "",
        version=version if isinstance(version, str) else None,
        dependencies=_string_mapping(raw.get(DEPENDENCIES)),
        dev_dependencies=_string_mapping(raw.get(DEV_DEPENDENCIES)),
        optional_dependencies=_string_mapping(raw.get(OPTIONAL_DEPENDENCIES)),
        peer_dependencies=_string_mapping(raw.get(PEER_DEPENDENCIES)),
    )


def _string_mapping(section: object) -> dict[str, str]:
    """Keep only ``str -> str`` entries; anything else becomes an empty mapping."""
    if not isinstance(section, dict):
        return {}
    return {
        key: value
        for key, value in section.items()
        if isinstance(key, str) and isinstance(value, str)
    }
