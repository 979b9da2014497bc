"""Infrastructure layer — external system integration.

This layer wraps all interaction with npm, the filesystem and child
processes.  Every raw ``OSError`` or ``subprocess`` failure must be
caught here and re-raised as a
:class:`~link_lib.exceptions.LinkLibError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from link_lib.infra.manifest_reader import read_library_manifest, read_manifest
from link_lib.infra.npm_locator import NpmStatus, detect_npm, require_npm
from link_lib.infra.npm_provider import NpmPackageManager
from link_lib.infra.symlinks import LocalFilesystem, is_symlink_to, slot_status
from link_lib.infra.watcher import WatchSession

__all__: list[str] = [
    "LocalFilesystem",
    "NpmPackageManager",
    "NpmStatus",
    "WatchSession",
    "detect_npm",
    "is_symlink_to",
    "read_library_manifest",
    "read_manifest",
    "require_npm",
    "slot_status",
]
