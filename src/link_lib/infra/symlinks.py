"""Infrastructure: symlink inspection and dependency-slot cleanup.

Link state is always read straight from disk, since npm mutates these
paths outside our control.  Nothing here caches results.

Rules
-----
* Inspection never raises; any ``OSError`` means "not linked".
* Paths are compared after full symlink resolution and platform case
  normalisation.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from link_lib.core.models import LinkStatus


def _canonical(path: str | os.PathLike[str]) -> str:
    """Resolve every symlink in *path* and normalise its case.

    Raises ``OSError`` when the path does not exist.
    """
    return os.path.normcase(os.path.realpath(path, strict=True))


def real_equals(first: str | os.PathLike[str], second: str | os.PathLike[str]) -> bool:
    """True when both paths exist and resolve to the same real location."""
    try:
        return _canonical(first) == _canonical(second)
    except OSError:
        return False


def is_symlink_to(path: str | os.PathLike[str], target: str | os.PathLike[str]) -> bool:
    """True when *path* is a symbolic link resolving to *target*'s real path.

    Relative link contents are resolved against the link's own directory.
    Missing paths, regular files, dangling links and links to any other
    location all report ``False``.
    """
    try:
        if not os.path.islink(path):
            return False
        contents = os.readlink(path)
    except OSError:
        return False
    resolved = os.path.join(os.path.dirname(os.path.abspath(path)), contents)
    return real_equals(resolved, target)


def slot_status(path: str | os.PathLike[str], target: str | os.PathLike[str]) -> LinkStatus:
    """Classify a dependency slot relative to *target*."""
    if is_symlink_to(path, target):
        return LinkStatus.LINKED
    if os.path.lexists(path):
        return LinkStatus.ELSEWHERE
    return LinkStatus.ABSENT


def remove_tree(path: str | os.PathLike[str]) -> None:
    """Delete a slot: links and files are unlinked, directories removed recursively.

    Raises ``OSError`` when removal fails.
    """
    if os.path.islink(path) or os.path.isfile(path):
        os.unlink(path)
    elif os.path.isdir(path):
        shutil.rmtree(path)


class LocalFilesystem:
    """Concrete :class:`~link_lib.core.protocols.Filesystem` for the local disk.

    This class satisfies the protocol structurally — no explicit
    inheritance required.
    """

    def slot_status(self, path: Path, target: Path) -> LinkStatus:
        return slot_status(path, target)

    def is_symlink(self, path: Path) -> bool:
        return os.path.islink(path)

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def remove_tree(self, path: Path) -> None:
        remove_tree(path)
