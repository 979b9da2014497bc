"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations, so the orchestration can be exercised against fakes
without a real package manager or terminal.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from link_lib.core.models import LinkStatus, SlotState


class PackageManager(Protocol):
    """Contract for the package-manager CLI (npm).

    Every method blocks until the underlying command exits.  Failures
    must surface as :class:`~link_lib.exceptions.PackageManagerError`.
    """

    def link_global(self, library_dir: Path) -> None:
        """Create or refresh the global alias from *library_dir*."""
        ...  # pragma: no cover

    def link(self, app_dir: Path, name: str) -> None:
        """Point *app_dir*'s ``node_modules/<name>`` at the global alias."""
        ...  # pragma: no cover

    def unlink(self, app_dir: Path, name: str, *, global_: bool = False) -> None:
        """Remove the application link, or the global alias when *global_*."""
        ...  # pragma: no cover

    def install(self, app_dir: Path, args: Sequence[str]) -> None:
        """Run an install in *app_dir* with the given arguments."""
        ...  # pragma: no cover

    def global_root(self) -> Path:
        """Return the directory holding globally installed packages."""
        ...  # pragma: no cover


class Filesystem(Protocol):
    """Contract for the symlink inspection and cleanup the core needs."""

    def slot_status(self, path: Path, target: Path) -> LinkStatus:
        """Classify *path* relative to the real location of *target*.

        Must never raise.
        """
        ...  # pragma: no cover

    def is_symlink(self, path: Path) -> bool:
        ...  # pragma: no cover

    def exists(self, path: Path) -> bool:
        """True when anything, including a dangling symlink, is at *path*."""
        ...  # pragma: no cover

    def remove_tree(self, path: Path) -> None:
        """Delete *path* recursively.  Raises ``OSError`` on failure."""
        ...  # pragma: no cover


class Reporter(Protocol):
    """Sink for user-facing progress produced by core services.

    Core code never prints; the CLI layer supplies an implementation.
    """

    def status(self, global_slot: SlotState, app_slot: SlotState) -> None:
        """Present the detected state of both slots."""
        ...  # pragma: no cover

    def step(self, message: str) -> None:
        """Announce an action about to be performed."""
        ...  # pragma: no cover

    def info(self, message: str) -> None:
        ...  # pragma: no cover

    def success(self, message: str) -> None:
        ...  # pragma: no cover

    def warning(self, message: str) -> None:
        """Report an advisory problem; the run continues."""
        ...  # pragma: no cover
