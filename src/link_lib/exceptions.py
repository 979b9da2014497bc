"""Custom exception hierarchy for link-lib.

All exceptions that cross layer boundaries must inherit from
:class:`LinkLibError`.  Raw ``OSError`` / ``subprocess`` failures must
NEVER propagate beyond the infrastructure layer — they must be caught
and re-raised as a typed subclass defined here.

Hierarchy
---------
LinkLibError
├── ManifestNotFoundError
├── ManifestParseError
├── MissingPackageNameError
├── PackageManagerError
├── PackageManagerNotFoundError
├── LinkFailedError
├── RestoreFailedError
├── WatchLaunchError
└── EnvironmentError
"""

from __future__ import annotations

from collections.abc import Sequence


class LinkLibError(Exception):
    """Base exception for all link-lib errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Manifests -------------------------------------------------------------

class ManifestNotFoundError(LinkLibError):
    """Raised when a directory has no ``package.json``."""


class ManifestParseError(LinkLibError):
    """Raised when ``package.json`` cannot be read or is not a JSON object."""


class MissingPackageNameError(LinkLibError):
    """Raised when the library manifest declares no ``name``."""


# --- Package manager -------------------------------------------------------

class PackageManagerError(LinkLibError):
    """Raised when a package-manager command exits unsuccessfully."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int | None,
        *,
        detail: str | None = None,
        hint: str | None = None,
    ) -> None:
        message = f"Command failed: {' '.join(command)}"
        if returncode is not None:
            message = f"{message} (exit code {returncode})"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message, hint=hint)
        self.command: list[str] = list(command)
        self.returncode: int | None = returncode


class PackageManagerNotFoundError(LinkLibError):
    """Raised when the npm executable cannot be located."""


# --- Link / restore --------------------------------------------------------

class LinkFailedError(LinkLibError):
    """Raised when the application link cannot be created even after a retry."""


class RestoreFailedError(LinkLibError):
    """Raised when reinstalling the original dependency declaration fails."""


class WatchLaunchError(LinkLibError):
    """Raised when the build watcher process cannot be started."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(LinkLibError):
    """Raised when a required runtime dependency is not available."""
