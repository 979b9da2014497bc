"""Infrastructure: npm executable detection and platform guidance.

This module is responsible for locating the package-manager executable
and providing platform-specific installation guidance when it is
missing.

Configuration
-------------
``LINK_LIB_NPM``
    Overrides the executable name or path (e.g. ``/opt/node/bin/npm``).
    Defaults to ``npm`` (``npm.cmd`` on Windows).

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import os
import platform
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from link_lib.exceptions import PackageManagerNotFoundError

NPM_ENV_VAR: str = "LINK_LIB_NPM"


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NpmStatus:
    """Result of an npm detection probe.

    Attributes
    ----------
    found : bool
        Whether the executable was located.
    executable : str
        The name or path that was looked up.
    path : Path | None
        Absolute path to the executable, or ``None``.
    install_commands : tuple[str, ...]
        Suggested shell commands for installing Node.js/npm on the current
        platform.  Empty when npm is already present.
    """

    found: bool
    executable: str
    path: Path | None
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def default_executable() -> str:
    """``npm.cmd`` on Windows, ``npm`` elsewhere."""
    return "npm.cmd" if platform.system().lower() == "windows" else "npm"


def configured_executable(environ: Mapping[str, str] | None = None) -> str:
    """Executable from ``LINK_LIB_NPM``, falling back to the platform default."""
    env = os.environ if environ is None else environ
    override = env.get(NPM_ENV_VAR, "").strip()
    return override or default_executable()


def detect_npm(environ: Mapping[str, str] | None = None) -> NpmStatus:
    """Probe the system for the npm executable.

    Returns a :class:`NpmStatus` regardless of whether npm is present —
    the caller decides whether to abort or merely warn.
    """
    executable = configured_executable(environ)
    result = shutil.which(executable)

    if result is not None:
        return NpmStatus(
            found=True,
            executable=executable,
            path=Path(result).resolve(),
            install_commands=(),
        )

    return NpmStatus(
        found=False,
        executable=executable,
        path=None,
        install_commands=_platform_install_commands(),
    )


def require_npm(environ: Mapping[str, str] | None = None) -> Path:
    """Locate npm or raise :class:`PackageManagerNotFoundError`."""
    status = detect_npm(environ)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append("Install Node.js (which ships npm) using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        hint_lines.append(f"Or point {NPM_ENV_VAR} at an npm executable.")
        raise PackageManagerNotFoundError(
            f"{status.executable} is not installed or not on PATH.",
            hint="\n".join(hint_lines),
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def _platform_install_commands() -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "windows":
        return (
            "winget install OpenJS.NodeJS.LTS",
            "choco install nodejs-lts",
        )
    if system == "linux":
        return (
            "sudo apt install nodejs npm",
            "sudo dnf install nodejs",
            "sudo pacman -S nodejs npm",
        )
    if system == "darwin":
        return ("brew install node",)
    return ("Please install Node.js from https://nodejs.org/en/download",)
