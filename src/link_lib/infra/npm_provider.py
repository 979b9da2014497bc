"""npm backed implementation of :class:`~link_lib.core.protocols.PackageManager`.

This module is the **only** place in the codebase that runs npm
commands to completion.  Every command blocks until npm exits; output
is streamed straight to the user's terminal except for the global-root
query, whose stdout is captured.  Non-zero exits and ``OSError`` are
re-raised as :class:`~link_lib.exceptions.PackageManagerError`.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from link_lib.exceptions import PackageManagerError


class NpmPackageManager:
    """Concrete :class:`PackageManager` backed by the npm CLI.

    This class satisfies the :class:`~link_lib.core.protocols.PackageManager`
    protocol structurally — no explicit inheritance required.

    Parameters
    ----------
    executable:
        Name or path of the npm executable, usually from
        :func:`~link_lib.infra.npm_locator.require_npm`.
    """

    def __init__(self, executable: str | Path = "npm") -> None:
        self._executable: str = str(executable)

    @property
    def executable(self) -> str:
        return self._executable

    # ------------------------------------------------------------------
    # Process helpers
    # ------------------------------------------------------------------

    def _command(self, args: Sequence[str]) -> list[str]:
        return [self._executable, *args]

    def _run(self, args: Sequence[str], *, cwd: Path) -> None:
        """Run npm with inherited stdio and raise on a non-zero exit."""
        cmd = self._command(args)
        try:
            proc = subprocess.run(cmd, cwd=str(cwd), check=False)
        except OSError as exc:
            raise PackageManagerError(cmd, None, detail=str(exc)) from exc
        if proc.returncode != 0:
            raise PackageManagerError(cmd, proc.returncode)

    def _capture(self, args: Sequence[str], *, cwd: Path | None = None) -> str:
        """Run npm, capture stdout and return it stripped."""
        cmd = self._command(args)
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise PackageManagerError(cmd, None, detail=str(exc)) from exc
        if proc.returncode != 0:
            detail = (proc.stderr or "").strip() or (proc.stdout or "").strip()
            raise PackageManagerError(cmd, proc.returncode, detail=detail or None)
        return (proc.stdout or "").strip()

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def link_global(self, library_dir: Path) -> None:
        self._run(["link"], cwd=library_dir)

    def link(self, app_dir: Path, name: str) -> None:
        self._run(["link", name], cwd=app_dir)

    def unlink(self, app_dir: Path, name: str, *, global_: bool = False) -> None:
        args = ["unlink", "-g", name] if global_ else ["unlink", name]
        self._run(args, cwd=app_dir)

    def install(self, app_dir: Path, args: Sequence[str]) -> None:
        self._run(["install", *args], cwd=app_dir)

    def global_root(self) -> Path:
        """Return ``npm root -g``.

        Raises
        ------
        PackageManagerError
            When npm fails or prints nothing.
        """
        output = self._capture(["root", "-g"])
        # npm may print update notices after the path.
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if not lines:
            raise PackageManagerError(
                self._command(["root", "-g"]),
                0,
                detail="npm did not report a global root.",
            )
        return Path(lines[0])

    # ------------------------------------------------------------------
    # Watcher support
    # ------------------------------------------------------------------

    def watch_command(self, script: str = "build") -> list[str]:
        """Argv for ``npm run <script> -- --watch``."""
        return self._command(["run", script, "--", "--watch"])
