"""Infrastructure: the library's build watcher.

The watcher is a long-lived child sharing the parent's terminal.  The
main flow only launches it; a monitor thread observes its exit and
hands the return code to a callback.  The monitor thread is not a
daemon, so the interpreter stays alive for as long as the child runs.
There is no restart policy and no timeout — the child ends when it
exits on its own or the user interrupts the process group.
"""

from __future__ import annotations

import subprocess
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from link_lib.exceptions import WatchLaunchError

ExitCallback = Callable[[int], None]


class WatchSession:
    """One build-watch child process plus its exit monitor.

    Parameters
    ----------
    command:
        Full argv to execute, e.g. ``["npm", "run", "build", "--", "--watch"]``.
    cwd:
        Directory to run in (the library root).
    on_exit:
        Invoked from the monitor thread with the child's return code.
    popen:
        Process factory; defaults to :class:`subprocess.Popen`.
    """

    def __init__(
        self,
        command: Sequence[str],
        cwd: Path,
        *,
        on_exit: ExitCallback | None = None,
        popen: Callable[..., Any] = subprocess.Popen,
    ) -> None:
        self._command: list[str] = list(command)
        self._cwd: Path = cwd
        self._on_exit: ExitCallback | None = on_exit
        self._popen: Callable[..., Any] = popen
        self._process: Any = None
        self._monitor: threading.Thread | None = None

    @property
    def command(self) -> list[str]:
        return list(self._command)

    @property
    def process(self) -> Any:
        """The running child, or ``None`` before :meth:`start`."""
        return self._process

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def start(self) -> None:
        """Launch the child and its monitor thread without waiting for it.

        Raises
        ------
        WatchLaunchError
            When the child cannot be started or a session is already running.
        """
        if self._process is not None:
            raise WatchLaunchError("A watch session is already running.")
        try:
            # stdin/stdout/stderr are inherited: the watcher owns the terminal.
            self._process = self._popen(self._command, cwd=str(self._cwd))
        except OSError as exc:
            raise WatchLaunchError(
                f"Could not start watcher: {' '.join(self._command)}",
                hint=str(exc),
            ) from exc

        self._monitor = threading.Thread(
            target=self._wait_for_exit,
            name="link-lib-watch-monitor",
            daemon=False,
        )
        self._monitor.start()

    def join(self, timeout: float | None = None) -> None:
        """Block until the monitor thread has reported the child's exit."""
        if self._monitor is not None:
            self._monitor.join(timeout)

    def _wait_for_exit(self) -> None:
        returncode = self._process.wait()
        if self._on_exit is not None:
            self._on_exit(returncode)
