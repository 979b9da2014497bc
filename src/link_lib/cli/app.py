"""CLI application entry point and command routing for link-lib.

This module is the **sole error boundary** for the entire application.
It catches :class:`~link_lib.exceptions.LinkLibError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* ``print()`` is forbidden outside the CLI layer; the console proxy is
  used exclusively.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from link_lib.cli import exit_codes
from link_lib.cli.console import console, escape
from link_lib.exceptions import LinkLibError
from link_lib.version import __version__

WATCH_SCRIPT_ENV_VAR: str = "LINK_LIB_WATCH_SCRIPT"
DEFAULT_WATCH_SCRIPT: str = "build"

_watch_sessions: list[Any] = []
"""Watch sessions started by this process; hosted by :func:`cli` until they exit."""


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Invocation:
    """Resolved command-line request."""

    app_dir: Path
    library_dir: Path
    watch: bool = False
    script: str = DEFAULT_WATCH_SCRIPT
    unlink: bool = False
    unlink_global: bool = False


def resolve_invocation(args: argparse.Namespace, cwd: Path | None = None) -> Invocation:
    """Turn parsed arguments into absolute directories and flags.

    The library path is interpreted relative to the application
    directory, which defaults to the current working directory.
    """
    base = cwd if cwd is not None else Path.cwd()
    app_dir = Path(os.path.abspath(base / args.app)) if args.app else Path(os.path.abspath(base))

    library_rel = args.library.rstrip("/\\") or args.library
    library_dir = Path(os.path.abspath(app_dir / library_rel))

    script = args.script or os.environ.get(WATCH_SCRIPT_ENV_VAR, "").strip() or DEFAULT_WATCH_SCRIPT
    return Invocation(
        app_dir=app_dir,
        library_dir=library_dir,
        watch=args.watch,
        script=script,
        unlink=args.unlink,
        unlink_global=args.unlink_global,
    )


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    The CLI supports:
    * ``link-lib <library> [--watch]``             — link a library
    * ``link-lib <library> --unlink [--unlink-global]`` — undo and restore
    * ``link-lib doctor``                          — environment diagnostics
    * ``link-lib --version``
    """
    parser = argparse.ArgumentParser(
        prog="link-lib",
        description="Link a local npm library into an application for development.",
        epilog=(
            "examples:\n"
            "  link-lib ../my-components\n"
            "  link-lib ../my-components --watch\n"
            "  link-lib ../my-components --unlink\n"
            "  link-lib ../my-components --unlink --unlink-global"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "library",
        nargs="?",
        default=None,
        help="Path to the library, relative to the app directory, or 'doctor'.",
    )
    parser.add_argument(
        "--app",
        type=Path,
        default=None,
        metavar="DIR",
        help="Application directory (default: current directory).",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="After linking, run the library's build in watch mode.",
    )
    parser.add_argument(
        "--script",
        default=None,
        metavar="NAME",
        help=(
            "npm script started by --watch "
            f"(default: ${WATCH_SCRIPT_ENV_VAR} or '{DEFAULT_WATCH_SCRIPT}')."
        ),
    )
    parser.add_argument(
        "--unlink",
        action="store_true",
        help="Remove the link and reinstall the app's original dependency spec.",
    )
    parser.add_argument(
        "--unlink-global",
        action="store_true",
        help="With --unlink, also remove the global link.",
    )
    return parser


# ---------------------------------------------------------------------------
# Collaborator factories
# ---------------------------------------------------------------------------

def _create_package_manager() -> Any:
    """Locate npm and wrap it in the npm-backed package manager."""
    from link_lib.infra.npm_locator import require_npm
    from link_lib.infra.npm_provider import NpmPackageManager

    return NpmPackageManager(require_npm())


def _start_watcher(package_manager: Any, library_dir: Path, script: str) -> Any:
    """Launch ``npm run <script> -- --watch`` in the library."""
    from link_lib.cli.reporter import render_watch_exit
    from link_lib.infra.watcher import WatchSession

    session = WatchSession(
        package_manager.watch_command(script),
        library_dir,
        on_exit=render_watch_exit,
    )
    session.start()
    return session


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_link(invocation: Invocation) -> int:
    """Ensure links, warn about peers, optionally start the watcher.

    Flow:
    1. Read both manifests (library must declare a name).
    2. Detect slot state and ensure the global + app links.
    3. Report peer-dependency problems.
    4. Launch the build watcher without waiting for it.
    """
    from link_lib.cli.reporter import ConsoleReporter, render_peer_report
    from link_lib.core.link_service import LinkService
    from link_lib.core.peer_check import check_peer_dependencies
    from link_lib.infra.manifest_reader import read_library_manifest, read_manifest
    from link_lib.infra.symlinks import LocalFilesystem

    app = read_manifest(invocation.app_dir, role="app")
    library = read_library_manifest(invocation.library_dir)

    package_manager = _create_package_manager()
    service = LinkService(package_manager, LocalFilesystem(), ConsoleReporter())
    service.link(app, library)

    render_peer_report(check_peer_dependencies(app, library))

    if invocation.watch:
        console.print("\n[bold]Starting build watcher in library...[/bold]\n")
        _watch_sessions.append(
            _start_watcher(package_manager, invocation.library_dir, invocation.script),
        )

    return exit_codes.SUCCESS


def _handle_unlink(invocation: Invocation) -> int:
    """Unlink the library and restore the app's original declaration."""
    from link_lib.cli.reporter import ConsoleReporter
    from link_lib.core.unlink_service import UnlinkService
    from link_lib.infra.manifest_reader import read_library_manifest, read_manifest
    from link_lib.infra.symlinks import LocalFilesystem

    app = read_manifest(invocation.app_dir, role="app")
    library = read_library_manifest(invocation.library_dir)

    service = UnlinkService(_create_package_manager(), LocalFilesystem(), ConsoleReporter())
    service.unlink(app, library, remove_global=invocation.unlink_global)
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from link_lib.cli.doctor import run_doctor

    return run_doctor()


def _warn_ignored_flags(invocation: Invocation) -> None:
    if invocation.unlink and invocation.watch:
        console.print("[yellow]Warning:[/yellow] --watch is ignored together with --unlink.")
    if invocation.unlink_global and not invocation.unlink:
        console.print("[yellow]Warning:[/yellow] --unlink-global only applies with --unlink; ignoring it.")


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the link-lib CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.  A started watcher keeps running after
        this returns; :func:`cli` hosts it.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.library is None:
        parser.print_usage(sys.stderr)
        return exit_codes.GENERAL_ERROR

    invocation = resolve_invocation(args)

    if args.library.lower() == "doctor" and not invocation.library_dir.is_dir():
        return _handle_doctor()

    _warn_ignored_flags(invocation)

    if invocation.unlink:
        return _handle_unlink(invocation)
    return _handle_link(invocation)


def _host_watchers() -> None:
    """Keep the process alive while started watch sessions run."""
    while _watch_sessions:
        _watch_sessions.pop(0).join()


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        _host_watchers()
        sys.exit(code)
    except LinkLibError as exc:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.GENERAL_ERROR)
