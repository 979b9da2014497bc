"""``link-lib doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment satisfies link-lib's requirements.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys

from link_lib.cli import exit_codes
from link_lib.cli.console import console, escape, strip_markup
from link_lib.exceptions import LinkLibError
from link_lib.infra.npm_locator import NpmStatus, detect_npm
from link_lib.version import __version__

_OK = "[green]OK[/green]"
_WARN = "[yellow]WARN[/yellow]"
_FAIL = "[red]FAIL[/red]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = _OK if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _semantic_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the semantic_version row."""
    try:
        import semantic_version
    except ImportError:
        return "semantic_version", "NOT INSTALLED", _FAIL
    return "semantic_version", str(getattr(semantic_version, "__version__", "unknown")), _OK


def _npm_check(status: NpmStatus) -> tuple[str, str, str]:
    """Return (label, value, status) for the npm executable row."""
    if status.found:
        return "npm", str(status.path) if status.path else status.executable, _OK
    return "npm", f"{status.executable} not found", _FAIL


def _global_root_check(status: NpmStatus) -> tuple[str, str, str]:
    """Return (label, value, status) for the npm global root row."""
    if not status.found or status.path is None:
        return "Global root", "unknown (npm missing)", _WARN

    from link_lib.infra.npm_provider import NpmPackageManager

    try:
        root = NpmPackageManager(status.path).global_root()
    except LinkLibError as exc:
        return "Global root", str(exc).splitlines()[0], _WARN
    return "Global root", str(root), _OK


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, _OK


def _link_lib_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the link-lib version row."""
    return "link-lib", __version__, _OK


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nlink-lib doctor", file=sys.stderr)
    print("=" * 72, file=sys.stderr)
    print(f"{'Component':<18} {'Value':<44} {'Status':<8}", file=sys.stderr)
    print("-" * 72, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<18} {value:<44} {strip_markup(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    npm_status = detect_npm()
    checks = [
        _link_lib_version_check(),
        _python_version_check(),
        _semantic_version_check(),
        _npm_check(npm_status),
        _global_root_check(npm_status),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
    else:
        table = Table(
            title="link-lib doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, escape(value), status)

        console.print()
        console.print(table)
        console.print()

    # Show npm install guidance when missing.
    if not npm_status.found and npm_status.install_commands:
        console.print("[yellow]npm is not installed.[/yellow]")
        console.print("Install Node.js using one of the following commands:\n")
        for cmd in npm_status.install_commands:
            console.print(f"  [bold]{cmd}[/bold]")
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
