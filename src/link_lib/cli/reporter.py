"""Terminal rendering of core progress, link status and peer warnings.

:class:`ConsoleReporter` satisfies :class:`~link_lib.core.protocols.Reporter`
structurally and writes everything to stderr through
:data:`~link_lib.cli.console.console`.  The status summary is a Rich
table when Rich is installed and two plain lines otherwise.
"""

from __future__ import annotations

from link_lib.cli.console import console, escape
from link_lib.core.models import LinkStatus, PeerReport, SlotState


# ---------------------------------------------------------------------------
# Status wording
# ---------------------------------------------------------------------------

def describe_global(slot: SlotState) -> tuple[str, str]:
    """Return (text, style) for the global alias slot."""
    if slot.status is LinkStatus.LINKED:
        return "exists (points to library)", "green"
    if slot.status is LinkStatus.ELSEWHERE:
        return "exists but points elsewhere", "yellow"
    return "not present", "red"


def describe_app(slot: SlotState) -> tuple[str, str]:
    """Return (text, style) for the application ``node_modules`` slot."""
    if slot.status is LinkStatus.LINKED:
        return "exists (points to library)", "green"
    if slot.is_installed_copy:
        return "installed (not linked)", "cyan"
    if slot.status is LinkStatus.ELSEWHERE:
        return "linked elsewhere", "yellow"
    return "not present", "red"


# ---------------------------------------------------------------------------
# Reporter
# ---------------------------------------------------------------------------

class ConsoleReporter:
    """Render core progress messages with Rich markup."""

    def status(self, global_slot: SlotState, app_slot: SlotState) -> None:
        rows = [
            ("Global link", *describe_global(global_slot), global_slot),
            ("App link", *describe_app(app_slot), app_slot),
        ]
        try:
            from rich.table import Table
        except ModuleNotFoundError:
            console.print("\nStatus:")
            for label, text, _style, slot in rows:
                console.print(f"  - {label:<12} {text}  ({slot.path})")
            console.print()
            return

        table = Table(
            title="Status",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Slot", style="bold", min_width=12)
        table.add_column("State", min_width=20)
        table.add_column("Path")
        for label, text, style, slot in rows:
            table.add_row(label, f"[{style}]{text}[/{style}]", escape(str(slot.path)))

        console.print()
        console.print(table)

    def step(self, message: str) -> None:
        console.print(f"\n[bold]{escape(message)}[/bold]")

    def info(self, message: str) -> None:
        console.print(f"[dim]{escape(message)}[/dim]")

    def success(self, message: str) -> None:
        console.print(f"[bold green]{escape(message)}[/bold green]")

    def warning(self, message: str) -> None:
        console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


# ---------------------------------------------------------------------------
# Peer dependencies and watcher
# ---------------------------------------------------------------------------

def render_peer_report(report: PeerReport) -> None:
    """Print missing and mismatched peer dependencies, if any."""
    if report.missing:
        console.print("\n[yellow]Missing peerDependencies in app:[/yellow]")
        for peer in report.missing:
            console.print(f"  - {escape(str(peer))}")
    if report.mismatched:
        console.print("\n[yellow]Version mismatch for peerDependencies:[/yellow]")
        for mismatch in report.mismatched:
            console.print(f"  - {escape(str(mismatch))}")


def render_watch_exit(returncode: int) -> None:
    """Exit notice printed when the build watcher terminates."""
    style = "dim" if returncode == 0 else "yellow"
    console.print(f"\n[{style}]Watcher exited with code {returncode}[/{style}]")
