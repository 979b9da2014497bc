"""Shared pytest fixtures and configuration for the link-lib test suite.

Guidelines
----------
* npm is never invoked — the package manager is faked at the protocol
  boundary or ``subprocess`` is mocked in infra tests.
* Filesystem tests work only inside ``tmp_path``.
* Core tests must not depend on OS state beyond ``tmp_path``.
"""

from __future__ import annotations

import json
import os
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from link_lib.core.models import SlotState
from link_lib.exceptions import PackageManagerError

MUTATING_CALLS = frozenset({"link_global", "link", "unlink", "install"})


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakePackageManager:
    """In-process stand-in for npm that creates real symlinks under tmp_path."""

    def __init__(self, global_root: Path) -> None:
        self.root = global_root
        self.calls: list[tuple[Any, ...]] = []
        self.fail_link_global = False
        self.fail_link_times = 0
        self.fail_unlink = False
        self.fail_install = False
        self.link_creates_symlink = True

    # -- helpers ---------------------------------------------------------

    def _fail(self, *cmd: str) -> None:
        raise PackageManagerError(["npm", *cmd], 1)

    @staticmethod
    def _replace_with_link(slot: Path, target: Path) -> None:
        if os.path.lexists(slot):
            os.unlink(slot)
        slot.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(target, slot, target_is_directory=True)

    @property
    def mutating_calls(self) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] in MUTATING_CALLS]

    # -- PackageManager protocol ----------------------------------------

    def link_global(self, library_dir: Path) -> None:
        self.calls.append(("link_global", library_dir))
        if self.fail_link_global:
            self._fail("link")
        name = json.loads((library_dir / "package.json").read_text())["name"]
        self._replace_with_link(self.root.joinpath(*name.split("/")), library_dir)

    def link(self, app_dir: Path, name: str) -> None:
        self.calls.append(("link", app_dir, name))
        if self.fail_link_times > 0:
            self.fail_link_times -= 1
            self._fail("link", name)
        if not self.link_creates_symlink:
            return
        alias = self.root.joinpath(*name.split("/"))
        if not os.path.lexists(alias):
            self._fail("link", name)
        self._replace_with_link(app_dir.joinpath("node_modules", *name.split("/")), alias)

    def unlink(self, app_dir: Path, name: str, *, global_: bool = False) -> None:
        self.calls.append(("unlink", app_dir, name, global_))
        if self.fail_unlink:
            self._fail("unlink", name)
        base = self.root if global_ else app_dir / "node_modules"
        slot = base.joinpath(*name.split("/"))
        if os.path.islink(slot):
            os.unlink(slot)

    def install(self, app_dir: Path, args: Sequence[str]) -> None:
        self.calls.append(("install", app_dir, tuple(args)))
        if self.fail_install:
            self._fail("install", *args)

    def global_root(self) -> Path:
        self.calls.append(("global_root",))
        return self.root

    def watch_command(self, script: str = "build") -> list[str]:
        return ["npm", "run", script, "--", "--watch"]


class RecordingReporter:
    """Reporter that keeps every message for assertions."""

    def __init__(self) -> None:
        self.statuses: list[tuple[SlotState, SlotState]] = []
        self.messages: list[tuple[str, str]] = []

    def status(self, global_slot: SlotState, app_slot: SlotState) -> None:
        self.statuses.append((global_slot, app_slot))

    def step(self, message: str) -> None:
        self.messages.append(("step", message))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def of_kind(self, kind: str) -> list[str]:
        return [message for level, message in self.messages if level == kind]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def write_package() -> Callable[..., Path]:
    """Write ``package.json`` into a directory (created if needed)."""

    def _write(directory: Path, data: dict[str, Any]) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "package.json"
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def workspace(tmp_path: Path, write_package: Callable[..., Path]) -> dict[str, Path]:
    """An app, a sibling ``widgets`` library and an empty global root."""
    app_dir = tmp_path / "app"
    library_dir = tmp_path / "widgets"
    global_root = tmp_path / "global" / "lib" / "node_modules"
    global_root.mkdir(parents=True)

    write_package(app_dir, {"name": "app", "version": "1.0.0", "dependencies": {}})
    write_package(
        library_dir,
        {"name": "widgets", "version": "0.5.0", "peerDependencies": {}},
    )
    return {"app": app_dir, "library": library_dir, "global_root": global_root}


@pytest.fixture()
def fake_pm(workspace: dict[str, Path]) -> FakePackageManager:
    return FakePackageManager(workspace["global_root"])


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()
