"""End-to-end tests for the CLI (cli/app.py).

npm is replaced by :class:`FakePackageManager` through the
``_create_package_manager`` seam; manifests and symlinks are real files
under ``tmp_path``.

Coverage:
* Argument resolution (``--app``, relative library path, watch script).
* Link and unlink/restore flows through :func:`main`.
* Watch-mode launch and hosting.
* The :func:`cli` error boundary and its exit codes.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from link_lib.cli import app as app_module
from link_lib.cli import exit_codes
from link_lib.cli.app import (
    DEFAULT_WATCH_SCRIPT,
    WATCH_SCRIPT_ENV_VAR,
    cli,
    main,
    resolve_invocation,
)
from link_lib.exceptions import LinkLibError, ManifestNotFoundError
from link_lib.infra.symlinks import is_symlink_to


def _args(**overrides: Any) -> argparse.Namespace:
    values: dict[str, Any] = {
        "library": "../widgets",
        "app": None,
        "watch": False,
        "script": None,
        "unlink": False,
        "unlink_global": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture()
def use_fake_pm(monkeypatch: pytest.MonkeyPatch, fake_pm: Any) -> Any:
    monkeypatch.setattr(app_module, "_create_package_manager", lambda: fake_pm)
    return fake_pm


@pytest.fixture(autouse=True)
def _isolated_sessions(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_module, "_watch_sessions", [])


# ---------------------------------------------------------------------------
# resolve_invocation
# ---------------------------------------------------------------------------

class TestResolveInvocation:
    def test_library_is_relative_to_cwd_by_default(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.delenv(WATCH_SCRIPT_ENV_VAR, raising=False)
        invocation = resolve_invocation(_args(), cwd=tmp_path / "app")

        assert invocation.app_dir == tmp_path / "app"
        assert invocation.library_dir == tmp_path / "widgets"
        assert invocation.script == DEFAULT_WATCH_SCRIPT

    def test_library_is_relative_to_app_option(self, tmp_path: Path) -> None:
        invocation = resolve_invocation(
            _args(app="projects/app", library="../widgets/"), cwd=tmp_path,
        )
        assert invocation.app_dir == tmp_path / "projects" / "app"
        assert invocation.library_dir == tmp_path / "projects" / "widgets"

    def test_absolute_app_option(self, tmp_path: Path) -> None:
        invocation = resolve_invocation(_args(app=tmp_path / "app"), cwd=Path("/elsewhere"))
        assert invocation.app_dir == tmp_path / "app"

    def test_watch_script_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv(WATCH_SCRIPT_ENV_VAR, "dev")
        assert resolve_invocation(_args(), cwd=tmp_path).script == "dev"
        assert resolve_invocation(_args(script="watch"), cwd=tmp_path).script == "watch"


# ---------------------------------------------------------------------------
# Link
# ---------------------------------------------------------------------------

class TestLinkCommand:
    def test_fresh_link(
        self, workspace: dict[str, Path], use_fake_pm: Any, capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = main(["../widgets", "--app", str(workspace["app"])])

        assert code == exit_codes.SUCCESS
        assert is_symlink_to(workspace["app"] / "node_modules" / "widgets", workspace["library"])
        assert "Verified" in capsys.readouterr().err

    def test_peer_warnings_are_printed(
        self,
        workspace: dict[str, Path],
        write_package: Callable[..., Path],
        use_fake_pm: Any,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        write_package(
            workspace["library"],
            {"name": "widgets", "peerDependencies": {"vue": "^3.3.0", "pinia": "^2.0.0"}},
        )
        write_package(workspace["app"], {"name": "app", "dependencies": {"vue": "^2.7.0"}})

        assert main(["../widgets", "--app", str(workspace["app"])]) == exit_codes.SUCCESS

        err = capsys.readouterr().err
        assert "Missing peerDependencies in app:" in err
        assert "pinia@^2.0.0" in err
        assert "Version mismatch for peerDependencies:" in err

    def test_missing_app_manifest(self, tmp_path: Path, use_fake_pm: Any) -> None:
        bare = tmp_path / "bare-app"
        bare.mkdir()
        with pytest.raises(ManifestNotFoundError, match="No package.json in app"):
            main(["../widgets", "--app", str(bare)])
        assert use_fake_pm.calls == []

    def test_watch_starts_session(
        self, workspace: dict[str, Path], use_fake_pm: Any, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        session = MagicMock()
        started: list[tuple[Any, Path, str]] = []

        def fake_start(pm: Any, library_dir: Path, script: str) -> Any:
            started.append((pm, library_dir, script))
            return session

        monkeypatch.setattr(app_module, "_start_watcher", fake_start)

        code = main(
            ["../widgets", "--app", str(workspace["app"]), "--watch", "--script", "dev"],
        )

        assert code == exit_codes.SUCCESS
        assert started == [(use_fake_pm, workspace["library"], "dev")]
        assert app_module._watch_sessions == [session]

    def test_doctor_directory_is_treated_as_library(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        app_dir = tmp_path / "app"
        (app_dir / "doctor").mkdir(parents=True)
        seen: list[Any] = []
        monkeypatch.setattr(app_module, "_handle_link", lambda invocation: seen.append(invocation) or 0)

        assert main(["doctor", "--app", str(app_dir)]) == exit_codes.SUCCESS
        assert seen[0].library_dir == app_dir / "doctor"


# ---------------------------------------------------------------------------
# Unlink
# ---------------------------------------------------------------------------

class TestUnlinkCommand:
    def test_unlink_restores_dev_dependency(
        self,
        workspace: dict[str, Path],
        write_package: Callable[..., Path],
        use_fake_pm: Any,
    ) -> None:
        write_package(
            workspace["app"],
            {"name": "app", "devDependencies": {"widgets": "0.5.0-nightly.5"}},
        )

        code = main(["../widgets", "--app", str(workspace["app"]), "--unlink"])

        assert code == exit_codes.SUCCESS
        assert use_fake_pm.calls[-1] == (
            "install",
            workspace["app"],
            ("--save-dev", "widgets@0.5.0-nightly.5", "--save-exact"),
        )

    def test_unlink_global_flag(self, workspace: dict[str, Path], use_fake_pm: Any) -> None:
        main(["../widgets", "--app", str(workspace["app"]), "--unlink", "--unlink-global"])
        assert ("unlink", workspace["app"], "widgets", True) in use_fake_pm.calls

    def test_watch_is_ignored_with_unlink(
        self,
        workspace: dict[str, Path],
        use_fake_pm: Any,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        main(["../widgets", "--app", str(workspace["app"]), "--unlink", "--watch"])
        assert "--watch is ignored" in capsys.readouterr().err
        assert app_module._watch_sessions == []

    def test_unlink_global_alone_is_ignored(
        self,
        workspace: dict[str, Path],
        use_fake_pm: Any,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        main(["../widgets", "--app", str(workspace["app"]), "--unlink-global"])
        assert "only applies with --unlink" in capsys.readouterr().err
        assert not any(call[0] == "install" for call in use_fake_pm.calls)


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    def _run_cli(self, monkeypatch: pytest.MonkeyPatch, main_impl: Callable[[], int]) -> int:
        monkeypatch.setattr(sys, "argv", ["link-lib"])
        monkeypatch.setattr(app_module, "main", main_impl)
        with pytest.raises(SystemExit) as exc_info:
            cli()
        return int(exc_info.value.code or 0)

    def test_success(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run_cli(monkeypatch, lambda: exit_codes.SUCCESS) == exit_codes.SUCCESS

    def test_domain_error_shows_hint(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        def failing() -> int:
            raise LinkLibError("No package.json in app", hint="Run inside an npm project.")

        assert self._run_cli(monkeypatch, failing) == exit_codes.GENERAL_ERROR
        err = capsys.readouterr().err
        assert "Error:" in err
        assert "No package.json in app" in err
        assert "Run inside an npm project." in err

    def test_keyboard_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def interrupted() -> int:
            raise KeyboardInterrupt

        assert self._run_cli(monkeypatch, interrupted) == exit_codes.KEYBOARD_INTERRUPT

    def test_unexpected_error_exits_with_one(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        def broken() -> int:
            raise RuntimeError("kaboom")

        assert self._run_cli(monkeypatch, broken) == 1
        assert "RuntimeError: kaboom" in capsys.readouterr().err

    def test_hosts_watchers_before_exit(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session = MagicMock()

        def start_watch() -> int:
            app_module._watch_sessions.append(session)
            return exit_codes.SUCCESS

        assert self._run_cli(monkeypatch, start_watch) == exit_codes.SUCCESS
        session.join.assert_called_once_with()
        assert app_module._watch_sessions == []

    def test_interrupt_while_watching(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session = MagicMock()
        session.join.side_effect = KeyboardInterrupt

        def start_watch() -> int:
            app_module._watch_sessions.append(session)
            return exit_codes.SUCCESS

        assert self._run_cli(monkeypatch, start_watch) == exit_codes.KEYBOARD_INTERRUPT
