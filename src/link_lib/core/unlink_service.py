"""Core unlink service — reverses a link and restores the original declaration.

Works with the same injected collaborators as
:class:`~link_lib.core.link_service.LinkService`.  Unlink failures are
advisory (the app may never have been linked); only the reinstall of
the original declaration is fatal.
"""

from __future__ import annotations

from pathlib import Path

from link_lib.core.models import DEV_DEPENDENCIES, Manifest, RestorePlan
from link_lib.core.protocols import Filesystem, PackageManager, Reporter
from link_lib.core.restore import build_restore_plan, original_dependency_spec
from link_lib.exceptions import LinkLibError, RestoreFailedError


class UnlinkService:
    """Stateless service that drives the unlink/restore flow."""

    def __init__(
        self,
        package_manager: PackageManager,
        filesystem: Filesystem,
        reporter: Reporter,
    ) -> None:
        self._pm: PackageManager = package_manager
        self._fs: Filesystem = filesystem
        self._reporter: Reporter = reporter

    def unlink(
        self,
        app: Manifest,
        library: Manifest,
        *,
        remove_global: bool = False,
    ) -> RestorePlan:
        """Remove the app link, reinstall the original spec, optionally drop the global alias.

        The original declaration is captured from *app*, which was read before any
        npm command ran, so it survives whatever ``npm unlink`` does to
        ``package.json``.

        Raises
        ------
        RestoreFailedError
            When the reinstall command fails.
        """
        name = library.name
        app_dir = app.directory
        original = original_dependency_spec(app, name)

        self._reporter.step(f"Unlinking {name} from app...")
        try:
            self._pm.unlink(app_dir, name)
        except LinkLibError as exc:
            self._reporter.warning(f"Unlink of {name} in app failed: {exc}")

        plan = build_restore_plan(name, original)
        self._reinstall(app_dir, plan)

        if remove_global:
            self._remove_global(app_dir, name)

        return plan

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _reinstall(self, app_dir: Path, plan: RestorePlan) -> None:
        where = "devDependencies" if plan.section == DEV_DEPENDENCIES else "dependencies"
        self._reporter.step(
            f"Reinstalling {plan.package} into {where}"
            f"{' (exact)' if plan.exact else ''}...",
        )
        try:
            self._pm.install(app_dir, plan.install_args)
        except LinkLibError as exc:
            raise RestoreFailedError(
                f"Could not reinstall {plan.package}.",
                hint=f"{exc}\nRun: npm install {' '.join(plan.install_args)}",
            ) from exc
        self._reporter.success("App dependency restored.")

    def _remove_global(self, app_dir: Path, name: str) -> None:
        self._reporter.step(f"Removing global link for {name}...")
        try:
            self._pm.unlink(app_dir, name, global_=True)
        except LinkLibError as exc:
            self._reporter.warning(f"Global unlink of {name} failed: {exc}")

        try:
            global_slot = self._pm.global_root().joinpath(*name.split("/"))
        except LinkLibError as exc:
            self._reporter.warning(f"Could not locate the global link directory: {exc}")
            return

        if self._fs.exists(global_slot):
            try:
                self._fs.remove_tree(global_slot)
            except OSError as exc:
                self._reporter.warning(f"Cleanup failed: {exc}")
        self._reporter.success("Global link removed.")
