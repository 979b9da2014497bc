"""Core link service — makes an application resolve a library via npm link.

This service depends on a :class:`~link_lib.core.protocols.PackageManager`,
a :class:`~link_lib.core.protocols.Filesystem` and a
:class:`~link_lib.core.protocols.Reporter`, all injected at construction
time.  It is responsible for:

* Detecting the state of the global alias and the application slot.
* Creating or refreshing the global alias when it is missing or stale.
* Replacing an installed copy with a link, retrying once after an unlink.
* Verifying the application slot afterwards.

Guarantees
----------
* Slot state is re-derived from the filesystem on every call.
* A second run against an already linked app performs no mutation.
* Only :class:`~link_lib.exceptions.LinkLibError` subclasses escape.
"""

from __future__ import annotations

from pathlib import Path

from link_lib.core.models import LinkOutcome, Manifest, SlotState
from link_lib.core.protocols import Filesystem, PackageManager, Reporter
from link_lib.exceptions import LinkFailedError, LinkLibError


def node_modules_slot(app_dir: Path, name: str) -> Path:
    """Path of ``node_modules/<name>`` inside *app_dir* (scoped names included)."""
    return app_dir.joinpath("node_modules", *name.split("/"))


class LinkService:
    """Stateless service that drives the link flow.

    Parameters
    ----------
    package_manager:
        Any object satisfying the :class:`PackageManager` protocol.
    filesystem:
        Any object satisfying the :class:`Filesystem` protocol.
    reporter:
        Receives user-facing progress messages.
    """

    def __init__(
        self,
        package_manager: PackageManager,
        filesystem: Filesystem,
        reporter: Reporter,
    ) -> None:
        self._pm: PackageManager = package_manager
        self._fs: Filesystem = filesystem
        self._reporter: Reporter = reporter

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def detect(self, slot: Path, library_dir: Path) -> SlotState:
        """Classify *slot* against *library_dir* straight from disk."""
        return SlotState(
            path=slot,
            status=self._fs.slot_status(slot, library_dir),
            is_symlink=self._fs.is_symlink(slot),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def link(self, app: Manifest, library: Manifest) -> LinkOutcome:
        """Ensure the global alias and the application link for *library*.

        Raises
        ------
        LinkFailedError
            When the application link fails even after one unlink/retry.
        PackageManagerError
            When the global root cannot be determined.
        """
        name = library.name
        library_dir = library.directory
        app_dir = app.directory

        global_slot = self._pm.global_root().joinpath(*name.split("/"))
        app_slot = node_modules_slot(app_dir, name)

        global_state = self.detect(global_slot, library_dir)
        app_state = self.detect(app_slot, library_dir)
        self._reporter.status(global_state, app_state)

        global_created = self._ensure_global(name, library_dir, global_state)

        if app_state.is_linked:
            self._reporter.info("App is already linked to the library — nothing to do.")
            return LinkOutcome(
                global_before=global_state,
                app_before=app_state,
                global_created=global_created,
                app_linked=False,
                verified=True,
            )

        if app_state.is_installed_copy:
            self._remove_installed_copy(app_slot)

        self._link_app(app_dir, name)
        verified = self._verify(app_slot, library_dir, name)

        return LinkOutcome(
            global_before=global_state,
            app_before=app_state,
            global_created=global_created,
            app_linked=True,
            verified=verified,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _ensure_global(self, name: str, library_dir: Path, state: SlotState) -> bool:
        if state.is_linked:
            self._reporter.info("Global link already set — skipping.")
            return False

        self._reporter.step(f"Creating/refreshing global link for {name} from library...")
        try:
            self._pm.link_global(library_dir)
        except LinkLibError as exc:
            self._reporter.warning(f"Global link failed: {exc}")
            return False
        self._reporter.success("Global link ready.")
        return True

    def _remove_installed_copy(self, app_slot: Path) -> None:
        self._reporter.step(f"Removing existing non-symlink install: {app_slot}")
        try:
            self._fs.remove_tree(app_slot)
        except OSError as exc:
            self._reporter.warning(f"Cleanup failed: {exc}")

    def _link_app(self, app_dir: Path, name: str) -> None:
        self._reporter.step(f"Linking {name} into app...")
        try:
            self._pm.link(app_dir, name)
            return
        except LinkLibError:
            self._reporter.warning(
                f'First link attempt failed. Trying "npm unlink {name}" then relink...',
            )

        try:
            self._pm.unlink(app_dir, name)
        except LinkLibError as exc:
            self._reporter.warning(f"Unlink of {name} in app failed: {exc}")

        try:
            self._pm.link(app_dir, name)
        except LinkLibError as exc:
            raise LinkFailedError(
                f"Could not link {name} into {app_dir}.",
                hint=f"{exc}\nCheck that the global link exists and that symlinks are permitted.",
            ) from exc

    def _verify(self, app_slot: Path, library_dir: Path, name: str) -> bool:
        if self.detect(app_slot, library_dir).is_linked:
            self._reporter.success(f"Verified: node_modules/{name} -> {library_dir}")
            return True
        self._reporter.warning(
            "Link done but verification failed; check symlink permissions / paths.",
        )
        return False
