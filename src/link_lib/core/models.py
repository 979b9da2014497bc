"""Domain models for link-lib.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They are rebuilt from disk on every
invocation; nothing here is ever persisted or cached between runs.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path


DEPENDENCIES: str = "dependencies"
DEV_DEPENDENCIES: str = "devDependencies"
OPTIONAL_DEPENDENCIES: str = "optionalDependencies"
PEER_DEPENDENCIES: str = "peerDependencies"


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Manifest:
    """The subset of a ``package.json`` that link-lib cares about."""

    path: Path
    """Location of the ``package.json`` file."""

    name: str
    """Declared package name.  Empty when the manifest has none."""

    version: str | None = None
    """Declared package version, if any."""

    dependencies: Mapping[str, str] = field(default_factory=dict)
    dev_dependencies: Mapping[str, str] = field(default_factory=dict)
    optional_dependencies: Mapping[str, str] = field(default_factory=dict)
    peer_dependencies: Mapping[str, str] = field(default_factory=dict)

    @property
    def directory(self) -> Path:
        """Directory containing the manifest."""
        return self.path.parent

    def merged_dependencies(self) -> dict[str, str]:
        """Regular, dev and optional dependencies in one mapping.

        Later sections override earlier ones, mirroring how npm resolves a
        name declared in more than one section.
        """
        merged: dict[str, str] = {}
        merged.update(self.dependencies)
        merged.update(self.dev_dependencies)
        merged.update(self.optional_dependencies)
        return merged


# ---------------------------------------------------------------------------
# Link state
# ---------------------------------------------------------------------------

class LinkStatus(enum.Enum):
    """Derived state of a single dependency slot."""

    ABSENT = "absent"
    """Nothing exists at the slot path."""

    ELSEWHERE = "elsewhere"
    """Something exists but does not resolve to the library."""

    LINKED = "linked"
    """The slot is a symbolic link resolving to the library."""


@dataclass(frozen=True, slots=True)
class SlotState:
    """A dependency slot (global alias or ``node_modules`` entry) and its status."""

    path: Path
    status: LinkStatus
    is_symlink: bool = False

    @property
    def is_linked(self) -> bool:
        return self.status is LinkStatus.LINKED

    @property
    def is_installed_copy(self) -> bool:
        """True when a real (non-symlink) install occupies the slot."""
        return self.status is LinkStatus.ELSEWHERE and not self.is_symlink


@dataclass(frozen=True, slots=True)
class LinkOutcome:
    """Summary of one run of the link flow."""

    global_before: SlotState
    app_before: SlotState
    global_created: bool
    """Whether the global alias was (re)created during this run."""

    app_linked: bool
    """Whether the application link was (re)created during this run."""

    verified: bool
    """Whether the application slot resolves to the library after the run."""


# ---------------------------------------------------------------------------
# Peer dependencies
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class MissingPeer:
    """A peer dependency the application does not declare."""

    name: str
    expected: str

    def __str__(self) -> str:
        return f"{self.name}@{self.expected}"


@dataclass(frozen=True, slots=True)
class PeerMismatch:
    """A peer dependency whose declared range cannot satisfy the library's."""

    name: str
    declared: str
    expected: str

    def __str__(self) -> str:
        return f"{self.name} (app has {self.declared}, lib expects {self.expected})"


@dataclass(frozen=True, slots=True)
class PeerReport:
    """Advisory result of comparing peer dependencies."""

    missing: tuple[MissingPeer, ...] = ()
    mismatched: tuple[PeerMismatch, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.missing or self.mismatched)


# ---------------------------------------------------------------------------
# Restore
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DependencySpec:
    """The declaration an application held for the library before unlinking."""

    section: str
    """``dependencies`` or ``devDependencies``."""

    spec: str | None
    """Original spec string, or ``None`` when the app declared nothing."""


@dataclass(frozen=True, slots=True)
class RestorePlan:
    """The ``npm install`` arguments that restore a :class:`DependencySpec`."""

    package: str
    """Either the bare package name or ``name@spec``."""

    section: str
    exact: bool
    install_args: tuple[str, ...]
