"""Core / service layer — link orchestration and pure data transformations.

Rules
-----
* No ``print()`` calls; progress goes through a :class:`Reporter`.
* No direct filesystem or subprocess access — only injected protocols.
* No imports from ``cli`` or ``infra``.
"""

from link_lib.core.link_service import LinkService
from link_lib.core.models import (
    DependencySpec,
    LinkOutcome,
    LinkStatus,
    Manifest,
    MissingPeer,
    PeerMismatch,
    PeerReport,
    RestorePlan,
    SlotState,
)
from link_lib.core.peer_check import check_peer_dependencies
from link_lib.core.protocols import Filesystem, PackageManager, Reporter
from link_lib.core.unlink_service import UnlinkService

__all__: list[str] = [
    "DependencySpec",
    "Filesystem",
    "LinkOutcome",
    "LinkService",
    "LinkStatus",
    "Manifest",
    "MissingPeer",
    "PackageManager",
    "PeerMismatch",
    "PeerReport",
    "Reporter",
    "RestorePlan",
    "SlotState",
    "UnlinkService",
    "check_peer_dependencies",
]
