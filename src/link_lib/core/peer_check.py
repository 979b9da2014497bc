"""Peer-dependency comparison between a library and its consuming app.

The result is advisory only: callers render it as warnings and the run
continues regardless of what is found.
"""

from __future__ import annotations

from collections.abc import Mapping

from link_lib.core.models import Manifest, MissingPeer, PeerMismatch, PeerReport
from link_lib.core.versions import ranges_intersect


def compare_peer_dependencies(
    app_dependencies: Mapping[str, str],
    peer_dependencies: Mapping[str, str],
) -> PeerReport:
    """Compare the library's peer ranges with the app's declarations.

    * An app with no (or an empty) declaration → :class:`MissingPeer`.
    * Both sides valid ranges with no common version → :class:`PeerMismatch`.
    * Anything unparseable on either side is skipped.
    """
    missing: list[MissingPeer] = []
    mismatched: list[PeerMismatch] = []

    for name, expected in peer_dependencies.items():
        declared = app_dependencies.get(name)
        if not declared:
            missing.append(MissingPeer(name=name, expected=expected))
            continue
        if ranges_intersect(expected, declared) is False:
            mismatched.append(
                PeerMismatch(name=name, declared=declared, expected=expected),
            )

    return PeerReport(missing=tuple(missing), mismatched=tuple(mismatched))


def check_peer_dependencies(app: Manifest, library: Manifest) -> PeerReport:
    """Run :func:`compare_peer_dependencies` for two manifests."""
    if not library.peer_dependencies:
        return PeerReport()
    return compare_peer_dependencies(
        app.merged_dependencies(),
        library.peer_dependencies,
    )
