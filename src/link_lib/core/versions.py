"""npm version and range helpers built on :mod:`semantic_version`.

Ranges are validated with :class:`semantic_version.NpmSpec` and split
into comparator sets (one per ``||`` alternative) using its parser's
desugaring of caret, tilde, x- and hyphen ranges.  Two ranges intersect
when some version satisfies a set from each side under npm's rules,
including the prerelease rule: a prerelease only matches a set that
names a prerelease of the same ``major.minor.patch``.

Every helper is pure and tolerant: anything that is not a valid npm
range (dist-tags, ``file:`` references, git URLs…) is reported as
"not comparable" rather than raising.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Iterator

from semantic_version import NpmSpec, Version, validate

_LEADING_NOISE = re.compile(r"^[=v\s]+")
_TAG_SUFFIX = re.compile(r"-\w+")
# "~/" only: a bare "~" starts a tilde range.
_LOCAL_PREFIXES: tuple[str, ...] = ("file:", "link:", "./", "../", "/", "~/")

_RANGE_JOINER = "||"
_HYPHEN = " - "

_COMPARE = {
    "==": operator.eq,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

_Comparator = tuple[str, Version]


# ---------------------------------------------------------------------------
# Exact versions
# ---------------------------------------------------------------------------

def is_exact_version(spec: str) -> bool:
    """True for a fully resolved version such as ``1.2.3`` or ``v1.2.3-rc.1``."""
    cleaned = _LEADING_NOISE.sub("", spec.strip())
    return bool(cleaned) and validate(cleaned)


def has_tag_suffix(spec: str) -> bool:
    """True when *spec* carries a prerelease/tag-like ``-word`` suffix."""
    return _TAG_SUFFIX.search(spec) is not None


def is_local_reference(spec: str) -> bool:
    """True for specs that point at the local filesystem.

    Covers ``file:`` and ``link:`` protocols as well as bare paths such
    as ``../widgets`` or ``~/src/widgets``.
    """
    return spec.strip().startswith(_LOCAL_PREFIXES)


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

def parse_range(expression: str) -> NpmSpec | None:
    """Parse an npm range, or return ``None`` when it is not one."""
    stripped = expression.strip()
    if not stripped or is_local_reference(stripped):
        return None
    try:
        return NpmSpec(stripped)
    except ValueError:
        return None


def ranges_intersect(first: str, second: str) -> bool | None:
    """Whether any version satisfies both npm ranges.

    Returns ``None`` when either side cannot be parsed, in which case no
    confident comparison is possible.
    """
    if parse_range(first) is None or parse_range(second) is None:
        return None
    try:
        left_sets = _comparator_sets(first.strip())
        right_sets = _comparator_sets(second.strip())
    except ValueError:
        return None
    return any(
        _sets_intersect(left_set, right_set)
        for left_set in left_sets
        for right_set in right_sets
    )


# ---------------------------------------------------------------------------
# Comparator sets (internal)
# ---------------------------------------------------------------------------

def _comparator_sets(expression: str) -> list[list[_Comparator]]:
    """Split a validated range into one comparator list per alternative."""
    parse_block = NpmSpec.Parser.parse_simple
    sets: list[list[_Comparator]] = []
    for group in expression.split(_RANGE_JOINER):
        group = group.strip() or ">=0.0.0"
        if _HYPHEN in group:
            low, high = group.split(_HYPHEN, 1)
            ranges = parse_block(">=" + low) + parse_block("<=" + high)
        else:
            ranges = [item for block in group.split(" ") for item in parse_block(block)]
        sets.append([(item.operator, item.target.truncate("prerelease")) for item in ranges])
    return sets


def _allows(version: Version, comparators: list[_Comparator]) -> bool:
    if version.prerelease and not any(
        target.prerelease and target.truncate() == version.truncate()
        for _, target in comparators
    ):
        return False
    return all(_COMPARE[op](version, target) for op, target in comparators)


def _candidates(comparators: list[_Comparator]) -> Iterator[Version]:
    """Versions that include the smallest match of any satisfiable pair.

    The lowest release above every lower bound is the truncated bound or
    its next patch.  The lowest prerelease of a given patch is the bound
    itself, the bound extended by ``.0``, or ``-0``.
    """
    yield Version("0.0.0")
    for _, target in comparators:
        release = target.truncate()
        yield release
        yield release.next_patch()
        if target.prerelease:
            yield target
            yield Version(
                major=target.major,
                minor=target.minor,
                patch=target.patch,
                prerelease=(*target.prerelease, "0"),
            )
            yield Version(
                major=target.major,
                minor=target.minor,
                patch=target.patch,
                prerelease=("0",),
            )


def _sets_intersect(left: list[_Comparator], right: list[_Comparator]) -> bool:
    return any(
        _allows(version, left) and _allows(version, right)
        for version in _candidates([*left, *right])
    )
