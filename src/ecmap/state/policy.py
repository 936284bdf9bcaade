"""Deterministic change-detection and notification policy.

This module intentionally contains *no* event delivery. The store asks it
which entities changed, what the totals are, and which entities should be
announced; delivery lives in :mod:`ecmap.state.events`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum

from ecmap.state.models import VOTE_FIELDS, VoteCount


class NotifyPolicy(StrEnum):
    """Which entities get a ``change:state`` event on an update."""

    # Every entity present in the incoming map, changed or not.
    ALL = "all"
    CHANGED = "changed"


class NestedUpdatePolicy(StrEnum):
    """What happens when a handler requests an update mid-notification."""

    QUEUE = "queue"
    RAISE = "raise"


def has_changed(current: VoteCount | None, incoming: VoteCount) -> bool:
    """Return ``True`` when *incoming* differs from *current*.

    An entity with no current value is an initialization and always counts
    as changed. Comparison stops at the first differing field.
    """
    if current is None:
        return True
    for field in VOTE_FIELDS:
        if getattr(current, field) != getattr(incoming, field):
            return True
    return False


def detect_changes(
    current: Mapping[str, VoteCount],
    incoming: Mapping[str, VoteCount],
) -> dict[str, VoteCount]:
    """Return the incoming entities whose distribution differs from *current*.

    Insertion order follows *incoming*.
    """
    return {name: votes for name, votes in incoming.items() if has_changed(current.get(name), votes)}


def sum_totals(votes: Iterable[VoteCount]) -> VoteCount:
    dem = rep = toss = 0
    for entry in votes:
        dem += entry.dem
        rep += entry.rep
        toss += entry.toss
    return VoteCount(dem=dem, rep=rep, toss=toss)


def entities_to_notify(
    policy: NotifyPolicy,
    incoming: Mapping[str, VoteCount],
    changed: Mapping[str, VoteCount],
) -> list[str]:
    """Names to announce with ``change:state``, in incoming order."""
    if policy is NotifyPolicy.CHANGED:
        return [name for name in incoming if name in changed]
    return list(incoming)
