"""Winner indication from map totals.

Typically driven from a ``change`` subscriber::

    store.on("change", lambda ctx, snapshot: show(indicate_winner(snapshot.totals)))
"""

from __future__ import annotations

from enum import StrEnum

from ecmap.config import DEFAULT_WINNING_THRESHOLD
from ecmap.state.models import VoteCount

WINNING_THRESHOLD = DEFAULT_WINNING_THRESHOLD


class Party(StrEnum):
    DEM = "dem"
    REP = "rep"


class Outcome(StrEnum):
    DEM = "dem"
    REP = "rep"
    TIE = "tie"
    UNDECIDED = "undecided"


def votes_needed(totals: VoteCount, party: Party | str, threshold: int = WINNING_THRESHOLD) -> int:
    """Votes *party* still needs to reach *threshold* (never negative)."""
    held = getattr(totals, Party(party).value)
    return max(threshold - held, 0)


def indicate_winner(totals: VoteCount, threshold: int = WINNING_THRESHOLD) -> Outcome:
    if totals.dem >= threshold and totals.dem > totals.rep:
        return Outcome.DEM
    if totals.rep >= threshold and totals.rep > totals.dem:
        return Outcome.REP
    # Full allocation split evenly one vote short of the threshold each.
    if totals.toss == 0 and totals.dem == totals.rep == threshold - 1:
        return Outcome.TIE
    return Outcome.UNDECIDED
