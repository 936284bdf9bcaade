"""Deterministic in-memory state store.

This is the only component allowed to mutate the map state. Everything it
hands out (snapshots, change sets, event payloads) is a copy.
"""

from __future__ import annotations

import copy
import logging
from collections import deque
from collections.abc import Callable, Mapping
from typing import Any

from ecmap.config import EcMapConfig
from ecmap.exceptions import EcMapError, ReentrantUpdateError, UnknownEntityError
from ecmap.outcome import Outcome, indicate_winner
from ecmap.state.events import EventBus, EventName, Handler
from ecmap.state.models import (
    StateChange,
    StateSnapshot,
    StateUpdate,
    VoteCount,
    VoteDelta,
    apply_delta,
    parse_deltas,
    parse_update,
)
from ecmap.state.policy import NestedUpdatePolicy, detect_changes, entities_to_notify, sum_totals

_logger = logging.getLogger(__name__)


class StateStore:
    """In-memory store for the electoral-vote map.

    Each :meth:`apply_update` call recomputes the totals fully, then fires a
    ``change:state`` event per announced entity followed by exactly one
    ``change`` event. Handlers therefore always observe consistent totals.

    Updates requested from inside a handler never interleave with the cycle
    in progress: depending on ``config.nested_updates`` they are queued until
    the cycle completes or rejected with :class:`ReentrantUpdateError`.
    """

    def __init__(self, config: EcMapConfig | None = None, *, bus: EventBus | None = None) -> None:
        self._config = config or EcMapConfig()
        self._bus = bus if bus is not None else EventBus()
        self._year: int | None = None
        self._state_votes: dict[str, VoteCount] = {}
        self._totals = VoteCount()
        self._changed: dict[str, VoteCount] | None = None
        self._notifying = False
        self._pending: deque[Callable[[], None]] = deque()

    @property
    def config(self) -> EcMapConfig:
        return self._config

    def on(self, event_name: EventName | str, handler: Handler) -> None:
        """Subscribe *handler* to ``"change"`` or ``"change:state"``."""
        self._bus.subscribe(event_name, handler)

    def off(self, event_name: EventName | str, handler: Handler | None = None) -> None:
        """Unsubscribe *handler*; all handlers for the event when omitted."""
        self._bus.unsubscribe(event_name, handler)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_snapshot(self) -> StateSnapshot:
        """Return a deep copy of the current state."""
        return StateSnapshot(
            year=self._year,
            state_votes=copy.deepcopy(self._state_votes),
            totals=copy.deepcopy(self._totals),
        )

    def outcome(self) -> Outcome:
        """Winner indicated by the current totals under the configured threshold."""
        return indicate_winner(self._totals, self._config.winning_threshold)

    def changed_entities(self) -> dict[str, VoteCount] | None:
        """Entities changed by the most recent update, or ``None`` if none were."""
        if not self._changed:
            return None
        return copy.deepcopy(self._changed)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def apply_update(self, update: StateUpdate | Mapping[str, Any]) -> None:
        """Apply a partial snapshot and notify subscribers.

        Either field may be omitted; an update with neither is a no-op that
        fires no events (but still clears the last change set).

        Raises
        ------
        InvalidVoteCountError
            If any vote count is malformed. Nothing is applied.
        InvalidYearError
            If the year is not an integer. Nothing is applied.
        ReentrantUpdateError
            If called from a handler with ``NestedUpdatePolicy.RAISE``.
        """
        parsed = parse_update(update)
        self._submit("apply_update", lambda: self._apply(parsed))

    def apply_relative_delta(self, deltas: Mapping[str, VoteDelta | VoteCount | Mapping[str, Any]]) -> None:
        """Adjust entity votes relative to their current values.

        The merged result is applied as a *complete* entity map, so every
        known entity is announced, not only the adjusted ones.

        Raises
        ------
        UnknownEntityError
            If a delta names an entity not present in the store.
        InvalidVoteCountError
            If a delta is malformed or would drive a count below zero.
        """
        parsed = parse_deltas(deltas)
        self._require_known(parsed)
        self._submit("apply_relative_delta", lambda: self._apply(self._merge_deltas(parsed)))

    def _require_known(self, deltas: Mapping[str, VoteDelta]) -> None:
        for name in deltas:
            if name not in self._state_votes:
                raise UnknownEntityError(name)

    def _merge_deltas(self, deltas: Mapping[str, VoteDelta]) -> StateUpdate:
        merged = dict(self._state_votes)
        for name, delta in deltas.items():
            current = merged.get(name)
            if current is None:
                raise UnknownEntityError(name)
            merged[name] = apply_delta(name, current, delta)
        return StateUpdate(state_votes=merged)

    def _submit(self, operation: str, request: Callable[[], None]) -> None:
        if self._notifying:
            if self._config.nested_updates is NestedUpdatePolicy.RAISE:
                raise ReentrantUpdateError(f"{operation} called while notifying subscribers")
            _logger.debug("Queueing nested %s until the current notification cycle completes", operation)
            self._pending.append(request)
            return

        request()
        while self._pending:
            queued = self._pending.popleft()
            try:
                queued()
            except EcMapError:
                # Queued on behalf of a handler; fail the same way a handler does.
                _logger.warning("Queued nested update failed", exc_info=True)

    def _apply(self, update: StateUpdate) -> None:
        change_occurred = False
        self._changed = None

        if update.has_year:
            self._year = update.year
            change_occurred = True

        announced: list[tuple[str, VoteCount]] = []
        if update.has_state_votes:
            incoming = update.state_votes or {}
            changes = detect_changes(self._state_votes, incoming)
            merged = {**self._state_votes, **incoming}
            totals = sum_totals(merged.values())
            self._state_votes = merged
            self._totals = totals
            self._changed = changes or None
            names = entities_to_notify(self._config.notify_policy, incoming, changes)
            announced = [(name, incoming[name]) for name in names]
            change_occurred = True
            _logger.debug(
                "Applied %d entities (%d changed); totals dem=%d rep=%d toss=%d",
                len(incoming),
                len(changes),
                self._totals.dem,
                self._totals.rep,
                self._totals.toss,
            )

        if not change_occurred:
            return

        self._notifying = True
        try:
            for name, votes in announced:
                self._bus.publish(EventName.CHANGE_STATE, StateChange.from_votes(name, votes))
            self._bus.publish(EventName.CHANGE, self.get_snapshot())
        finally:
            self._notifying = False
