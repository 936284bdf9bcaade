"""Location-fragment codec for map state.

A snapshot is shared as percent-encoded JSON in the fragment part of a URL
(``#%7B%22year%22...``). Totals are written for readability but ignored on
decode; the store always derives them.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote, unquote

from ecmap.exceptions import FragmentDecodeError, InvalidVoteCountError, InvalidYearError
from ecmap.state.events import EventContext, EventName
from ecmap.state.models import StateSnapshot, StateUpdate, parse_update
from ecmap.state.store import StateStore

_logger = logging.getLogger(__name__)


def encode_fragment(snapshot: StateSnapshot) -> str:
    return quote(snapshot.model_dump_json(by_alias=True), safe="")


def decode_fragment(fragment: str) -> StateUpdate:
    """Decode a fragment produced by :func:`encode_fragment`.

    A leading ``#`` is tolerated. An empty fragment decodes to an empty
    (no-op) update.
    """
    text = unquote(fragment.removeprefix("#"))
    if not text.strip():
        return StateUpdate()
    try:
        payload: Any = json.loads(text)
    except ValueError as exc:
        raise FragmentDecodeError(f"Fragment is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise FragmentDecodeError("Fragment must decode to a JSON object")
    payload.pop("totals", None)
    try:
        return parse_update(payload)
    except (InvalidVoteCountError, InvalidYearError) as exc:
        raise FragmentDecodeError(f"Fragment carries an invalid update: {exc}") from exc


class FragmentTracker:
    """Keep an encoded fragment in sync with a store's ``change`` events."""

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self.fragment = encode_fragment(store.get_snapshot())
        store.on(EventName.CHANGE, self._on_change)

    def _on_change(self, context: EventContext, snapshot: StateSnapshot) -> None:
        self.fragment = encode_fragment(snapshot)
        _logger.debug("Fragment updated seq=%d length=%d", context.sequence, len(self.fragment))

    def restore(self, fragment: str) -> None:
        """Apply a previously shared fragment to the tracked store."""
        self._store.apply_update(decode_fragment(fragment))

    def detach(self) -> None:
        self._store.off(EventName.CHANGE, self._on_change)
