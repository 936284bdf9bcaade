"""Typed records for the electoral-vote map state.

Every record inherits from :class:`EcMapModel` which provides
``alias_generator=to_camel`` so the camelCase keys used by the map front-end
(``stateVotes``) and snake_case attribute names both validate.

:class:`VoteCount` is frozen; the mutable containers that hold it
(:class:`StateSnapshot`) are only ever handed out as deep copies.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError
from pydantic.alias_generators import to_camel

from ecmap.exceptions import InvalidVoteCountError, InvalidYearError

VOTE_FIELDS: tuple[str, ...] = ("dem", "rep", "toss")

Votes = Annotated[StrictInt, Field(ge=0)]
"""A non-negative electoral vote count. Booleans and numeric strings are rejected."""


class EcMapModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class VoteCount(EcMapModel):
    """Electoral votes for one entity, split between two parties and tossups."""

    model_config = ConfigDict(frozen=True)

    dem: Votes = 0
    rep: Votes = 0
    toss: Votes = 0

    @property
    def total(self) -> int:
        return self.dem + self.rep + self.toss


class VoteDelta(EcMapModel):
    """Relative adjustment for one entity. Fields may be negative."""

    model_config = ConfigDict(frozen=True)

    dem: StrictInt = 0
    rep: StrictInt = 0
    toss: StrictInt = 0


class StateSnapshot(EcMapModel):
    """Full map state.

    ``totals`` is derived: it always equals the field-wise sum of
    ``state_votes``.
    """

    year: int | None = None
    state_votes: dict[str, VoteCount] = Field(default_factory=dict)
    totals: VoteCount = Field(default_factory=VoteCount)


class StateUpdate(EcMapModel):
    """Partial snapshot accepted by the store.

    Presence matters more than value: a field left out of the constructor is
    not applied at all (see ``model_fields_set``).
    """

    year: StrictInt | None = None
    state_votes: dict[str, VoteCount] | None = None

    @property
    def has_year(self) -> bool:
        return "year" in self.model_fields_set

    @property
    def has_state_votes(self) -> bool:
        return "state_votes" in self.model_fields_set and self.state_votes is not None

    @property
    def is_empty(self) -> bool:
        return not self.has_year and not self.has_state_votes


class StateChange(EcMapModel):
    """Payload of a ``change:state`` event."""

    model_config = ConfigDict(frozen=True)

    name: str
    dem: int
    rep: int
    toss: int

    @classmethod
    def from_votes(cls, name: str, votes: VoteCount) -> StateChange:
        return cls(name=name, dem=votes.dem, rep=votes.rep, toss=votes.toss)


def _entity_from_error(exc: ValidationError) -> str:
    """Best-effort entity name for the first error of a validation failure."""
    for error in exc.errors():
        loc = error.get("loc", ())
        # ("state_votes", "<entity>", "<field>") or ("<entity>", "<field>")
        if len(loc) >= 2 and loc[0] in ("state_votes", "stateVotes"):
            return str(loc[1])
        if len(loc) >= 1 and loc[0] not in ("year", "state_votes", "stateVotes"):
            return str(loc[0])
    return ""


def parse_update(update: StateUpdate | Mapping[str, Any]) -> StateUpdate:
    """Validate a partial snapshot into a fresh :class:`StateUpdate`.

    Typed input is validated again: attribute assignment on a
    ``StateUpdate`` is not validated, so it may carry raw values.
    """
    if isinstance(update, StateUpdate):
        payload = {name: getattr(update, name) for name in update.model_fields_set}
    else:
        payload = dict(update)
    try:
        return StateUpdate.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0].get("loc", ())
        if first and first[0] == "year":
            raise InvalidYearError(str(exc)) from exc
        raise InvalidVoteCountError(str(exc), entity=_entity_from_error(exc)) from exc


def parse_deltas(deltas: Mapping[str, VoteDelta | VoteCount | Mapping[str, Any]]) -> dict[str, VoteDelta]:
    parsed: dict[str, VoteDelta] = {}
    for name, delta in deltas.items():
        if isinstance(delta, VoteDelta):
            parsed[name] = delta
            continue
        if isinstance(delta, VoteCount):
            delta = delta.model_dump()
        try:
            parsed[name] = VoteDelta.model_validate(delta)
        except ValidationError as exc:
            raise InvalidVoteCountError(str(exc), entity=name) from exc
    return parsed


def apply_delta(name: str, current: VoteCount, delta: VoteDelta) -> VoteCount:
    try:
        return VoteCount(
            dem=current.dem + delta.dem,
            rep=current.rep + delta.rep,
            toss=current.toss + delta.toss,
        )
    except ValidationError as exc:
        raise InvalidVoteCountError(f"Delta would make votes negative for {name!r}", entity=name) from exc
