from __future__ import annotations

import pytest
from pydantic import ValidationError

from ecmap.exceptions import InvalidVoteCountError, InvalidYearError
from ecmap.state.models import (
    StateSnapshot,
    StateUpdate,
    VoteCount,
    VoteDelta,
    apply_delta,
    parse_deltas,
    parse_update,
)
from ecmap.state.policy import NotifyPolicy, detect_changes, entities_to_notify, has_changed, sum_totals


def test_vote_count_missing_fields_default_to_zero() -> None:
    votes = VoteCount.model_validate({"rep": 18})
    assert (votes.dem, votes.rep, votes.toss) == (0, 18, 0)
    assert votes.total == 18


@pytest.mark.parametrize("bad", [-1, "3", 2.5, True, None])
def test_vote_count_rejects_malformed_fields(bad: object) -> None:
    with pytest.raises(ValidationError):
        VoteCount.model_validate({"dem": bad})


def test_vote_count_rejects_unknown_parties() -> None:
    with pytest.raises(ValidationError):
        VoteCount.model_validate({"green": 1})


def test_vote_count_is_frozen() -> None:
    votes = VoteCount(dem=1)
    with pytest.raises(ValidationError):
        votes.dem = 2  # type: ignore[misc]


def test_update_tracks_field_presence() -> None:
    assert parse_update({}).is_empty
    year_only = parse_update({"year": 2012})
    assert year_only.has_year and not year_only.has_state_votes
    both = parse_update({"year": None, "stateVotes": {}})
    assert both.has_year and both.has_state_votes


def test_update_accepts_snake_and_camel_keys() -> None:
    camel = parse_update({"stateVotes": {"Ohio": {"rep": 18}}})
    snake = parse_update({"state_votes": {"Ohio": {"rep": 18}}})
    assert camel.state_votes == snake.state_votes == {"Ohio": VoteCount(rep=18)}


def test_typed_update_is_validated_again() -> None:
    update = StateUpdate(year=2020)
    assert parse_update(update) == update
    assert parse_update(update).has_year

    update.state_votes = {"Iowa": {"dem": -6}}  # type: ignore[assignment]
    with pytest.raises(InvalidVoteCountError) as excinfo:
        parse_update(update)
    assert excinfo.value.entity == "Iowa"


@pytest.mark.parametrize("bad", [True, 2012.5, "2012"])
def test_update_rejects_non_integer_year(bad: object) -> None:
    with pytest.raises(InvalidYearError):
        parse_update({"year": bad})


def test_parse_update_reports_offending_entity() -> None:
    with pytest.raises(InvalidVoteCountError) as excinfo:
        parse_update({"stateVotes": {"Ohio": {"rep": -18}}})
    assert excinfo.value.entity == "Ohio"
    assert isinstance(excinfo.value, ValueError)


def test_parse_deltas_allows_negative_values() -> None:
    deltas = parse_deltas({"Ohio": {"dem": -2}, "Iowa": VoteCount(toss=1)})
    assert deltas == {"Ohio": VoteDelta(dem=-2), "Iowa": VoteDelta(toss=1)}


def test_parse_deltas_rejects_non_numeric() -> None:
    with pytest.raises(InvalidVoteCountError) as excinfo:
        parse_deltas({"Ohio": {"dem": "two"}})
    assert excinfo.value.entity == "Ohio"


def test_apply_delta_refuses_negative_result() -> None:
    assert apply_delta("Ohio", VoteCount(rep=18), VoteDelta(dem=2)) == VoteCount(dem=2, rep=18)
    with pytest.raises(InvalidVoteCountError):
        apply_delta("Ohio", VoteCount(rep=18), VoteDelta(rep=-19))


def test_snapshot_dumps_camel_case() -> None:
    snapshot = StateSnapshot(year=2012, state_votes={"Ohio": VoteCount(rep=18)}, totals=VoteCount(rep=18))
    dumped = snapshot.model_dump(by_alias=True)
    assert dumped["stateVotes"] == {"Ohio": {"dem": 0, "rep": 18, "toss": 0}}


def test_has_changed_treats_new_entities_as_changed() -> None:
    assert has_changed(None, VoteCount())
    assert not has_changed(VoteCount(rep=18), VoteCount(rep=18))
    assert has_changed(VoteCount(rep=18), VoteCount(rep=18, toss=1))


def test_detect_changes_preserves_incoming_order() -> None:
    current = {"Ohio": VoteCount(rep=18), "Iowa": VoteCount(dem=6)}
    incoming = {"Utah": VoteCount(rep=6), "Ohio": VoteCount(rep=18), "Iowa": VoteCount(toss=6)}
    assert list(detect_changes(current, incoming)) == ["Utah", "Iowa"]


def test_sum_totals() -> None:
    assert sum_totals([]) == VoteCount()
    assert sum_totals([VoteCount(dem=3, toss=1), VoteCount(rep=5)]) == VoteCount(dem=3, rep=5, toss=1)


def test_entities_to_notify_policies() -> None:
    incoming = {"Ohio": VoteCount(rep=18), "Iowa": VoteCount(dem=6)}
    changed = {"Iowa": VoteCount(dem=6)}
    assert entities_to_notify(NotifyPolicy.ALL, incoming, changed) == ["Ohio", "Iowa"]
    assert entities_to_notify(NotifyPolicy.CHANGED, incoming, changed) == ["Iowa"]
