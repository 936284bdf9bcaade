"""ecmap - Electoral-college map state with change notifications."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ecmap")
except PackageNotFoundError:
    __version__ = "0+local"
from ecmap.config import EcMapConfig
from ecmap.exceptions import (
    EcMapConfigError,
    EcMapError,
    FragmentDecodeError,
    InvalidVoteCountError,
    InvalidYearError,
    ReentrantUpdateError,
    UnknownEntityError,
)
from ecmap.fragment import FragmentTracker, decode_fragment, encode_fragment
from ecmap.outcome import WINNING_THRESHOLD, Outcome, Party, indicate_winner, votes_needed
from ecmap.state.events import EventBus, EventContext, EventName
from ecmap.state.models import StateChange, StateSnapshot, StateUpdate, VoteCount, VoteDelta
from ecmap.state.policy import NestedUpdatePolicy, NotifyPolicy
from ecmap.state.store import StateStore

__all__ = [
    "__version__",
    "WINNING_THRESHOLD",
    "EcMapConfig",
    "EcMapConfigError",
    "EcMapError",
    "EventBus",
    "EventContext",
    "EventName",
    "FragmentDecodeError",
    "FragmentTracker",
    "InvalidVoteCountError",
    "InvalidYearError",
    "NestedUpdatePolicy",
    "NotifyPolicy",
    "Outcome",
    "Party",
    "ReentrantUpdateError",
    "StateChange",
    "StateSnapshot",
    "StateStore",
    "StateUpdate",
    "UnknownEntityError",
    "VoteCount",
    "VoteDelta",
    "decode_fragment",
    "encode_fragment",
    "indicate_winner",
    "votes_needed",
]
