"""Custom exception hierarchy for ecmap."""

from __future__ import annotations


class EcMapError(Exception):
    """Base exception for all ecmap errors."""


class EcMapConfigError(EcMapError):
    """Invalid or missing configuration."""


class InvalidVoteCountError(EcMapError, ValueError):
    """A vote count field is missing a usable value (non-numeric or negative)."""

    def __init__(self, message: str, *, entity: str = "") -> None:
        self.entity = entity
        super().__init__(message)


class InvalidYearError(EcMapError, ValueError):
    """The year of an update is not an integer."""


class UnknownEntityError(EcMapError, KeyError):
    """A relative delta referenced an entity the store has never seen.

    Unlike :meth:`ecmap.state.store.StateStore.apply_update`, which treats an
    unseen entity as an initialization, deltas need an existing value to
    adjust.
    """

    def __init__(self, entity: str) -> None:
        self.entity = entity
        super().__init__(entity)

    def __str__(self) -> str:
        return f"Unknown entity: {self.entity!r}"


class ReentrantUpdateError(EcMapError, RuntimeError):
    """An update was requested from inside a notification cycle.

    Only raised when the store is configured with
    ``NestedUpdatePolicy.RAISE``.
    """


class FragmentDecodeError(EcMapError, ValueError):
    """A location fragment could not be decoded into a state update."""
