"""Store configuration for ecmap."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from ecmap.exceptions import EcMapConfigError
from ecmap.state.policy import NestedUpdatePolicy, NotifyPolicy

DEFAULT_WINNING_THRESHOLD = 270


@dataclasses.dataclass(frozen=True)
class EcMapConfig:
    """Store configuration.

    Parameters
    ----------
    notify_policy : NotifyPolicy
        ``ALL`` announces every entity present in an update with a
        ``change:state`` event; ``CHANGED`` announces only entities whose
        votes actually differ.
    nested_updates : NestedUpdatePolicy
        How updates requested from inside an event handler are handled.
        ``QUEUE`` runs them after the current notification cycle;
        ``RAISE`` rejects them with :class:`ecmap.exceptions.ReentrantUpdateError`.
    winning_threshold : int
        Electoral votes needed to win, used by :mod:`ecmap.outcome`.
    """

    notify_policy: NotifyPolicy = NotifyPolicy.ALL
    nested_updates: NestedUpdatePolicy = NestedUpdatePolicy.QUEUE
    winning_threshold: int = DEFAULT_WINNING_THRESHOLD

    def __post_init__(self) -> None:
        if self.winning_threshold <= 0:
            raise EcMapConfigError(f"winning_threshold must be positive, got {self.winning_threshold}")

    @classmethod
    def from_env(cls, **overrides: Any) -> EcMapConfig:
        """Create configuration from environment variables.

        Reads ``ECMAP_NOTIFY_POLICY``, ``ECMAP_NESTED_UPDATES`` and
        ``ECMAP_WINNING_THRESHOLD``. Explicit keyword arguments override
        environment values.

        Raises
        ------
        EcMapConfigError
            If an environment value cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        notify_env = env.get("ECMAP_NOTIFY_POLICY")
        if notify_env is not None and "notify_policy" not in overrides:
            try:
                config_kwargs["notify_policy"] = NotifyPolicy(notify_env.strip().lower())
            except ValueError as exc:
                raise EcMapConfigError(f"Invalid ECMAP_NOTIFY_POLICY: {notify_env!r}") from exc

        nested_env = env.get("ECMAP_NESTED_UPDATES")
        if nested_env is not None and "nested_updates" not in overrides:
            try:
                config_kwargs["nested_updates"] = NestedUpdatePolicy(nested_env.strip().lower())
            except ValueError as exc:
                raise EcMapConfigError(f"Invalid ECMAP_NESTED_UPDATES: {nested_env!r}") from exc

        threshold_env = env.get("ECMAP_WINNING_THRESHOLD")
        if threshold_env is not None and "winning_threshold" not in overrides:
            try:
                config_kwargs["winning_threshold"] = int(threshold_env)
            except ValueError as exc:
                raise EcMapConfigError(f"Invalid ECMAP_WINNING_THRESHOLD: {threshold_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
