"""How asynchronous delivery failures are surfaced."""

from __future__ import annotations

from enum import Enum


class FailurePolicy(Enum):
    """Where a :class:`~lib_log_jsonpost.domain.errors.DeliveryError` goes.

    ``LOG`` writes a warning through the poster's logger, ``DROP`` discards it
    silently, ``CALLBACK`` hands it to the configured ``on_failure`` callable.
    """

    LOG = "log"
    DROP = "drop"
    CALLBACK = "callback"

    @classmethod
    def from_name(cls, name: "str | FailurePolicy") -> "FailurePolicy":
        if isinstance(name, FailurePolicy):
            return name
        try:
            return cls(name.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(f"failure policy must be one of {allowed}; got {name!r}") from exc


__all__ = ["FailurePolicy"]
