"""
itam.errors
===========

Exceptions raised by the rule modules.

All of them derive from :class:`ValueError`, so callers that only care
about "the write was rejected" can catch that.  Each carries a short
machine‑readable ``reason`` that the HTTP layer forwards to clients.
"""

from __future__ import annotations

from typing import Optional

from .models import AssetState


class ItamError(ValueError):
    """Base class for rejected operations on a single record."""

    reason = "error"


class TransitionError(ItamError):
    """A requested asset state change was refused."""

    def __init__(self, current: AssetState, target: AssetState, message: str) -> None:
        super().__init__(message)
        self.current = current
        self.target = target


class InvalidTransition(TransitionError):
    """The (current, target) pair is not in the transition table."""

    reason = "InvalidTransition"

    def __init__(self, current: AssetState, target: AssetState) -> None:
        super().__init__(current, target, f"illegal transition {current} → {target}")


class PreconditionFailed(TransitionError):
    """The transition exists but one of its preconditions is unmet."""

    reason = "PreconditionFailed"

    def __init__(self, current: AssetState, target: AssetState, condition: str) -> None:
        super().__init__(
            current, target, f"{condition} not satisfied for {current} → {target}"
        )
        self.condition = condition


class ValidationError(ItamError):
    """A field failed an identifier pattern or a required‑field check."""

    reason = "ValidationError"

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"invalid value for {field}")
        self.field = field


class SeatAllocationError(ItamError):
    """A seat could not be assigned to or released from a user."""

    reason = "SeatAllocationError"
