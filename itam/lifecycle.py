"""
itam.lifecycle
==============

State‑transition guard for an :class:`itam.models.Asset`.

A static table describes which life‑cycle states are legal successors of
each state and which named precondition, if any, must hold before the
move is allowed.  :func:`request_transition` is pure: it returns a new
asset with only ``state`` changed, or raises.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .errors import InvalidTransition, PreconditionFailed
from .models import Asset, AssetState


@dataclass(frozen=True)
class Precondition:
    """Named boolean check evaluated against the asset snapshot."""

    name: str
    check: Callable[[Asset], bool]

    def __call__(self, asset: Asset) -> bool:
        return self.check(asset)


OWNER_REQUIRED = Precondition("ownerRequired", lambda a: a.owner is not None)
DATA_WIPE_CERT_REQUIRED = Precondition("dataWipeCertRequired", lambda a: a.has_wipe_certificate)

# ---------------------------------------------------------------------
# Allowed transitions: (source, target) → precondition or None
# ---------------------------------------------------------------------
TRANSITIONS: Dict[Tuple[AssetState, AssetState], Optional[Precondition]] = {
    (AssetState.ORDERED, AssetState.RECEIVED): None,
    (AssetState.RECEIVED, AssetState.IN_STAGING): None,
    (AssetState.IN_STAGING, AssetState.IN_SERVICE): OWNER_REQUIRED,
    (AssetState.IN_SERVICE, AssetState.IN_REPAIR): None,
    (AssetState.IN_SERVICE, AssetState.IN_LOANER): None,
    (AssetState.IN_REPAIR, AssetState.IN_SERVICE): None,
    (AssetState.IN_LOANER, AssetState.IN_SERVICE): None,
    (AssetState.IN_SERVICE, AssetState.LOST): None,
    (AssetState.IN_SERVICE, AssetState.RETIRED): None,
    (AssetState.IN_SERVICE, AssetState.DISPOSED): DATA_WIPE_CERT_REQUIRED,
    (AssetState.LOST, AssetState.IN_SERVICE): None,       # recovered
    (AssetState.RETIRED, AssetState.DISPOSED): DATA_WIPE_CERT_REQUIRED,
}

TERMINAL_STATES = frozenset({AssetState.DISPOSED})


def request_transition(asset: Asset, target: AssetState) -> Asset:
    """
    Return a copy of *asset* moved to *target*, or raise.

    Raises
    ------
    InvalidTransition
        ``(asset.state, target)`` is not a row of :data:`TRANSITIONS`
        (this includes ``target == asset.state``).
    PreconditionFailed
        The row exists but its precondition is unmet; ``.condition``
        names it (``ownerRequired``, ``dataWipeCertRequired``).

    Examples
    --------
    >>> from itam.models import AssetClass
    >>> a = Asset("AS-2025-000001", AssetClass.LAPTOP)
    >>> request_transition(a, AssetState.RECEIVED).state
    <AssetState.RECEIVED: 'Received'>
    >>> request_transition(a, AssetState.IN_SERVICE)
    Traceback (most recent call last):
        ...
    itam.errors.InvalidTransition: illegal transition Ordered → In Service
    """
    current = asset.state
    key = (current, target)
    if key not in TRANSITIONS:
        raise InvalidTransition(current, target)

    precondition = TRANSITIONS[key]
    if precondition is not None and not precondition(asset):
        raise PreconditionFailed(current, target, precondition.name)

    return dataclasses.replace(asset, state=target)


def valid_next_states(asset: Asset) -> List[AssetState]:
    """Targets reachable from the asset's current state right now."""
    return [
        target
        for (source, target), precondition in TRANSITIONS.items()
        if source == asset.state and (precondition is None or precondition(asset))
    ]


def reachable_states(state: AssetState) -> List[AssetState]:
    """Table successors of *state*, ignoring preconditions."""
    return [target for (source, target) in TRANSITIONS if source == state]


# ---------------------------------------------------------------------
# Operational checks used by the assignment / loaner / disposal flows
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


def can_assign(asset: Asset) -> Decision:
    """Only in‑service (or loaned) assets can be handed to a user."""
    if asset.state not in (AssetState.IN_SERVICE, AssetState.IN_LOANER):
        return Decision(False, f"asset must be in service to assign (current state: {asset.state})")
    return Decision(True)


def can_checkout_as_loaner(asset: Asset) -> Decision:
    if asset.state != AssetState.IN_SERVICE:
        return Decision(False, "asset must be in service to check out as loaner")
    if asset.owner is not None:
        return Decision(False, "asset must be unassigned to check out as loaner")
    return Decision(True)


def can_dispose(asset: Asset) -> Decision:
    if asset.owner is not None and asset.state != AssetState.RETIRED:
        return Decision(False, "asset must be unassigned before disposal")
    if not asset.has_wipe_certificate:
        return Decision(False, "data wipe certificate is required")
    return Decision(True)
