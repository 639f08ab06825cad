"""
tests/test_lifecycle.py
=======================

Unit tests for itam.lifecycle.request_transition and the advisory checks.
"""

import doctest
from dataclasses import replace
from itertools import product

import pytest

import itam.inventory
import itam.lifecycle
from itam.errors import InvalidTransition, PreconditionFailed
from itam.lifecycle import (
    TRANSITIONS,
    can_assign,
    can_checkout_as_loaner,
    can_dispose,
    reachable_states,
    request_transition,
    valid_next_states,
)
from itam.models import Asset, AssetClass, AssetDocument, AssetState, DocumentType

WIPE = AssetDocument(DocumentType.WIPE_CERT, "https://files.example.com/wipe.pdf")


def _at(state, **kw):
    return Asset("AS-2025-000001", AssetClass.LAPTOP, state=state, **kw)


def test_good_transition():
    """Ordered → Received should succeed and touch nothing else."""
    a = _at(AssetState.ORDERED, model="X1")
    moved = request_transition(a, AssetState.RECEIVED)
    assert moved.state is AssetState.RECEIVED
    assert moved == replace(a, state=AssetState.RECEIVED)
    assert a.state is AssetState.ORDERED  # input untouched


def test_illegal_transition_raises():
    """Ordered → In Service skips the table and must be rejected."""
    with pytest.raises(InvalidTransition) as err:
        request_transition(_at(AssetState.ORDERED), AssetState.IN_SERVICE)
    assert err.value.current is AssetState.ORDERED
    assert err.value.target is AssetState.IN_SERVICE
    assert isinstance(err.value, ValueError)


def test_no_implicit_retire_shortcut():
    with pytest.raises(InvalidTransition):
        request_transition(_at(AssetState.IN_STAGING), AssetState.RETIRED)


def test_same_state_is_invalid():
    with pytest.raises(InvalidTransition):
        request_transition(_at(AssetState.IN_SERVICE), AssetState.IN_SERVICE)


def test_disposed_is_terminal():
    for target in AssetState:
        with pytest.raises(InvalidTransition):
            request_transition(_at(AssetState.DISPOSED), target)


def test_only_table_rows_succeed(owner):
    """Every (from, to) pair succeeds iff it is a table row (preconditions satisfied)."""
    for source, target in product(AssetState, AssetState):
        a = _at(source, owner=owner, docs=[WIPE])
        if (source, target) in TRANSITIONS:
            assert request_transition(a, target).state is target
        else:
            with pytest.raises(InvalidTransition):
                request_transition(a, target)


def test_owner_required_for_service(staged, owner):
    with pytest.raises(PreconditionFailed) as err:
        request_transition(staged, AssetState.IN_SERVICE)
    assert err.value.condition == "ownerRequired"

    moved = request_transition(replace(staged, owner=owner), AssetState.IN_SERVICE)
    assert moved.state is AssetState.IN_SERVICE


@pytest.mark.parametrize("source", [AssetState.IN_SERVICE, AssetState.RETIRED])
def test_wipe_cert_required_for_disposal(source):
    with pytest.raises(PreconditionFailed) as err:
        request_transition(_at(source), AssetState.DISPOSED)
    assert err.value.condition == "dataWipeCertRequired"

    assert request_transition(_at(source, docs=[WIPE]), AssetState.DISPOSED).state is AssetState.DISPOSED


def test_lost_asset_can_be_recovered():
    assert request_transition(_at(AssetState.LOST), AssetState.IN_SERVICE).state is AssetState.IN_SERVICE


def test_valid_next_states_respects_preconditions(staged, owner):
    assert valid_next_states(staged) == []
    assert valid_next_states(replace(staged, owner=owner)) == [AssetState.IN_SERVICE]
    assert AssetState.DISPOSED not in valid_next_states(_at(AssetState.RETIRED))


def test_reachable_states_ignores_preconditions():
    assert reachable_states(AssetState.IN_SERVICE) == [
        AssetState.IN_REPAIR,
        AssetState.IN_LOANER,
        AssetState.LOST,
        AssetState.RETIRED,
        AssetState.DISPOSED,
    ]
    assert reachable_states(AssetState.DISPOSED) == []


def test_can_assign(owner):
    assert can_assign(_at(AssetState.IN_SERVICE))
    decision = can_assign(_at(AssetState.IN_REPAIR))
    assert not decision
    assert "in service" in decision.reason


def test_can_checkout_as_loaner(owner):
    assert can_checkout_as_loaner(_at(AssetState.IN_SERVICE))
    assert not can_checkout_as_loaner(_at(AssetState.IN_SERVICE, owner=owner))
    assert not can_checkout_as_loaner(_at(AssetState.IN_STAGING))


def test_can_dispose(owner):
    assert not can_dispose(_at(AssetState.RETIRED))
    assert can_dispose(_at(AssetState.RETIRED, docs=[WIPE]))
    assert not can_dispose(_at(AssetState.IN_SERVICE, owner=owner, docs=[WIPE]))


@pytest.mark.parametrize("module", [itam.lifecycle, itam.inventory])
def test_docstring_examples_run(module):
    result = doctest.testmod(module)
    assert result.attempted > 0
    assert result.failed == 0
