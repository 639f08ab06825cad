"""
api.assets
==========

Asset endpoints.  Creation, edits and state changes all go through the
registry so identifier checks and the transition table are enforced
in one place; every successful write is recorded in the history log.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from itam.history import Action, HistoryLog
from itam.inventory import AssetOperations
from itam.lifecycle import can_assign, can_checkout_as_loaner, can_dispose, valid_next_states
from itam.models import (
    Asset,
    AssetCondition,
    AssetDocument,
    AssetState,
    Location,
    Owner,
    Purchase,
    Warranty,
)
from itam.pagination import get_pagination_params, page_response
from itam.settings import settings

from .deps import get_actor, get_asset_registry, get_history

router = APIRouter(tags=["assets"])


class TransitionRequest(BaseModel):
    """Body of ``POST /assets/{id}/transition``."""
    target: AssetState


class AssetUpdate(BaseModel):
    """Editable, non‑lifecycle asset fields; omitted fields stay untouched."""
    model: Optional[str] = None
    asset_tag: Optional[str] = None
    serial_number: Optional[str] = None
    owner: Optional[Owner] = None
    location: Optional[Location] = None
    condition: Optional[AssetCondition] = None
    purchase: Optional[Purchase] = None
    warranty: Optional[Warranty] = None
    device_guids: Optional[Dict[str, str]] = None
    notes: Optional[str] = None


def _load(reg: AssetOperations, asset_id: str) -> Asset:
    try:
        return reg.get(asset_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Asset not found")


# ---------- POST /assets ----------
@router.post("/assets", status_code=201)
def create_asset(
    asset: Asset,
    reg: AssetOperations = Depends(get_asset_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    stored = reg.add(asset)
    history.record(actor, Action.CREATE, "Asset", stored.global_asset_id, new=stored)
    return stored


# ---------- GET /assets ----------
@router.get("/assets")
def list_assets(
    page: Optional[int] = Query(None, description="1‑based page number"),
    limit: Optional[int] = Query(None, description="page size"),
    state: Optional[AssetState] = Query(None, description="only assets in this state"),
    reg: AssetOperations = Depends(get_asset_registry),
):
    assets: List[Asset] = reg.find_by_state(state) if state else list(reg)
    params = get_pagination_params(page, limit, max_limit=settings.page_size_max)
    return page_response(assets, params)


# ---------- GET /assets/{asset_id} ----------
@router.get("/assets/{asset_id}")
def get_asset(asset_id: str, reg: AssetOperations = Depends(get_asset_registry)):
    return _load(reg, asset_id)


# ---------- PATCH /assets/{asset_id} ----------
@router.patch("/assets/{asset_id}")
def update_asset(
    asset_id: str,
    body: AssetUpdate,
    reg: AssetOperations = Depends(get_asset_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    """
    Edit descriptive fields.  ``state`` is not accepted here; use the
    transition endpoint instead.
    """
    before = _load(reg, asset_id)
    changes = {name: getattr(body, name) for name in body.model_fields_set}
    updated = reg.update(asset_id, **changes)
    history.record(actor, Action.UPDATE, "Asset", asset_id, previous=before, new=updated)
    return updated


# ---------- POST /assets/{asset_id}/documents ----------
@router.post("/assets/{asset_id}/documents", status_code=201)
def attach_document(
    asset_id: str,
    doc: AssetDocument,
    reg: AssetOperations = Depends(get_asset_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    """Attach a document reference (e.g. a data‑wipe certificate)."""
    before = _load(reg, asset_id)
    updated = reg.update(asset_id, docs=[*before.docs, doc])
    history.record(actor, Action.UPDATE, "Asset", asset_id, previous=before, new=updated)
    return updated


# ---------- POST /assets/{asset_id}/transition ----------
@router.post("/assets/{asset_id}/transition")
def transition_asset(
    asset_id: str,
    body: TransitionRequest,
    reg: AssetOperations = Depends(get_asset_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    """
    Request a state change.

    An unlisted (current, target) pair answers 409 ``InvalidTransition``;
    an unmet precondition answers 409 ``PreconditionFailed`` naming it.
    The stored asset is unchanged in both cases.
    """
    before = _load(reg, asset_id)
    moved = reg.transition(asset_id, body.target)
    history.record(actor, Action.UPDATE, "Asset", asset_id, previous=before, new=moved)
    return moved


# ---------- GET /assets/{asset_id}/next-states ----------
@router.get("/assets/{asset_id}/next-states")
def next_states(asset_id: str, reg: AssetOperations = Depends(get_asset_registry)):
    asset = _load(reg, asset_id)
    return {
        "state": asset.state,
        "next_states": valid_next_states(asset),
    }


# ---------- GET /assets/{asset_id}/checks ----------
@router.get("/assets/{asset_id}/checks")
def business_checks(asset_id: str, reg: AssetOperations = Depends(get_asset_registry)):
    """Advisory checks used by the UI to enable or grey out actions."""
    asset = _load(reg, asset_id)
    checks = {
        "assign": can_assign(asset),
        "loaner_checkout": can_checkout_as_loaner(asset),
        "dispose": can_dispose(asset),
    }
    return {name: {"allowed": d.allowed, "reason": d.reason} for name, d in checks.items()}


# ---------- GET /assets/{asset_id}/validation ----------
@router.get("/assets/{asset_id}/validation")
def validate_asset(asset_id: str, reg: AssetOperations = Depends(get_asset_registry)):
    asset = _load(reg, asset_id)
    return reg.validator.validate(asset).to_dict()
