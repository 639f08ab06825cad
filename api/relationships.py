"""
api.relationships
=================

Endpoints for attaching peripherals to their parent asset.

The graph is rebuilt from each asset's ``parent_id`` on every request,
so the registry stays the single source of truth.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from itam.history import Action, HistoryLog
from itam.inventory import AssetOperations
from itam.relationships import AssetRelationshipGraph

from .deps import get_actor, get_asset_registry, get_history

router = APIRouter(prefix="/relationships", tags=["relationships"])


class RelationshipRequest(BaseModel):
    """Model for attachment creation request."""
    parent_id: str
    child_id: str


def build_graph(reg: AssetOperations) -> AssetRelationshipGraph:
    rg = AssetRelationshipGraph()
    for asset in reg:
        rg.add_asset_data(asset)
    return rg


@router.post("", status_code=201)
def create_relationship(
    data: RelationshipRequest,
    reg: AssetOperations = Depends(get_asset_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    """Attach *child_id* below *parent_id*, replacing any previous parent."""
    for asset_id in (data.parent_id, data.child_id):
        if not reg.contains(asset_id):
            raise HTTPException(status_code=404, detail=f"Asset {asset_id} not found")

    rg = build_graph(reg)
    try:
        rg.link(data.parent_id, data.child_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    before = reg.get(data.child_id)
    updated = reg.update(data.child_id, parent_id=data.parent_id)
    history.record(actor, Action.UPDATE, "Asset", data.child_id, previous=before, new=updated)
    return {
        "status": "success",
        "message": f"Attached {data.child_id} to {data.parent_id}",
        "total_edges": rg.g.number_of_edges(),
    }


@router.delete("/{child_id}")
def remove_relationship(
    child_id: str,
    reg: AssetOperations = Depends(get_asset_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    try:
        before = reg.get(child_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Asset not found")
    updated = reg.update(child_id, parent_id=None)
    history.record(actor, Action.UPDATE, "Asset", child_id, previous=before, new=updated)
    return {"status": "success", "message": f"Detached {child_id}"}


@router.get("")
def get_relationships(reg: AssetOperations = Depends(get_asset_registry)):
    """``{"nodes": [...], "links": [...]}`` for the frontend graph view."""
    return build_graph(reg).to_json()
