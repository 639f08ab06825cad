"""
api.history
===========

Read‑only access to the audit log of successful writes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from itam.history import Action, HistoryLog

from .deps import get_history

router = APIRouter(prefix="/history", tags=["history"])


@router.get("")
def list_history(
    resource_type: Optional[str] = Query(None, description="Asset or License"),
    action: Optional[Action] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    history: HistoryLog = Depends(get_history),
):
    """Newest entries first."""
    return history.entries(resource_type, action, limit)


@router.get("/stats")
def history_stats(history: HistoryLog = Depends(get_history)):
    return history.stats()


@router.get("/actors/{actor_id}")
def actor_activity(
    actor_id: str,
    limit: int = Query(50, ge=1, le=1000),
    history: HistoryLog = Depends(get_history),
):
    return history.user_activity(actor_id, limit)


@router.get("/{resource_type}/{resource_id}")
def resource_history(
    resource_type: str,
    resource_id: str,
    history: HistoryLog = Depends(get_history),
):
    return history.resource_logs(resource_type, resource_id)
