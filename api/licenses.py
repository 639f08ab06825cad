"""
api.licenses
============

License endpoints.  Request bodies only carry authoritative fields; the
registry recomputes ``available_seats``, ``status`` and
``compliance_status`` before every write, so clients can never store a
stale or contradictory derived value.
"""

import dataclasses
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from itam import accounting
from itam.history import Action, HistoryLog
from itam.inventory import LicenseOperations
from itam.models import License, LicenseStatus, LicenseType, RenewalStatus, as_utc, to_plain
from itam.pagination import get_pagination_params, page_response
from itam.settings import settings

from .deps import get_actor, get_history, get_license_registry

router = APIRouter(prefix="/licenses", tags=["licenses"])


class LicenseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    vendor: str = Field(..., min_length=1, max_length=100)
    type: LicenseType = LicenseType.SUBSCRIPTION
    total_seats: int = Field(..., ge=1, le=1_000_000)
    used_seats: int = Field(0, ge=0)
    expiration_date: Optional[datetime] = None
    status: LicenseStatus = LicenseStatus.ACTIVE
    category: Optional[str] = None
    purchase_cost: float = Field(0.0, ge=0)
    annual_cost: Optional[float] = Field(None, ge=0)
    monthly_estimate: Optional[float] = Field(None, ge=0)
    auto_renew: bool = False
    renewal_status: Optional[RenewalStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)


class LicenseUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    vendor: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[LicenseType] = None
    total_seats: Optional[int] = Field(None, ge=1, le=1_000_000)
    used_seats: Optional[int] = Field(None, ge=0)
    expiration_date: Optional[datetime] = None
    status: Optional[LicenseStatus] = None
    category: Optional[str] = None
    purchase_cost: Optional[float] = Field(None, ge=0)
    annual_cost: Optional[float] = Field(None, ge=0)
    monthly_estimate: Optional[float] = Field(None, ge=0)
    auto_renew: Optional[bool] = None
    renewal_status: Optional[RenewalStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator(
        "name", "vendor", "type", "total_seats", "used_seats", "status", "purchase_cost", "auto_renew"
    )
    @classmethod
    def not_null(cls, value):
        # Omit a field to keep it; these columns have no empty value.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class SeatRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


def license_view(lic: License) -> Dict[str, Any]:
    """Stored fields plus the convenience values the dashboard shows."""
    data = to_plain(dataclasses.asdict(lic))
    data.update(
        utilization_rate=lic.utilization_rate,
        days_until_expiration=lic.days_until_expiration(),
        is_expiring_soon=lic.is_expiring_soon(window_days=settings.expiring_window_days),
        cost_per_used_seat=lic.cost_per_used_seat,
    )
    return data


def _load(reg: LicenseOperations, license_id: str) -> License:
    try:
        return reg.get(license_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="License not found")


# ---------- POST /licenses ----------
@router.post("", status_code=201)
def create_license(
    body: LicenseCreate,
    reg: LicenseOperations = Depends(get_license_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    stored = reg.add(License(**body.model_dump()))
    history.record(actor, Action.CREATE, "License", stored.license_id, new=stored)
    return license_view(stored)


# ---------- GET /licenses ----------
@router.get("")
def list_licenses(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    status: Optional[LicenseStatus] = Query(None),
    vendor: Optional[str] = Query(None),
    reg: LicenseOperations = Depends(get_license_registry),
):
    rows = [
        lic for lic in reg
        if (status is None or lic.status == status)
        and (vendor is None or lic.vendor.lower() == vendor.lower())
    ]
    rows.sort(key=lambda lic: lic.name.lower())
    params = get_pagination_params(page, limit, max_limit=settings.page_size_max)
    return page_response([license_view(lic) for lic in rows], params)


# ---------- reports (declared before /{license_id}) ----------
@router.get("/expiring")
def expiring(
    days: int = Query(settings.expiring_window_days, ge=0, le=3650),
    reg: LicenseOperations = Depends(get_license_registry),
):
    hits = accounting.expiring_licenses(reg, days)
    hits.sort(key=lambda lic: as_utc(lic.expiration_date))
    return [license_view(lic) for lic in hits]


@router.get("/compliance")
def compliance(reg: LicenseOperations = Depends(get_license_registry)):
    return accounting.compliance_report(reg)


@router.get("/utilization")
def utilization(reg: LicenseOperations = Depends(get_license_registry)):
    return accounting.utilization_stats(reg)


@router.get("/underutilized")
def underutilized(
    threshold: float = Query(settings.underutilized_threshold, gt=0, le=1),
    reg: LicenseOperations = Depends(get_license_registry),
):
    return [license_view(lic) for lic in accounting.underutilized_licenses(reg, threshold)]


@router.post("/refresh")
def refresh(reg: LicenseOperations = Depends(get_license_registry)):
    """Recompute derived fields on every license (e.g. after midnight)."""
    rows = reg.refresh()
    return {"refreshed": len(rows), "compliance": accounting.compliance_report(rows)}


# ---------- single license ----------
@router.get("/{license_id}")
def get_license(license_id: str, reg: LicenseOperations = Depends(get_license_registry)):
    return license_view(_load(reg, license_id))


@router.put("/{license_id}")
def update_license(
    license_id: str,
    body: LicenseUpdate,
    reg: LicenseOperations = Depends(get_license_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    before = _load(reg, license_id)
    changes = {name: getattr(body, name) for name in body.model_fields_set}
    updated = reg.update(license_id, **changes)
    history.record(actor, Action.UPDATE, "License", license_id, previous=before, new=updated)
    return license_view(updated)


@router.delete("/{license_id}")
def delete_license(
    license_id: str,
    reg: LicenseOperations = Depends(get_license_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    _load(reg, license_id)
    removed = reg.remove(license_id)
    history.record(actor, Action.DELETE, "License", license_id, previous=removed)
    return {"deleted": license_id}


@router.post("/{license_id}/assign")
def assign(
    license_id: str,
    body: SeatRequest,
    reg: LicenseOperations = Depends(get_license_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    before = _load(reg, license_id)
    updated = reg.assign(license_id, body.user_id)
    history.record(actor, Action.UPDATE, "License", license_id, previous=before, new=updated)
    return license_view(updated)


@router.post("/{license_id}/unassign")
def unassign(
    license_id: str,
    body: SeatRequest,
    reg: LicenseOperations = Depends(get_license_registry),
    history: HistoryLog = Depends(get_history),
    actor: str = Depends(get_actor),
):
    before = _load(reg, license_id)
    updated = reg.unassign(license_id, body.user_id)
    history.record(actor, Action.UPDATE, "License", license_id, previous=before, new=updated)
    return license_view(updated)
