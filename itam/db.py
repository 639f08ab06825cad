"""
itam.db
=======

SQLite persistence layer for the ITAM rules service.

This module exposes:

* ``engine`` – a global SQLModel engine built from :data:`itam.settings.settings`
* ``SessionLocal`` – a session factory used via ``with SessionLocal() as s:``
* ``create_all()`` – helper to create tables at first run

License rows are written through :func:`upsert_license`, which runs the
accounting engine immediately before the write so derived fields are
never stale on disk.
Audit entries live in :class:`HistoryDB` and are only ever inserted.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.engine import Engine
from sqlmodel import Field, Session, SQLModel, create_engine, select

from .accounting import LicenseAccountant
from .history import Action, HistoryEntry
from .models import (
    Asset,
    AssetClass,
    AssetCondition,
    AssetDocument,
    AssetState,
    ComplianceStatus,
    DocumentType,
    License,
    LicenseStatus,
    LicenseType,
    Location,
    Owner,
    Purchase,
    RenewalStatus,
    Warranty,
    as_utc,
    to_plain,
)
from .settings import settings


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
def make_engine(url: str, echo: bool = False) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


engine = make_engine(settings.db_url, echo=settings.db_echo)


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal() -> Session:  # noqa: N802 (factory camel‑case for consistency with FastAPI docs)
    """Return a new Session bound to the global engine."""
    return Session(engine)


# ---------------------------------------------------------------------------
# JSON helpers for nested value objects
# ---------------------------------------------------------------------------
def _dump(obj: Any) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    return to_plain(vars(obj))


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _load_purchase(data: Optional[dict]) -> Optional[Purchase]:
    if data is None:
        return None
    return Purchase(**{**data, "order_date": _parse_date(data.get("order_date"))})


def _load_warranty(data: Optional[dict]) -> Optional[Warranty]:
    if data is None:
        return None
    return Warranty(
        **{**data, "start": _parse_date(data.get("start")), "end": _parse_date(data.get("end"))}
    )


# ---------------------------------------------------------------------------
# ORM models that mirror itam.models
# ---------------------------------------------------------------------------
class AssetDB(SQLModel, table=True):
    """SQLite‑backed representation of an :class:`itam.models.Asset`."""

    global_asset_id: str = Field(primary_key=True, index=True)
    asset_class: AssetClass
    model: Optional[str] = None
    state: AssetState = Field(default=AssetState.ORDERED, index=True)
    asset_tag: Optional[str] = Field(default=None, index=True)
    serial_number: Optional[str] = Field(default=None, index=True)
    condition: Optional[AssetCondition] = None
    owner: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    location: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    purchase: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    warranty: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    device_guids: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    docs: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    parent_id: Optional[str] = None
    notes: Optional[str] = None

    # ---------------------------------------------------------------------
    # Converters
    # ---------------------------------------------------------------------
    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetDB":
        """Create a DB row from an in‑memory asset."""
        return cls(
            global_asset_id=asset.global_asset_id,
            asset_class=asset.asset_class,
            model=asset.model,
            state=asset.state,
            asset_tag=asset.asset_tag,
            serial_number=asset.serial_number,
            condition=asset.condition,
            owner=_dump(asset.owner),
            location=_dump(asset.location),
            purchase=_dump(asset.purchase),
            warranty=_dump(asset.warranty),
            device_guids=dict(asset.device_guids) if asset.device_guids is not None else None,
            docs=[_dump(d) for d in asset.docs],
            parent_id=asset.parent_id,
            notes=asset.notes,
        )

    def to_asset(self) -> Asset:
        """Convert the DB row back into a plain Asset."""
        return Asset(
            global_asset_id=self.global_asset_id,
            asset_class=AssetClass(self.asset_class),
            model=self.model,
            state=AssetState(self.state),
            asset_tag=self.asset_tag,
            serial_number=self.serial_number,
            condition=AssetCondition(self.condition) if self.condition else None,
            owner=Owner(**self.owner) if self.owner else None,
            location=Location(**self.location) if self.location else None,
            purchase=_load_purchase(self.purchase),
            warranty=_load_warranty(self.warranty),
            device_guids=dict(self.device_guids) if self.device_guids is not None else None,
            docs=[
                AssetDocument(type=DocumentType(d["type"]), url=d["url"], title=d.get("title"))
                for d in (self.docs or [])
            ],
            parent_id=self.parent_id,
            notes=self.notes,
        )


class LicenseDB(SQLModel, table=True):
    """SQLite‑backed representation of an :class:`itam.models.License`."""

    license_id: str = Field(primary_key=True, index=True)
    name: str = Field(index=True)
    vendor: str = Field(index=True)
    type: LicenseType = LicenseType.SUBSCRIPTION
    category: Optional[str] = None
    total_seats: int = 1
    used_seats: int = 0
    available_seats: int = 0
    expiration_date: Optional[datetime] = Field(default=None, index=True)
    status: LicenseStatus = Field(default=LicenseStatus.ACTIVE, index=True)
    compliance_status: ComplianceStatus = Field(default=ComplianceStatus.COMPLIANT, index=True)
    purchase_cost: float = 0.0
    annual_cost: Optional[float] = None
    monthly_estimate: Optional[float] = None
    cost_per_seat: Optional[float] = None
    auto_renew: bool = False
    renewal_status: Optional[RenewalStatus] = None
    assigned_to: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    notes: Optional[str] = None

    @classmethod
    def from_license(cls, lic: License) -> "LicenseDB":
        return cls(
            license_id=lic.license_id,
            name=lic.name,
            vendor=lic.vendor,
            type=lic.type,
            category=lic.category,
            total_seats=lic.total_seats,
            used_seats=lic.used_seats,
            available_seats=lic.available_seats,
            expiration_date=as_utc(lic.expiration_date).replace(tzinfo=None) if lic.expiration_date else None,
            status=lic.status,
            compliance_status=lic.compliance_status,
            purchase_cost=lic.purchase_cost,
            annual_cost=lic.annual_cost,
            monthly_estimate=lic.monthly_estimate,
            cost_per_seat=lic.cost_per_seat,
            auto_renew=lic.auto_renew,
            renewal_status=lic.renewal_status,
            assigned_to=list(lic.assigned_to),
            notes=lic.notes,
        )

    def to_license(self) -> License:
        lic = License(
            name=self.name,
            vendor=self.vendor,
            type=LicenseType(self.type),
            total_seats=self.total_seats,
            used_seats=self.used_seats,
            expiration_date=self.expiration_date,
            status=LicenseStatus(self.status),
            license_id=self.license_id,
            category=self.category,
            purchase_cost=self.purchase_cost,
            annual_cost=self.annual_cost,
            monthly_estimate=self.monthly_estimate,
            auto_renew=self.auto_renew,
            renewal_status=RenewalStatus(self.renewal_status) if self.renewal_status else None,
            assigned_to=list(self.assigned_to or []),
            notes=self.notes,
        )
        # derived columns were computed on the way in
        lic.available_seats = self.available_seats
        lic.compliance_status = ComplianceStatus(self.compliance_status)
        lic.cost_per_seat = self.cost_per_seat
        return lic


class HistoryDB(SQLModel, table=True):
    """One audit entry; rows are only ever inserted."""

    id: Optional[int] = Field(default=None, primary_key=True)
    actor_id: str = Field(index=True)
    action: Action = Field(index=True)
    resource_type: str = Field(index=True)
    resource_id: str = Field(index=True)
    previous_value: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    new_value: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    timestamp: datetime = Field(index=True)

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryDB":
        return cls(
            actor_id=entry.actor_id,
            action=entry.action,
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            previous_value=entry.previous_value,
            new_value=entry.new_value,
            timestamp=as_utc(entry.timestamp).replace(tzinfo=None),
        )

    def to_entry(self) -> HistoryEntry:
        return HistoryEntry(
            actor_id=self.actor_id,
            action=Action(self.action),
            resource_type=self.resource_type,
            resource_id=self.resource_id,
            previous_value=self.previous_value,
            new_value=self.new_value,
            timestamp=as_utc(self.timestamp),
        )


# ---------------------------------------------------------------------------
# Convenience CRUD helpers
# ---------------------------------------------------------------------------
def upsert_asset(s: Session, asset: Asset) -> None:
    """Insert or update an asset row."""
    s.merge(AssetDB.from_asset(asset))
    s.commit()


def get_asset(s: Session, asset_id: str) -> Asset | None:
    """Return an asset by id or *None* if missing."""
    row = s.get(AssetDB, asset_id)
    return row.to_asset() if row else None


def all_assets(s: Session) -> list[Asset]:
    rows = s.exec(select(AssetDB)).all()
    return [row.to_asset() for row in rows]


def upsert_license(
    s: Session,
    lic: License,
    accountant: Optional[LicenseAccountant] = None,
    now: Optional[datetime] = None,
) -> License:
    """Recompute derived fields, then insert or update the license row."""
    stored = (accountant or LicenseAccountant()).recompute(lic, now)
    s.merge(LicenseDB.from_license(stored))
    s.commit()
    return stored


def get_license(s: Session, license_id: str) -> License | None:
    row = s.get(LicenseDB, license_id)
    return row.to_license() if row else None


def all_licenses(s: Session) -> list[License]:
    rows = s.exec(select(LicenseDB)).all()
    return [row.to_license() for row in rows]


def delete_license(s: Session, license_id: str) -> bool:
    row = s.get(LicenseDB, license_id)
    if row is None:
        return False
    s.delete(row)
    s.commit()
    return True


def add_history(s: Session, entry: HistoryEntry) -> None:
    s.add(HistoryDB.from_entry(entry))
    s.commit()


def all_history(s: Session) -> list[HistoryEntry]:
    """Every audit entry, oldest first."""
    rows = s.exec(select(HistoryDB).order_by(HistoryDB.id)).all()
    return [row.to_entry() for row in rows]


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all(bind: Optional[Engine] = None) -> None:
    """Create all tables for imported SQLModel subclasses."""
    SQLModel.metadata.create_all(bind or engine)


# ---------------------------------------------------------------------------
# Lightweight CLI
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    """
    Quick bootstrap helper.

    Examples
    --------
    $ python -m itam.db --create        # first‑time table creation
    """
    import argparse

    parser = argparse.ArgumentParser(prog="python -m itam.db", description="ITAM DB utilities")
    parser.add_argument("--create", action="store_true", help="create tables")
    args = parser.parse_args()

    if args.create:
        create_all()
        print(f"✅ schema initialised at {settings.db_url}")
