"""
itam.models
===========

Dataclasses and enums representing hardware assets and software
licenses.  These objects are intentionally lightweight; they carry
**no** external‑library dependencies so that importing `itam` stays
fast and the rule modules can be unit‑tested without a database.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Dict, List, Optional

SECONDS_PER_DAY = 24 * 60 * 60


class _ValueEnum(str, Enum):
    def __str__(self) -> str:        # nicer REPL display
        return self.value


class AssetState(_ValueEnum):
    """Legal life‑cycle states for a hardware asset."""
    ORDERED = "Ordered"
    RECEIVED = "Received"
    IN_STAGING = "In Staging"
    IN_SERVICE = "In Service"
    IN_REPAIR = "In Repair"
    IN_LOANER = "In Loaner"
    LOST = "Lost"
    RETIRED = "Retired"
    DISPOSED = "Disposed"


class AssetClass(_ValueEnum):
    LAPTOP = "Laptop"
    DESKTOP = "Desktop"
    MONITOR = "Monitor"
    PHONE = "Phone"
    TABLET = "Tablet"
    DOCK = "Dock"
    KEYBOARD = "Keyboard"
    MOUSE = "Mouse"
    HEADSET = "Headset"
    WEBCAM = "Webcam"
    ACCESSORY = "Accessory"
    SERVER = "Server"
    NETWORK_DEVICE = "Network Device"
    OTHER = "Other"


class ClassCategory(_ValueEnum):
    """Grouping of asset classes that drives the required‑field policy."""
    END_USER_DEVICE = "End-user device"
    PERIPHERAL = "Peripherals/consumables"
    SAAS_LICENSE = "SaaS license"
    OTHER = "Other"


class AssetCondition(_ValueEnum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    DAMAGED = "Damaged"


class DocumentType(_ValueEnum):
    HANDOFF = "Handoff"
    WARRANTY = "Warranty"
    INVOICE = "Invoice"
    PO = "PO"
    WIPE_CERT = "WipeCert"
    DISPOSAL = "Disposal"
    OTHER = "Other"


class LicenseType(_ValueEnum):
    PERPETUAL = "perpetual"
    SUBSCRIPTION = "subscription"
    TRIAL = "trial"


class LicenseStatus(_ValueEnum):
    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class ComplianceStatus(_ValueEnum):
    COMPLIANT = "compliant"
    AT_RISK = "at-risk"
    NON_COMPLIANT = "non-compliant"


class RenewalStatus(_ValueEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    AUTO_RENEWING = "auto-renewing"
    NOT_APPLICABLE = "not-applicable"


# ---------------------------------------------------------------------
# Asset building blocks
# ---------------------------------------------------------------------
@dataclass
class Owner:
    """User an asset is assigned to (``upn`` is the principal name)."""
    user_id: str
    upn: str
    display_name: Optional[str] = None
    department: Optional[str] = None
    cost_center: Optional[str] = None


@dataclass
class Location:
    """Region → site → room → rack/bin hierarchy."""
    region: Optional[str] = None
    site: Optional[str] = None
    room: Optional[str] = None
    rack: Optional[str] = None
    bin: Optional[str] = None

    @property
    def full_location(self) -> str:
        return " / ".join(p for p in (self.region, self.site, self.room, self.rack, self.bin) if p)


@dataclass
class Purchase:
    po: Optional[str] = None
    order_date: Optional[date] = None
    unit_cost: Optional[float] = None
    vendor: Optional[str] = None
    invoice: Optional[str] = None
    cost_center: Optional[str] = None


@dataclass
class Warranty:
    provider: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None
    coverage_type: Optional[str] = None


@dataclass
class AssetDocument:
    type: DocumentType
    url: str
    title: Optional[str] = None


@dataclass
class Asset:
    """
    Hardware asset tracked through its life‑cycle.

    Parameters
    ----------
    global_asset_id : str
        Immutable identifier, ``AS-YYYY-NNNNNN``.
    asset_class : AssetClass
        Kind of device; decides which fields are mandatory.
    model : str | None
        Manufacturer model (or application name for SaaS).
    state : AssetState, default=ORDERED
        Current life‑cycle state.  Only changed through
        :func:`itam.lifecycle.request_transition`.
    asset_tag, serial_number : str | None
        Optional human‑friendly label and OEM serial.
    owner : Owner | None
        Assigned user, if any.
    docs : list[AssetDocument]
        Attached documents; a ``WipeCert`` gates disposal.
    parent_id : str | None
        ``global_asset_id`` of the asset this one is attached to.
    """
    global_asset_id: str
    asset_class: AssetClass
    model: Optional[str] = None
    state: AssetState = AssetState.ORDERED
    asset_tag: Optional[str] = None
    serial_number: Optional[str] = None
    owner: Optional[Owner] = None
    location: Optional[Location] = None
    condition: Optional[AssetCondition] = None
    purchase: Optional[Purchase] = None
    warranty: Optional[Warranty] = None
    device_guids: Optional[Dict[str, str]] = None
    docs: List[AssetDocument] = field(default_factory=list)
    parent_id: Optional[str] = None
    notes: Optional[str] = None

    def has_document(self, doc_type: DocumentType) -> bool:
        return any(d.type == doc_type for d in self.docs)

    @property
    def has_wipe_certificate(self) -> bool:
        return self.has_document(DocumentType.WIPE_CERT)


# ---------------------------------------------------------------------
# Licenses
# ---------------------------------------------------------------------
def as_utc(value: date | datetime) -> datetime:
    """Coerce a date or naive datetime into an aware UTC datetime."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class License:
    """
    Software license with seat accounting.

    ``available_seats``, ``compliance_status`` and ``cost_per_seat`` are
    derived by :mod:`itam.accounting` on every write and cannot be passed
    to the constructor.  ``status`` is only partially derived: a
    ``cancelled`` license keeps that status.
    """
    name: str
    vendor: str
    type: LicenseType = LicenseType.SUBSCRIPTION
    total_seats: int = 1
    used_seats: int = 0
    expiration_date: Optional[datetime] = None
    status: LicenseStatus = LicenseStatus.ACTIVE
    license_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    category: Optional[str] = None
    purchase_cost: float = 0.0
    annual_cost: Optional[float] = None
    monthly_estimate: Optional[float] = None
    auto_renew: bool = False
    renewal_status: Optional[RenewalStatus] = None
    assigned_to: List[str] = field(default_factory=list)
    notes: Optional[str] = None

    available_seats: int = field(default=0, init=False)
    compliance_status: ComplianceStatus = field(default=ComplianceStatus.COMPLIANT, init=False)
    cost_per_seat: Optional[float] = field(default=None, init=False)

    # Convenience helpers -------------------------------------------------
    @property
    def utilization_rate(self) -> float:
        """Used seats as a percentage of capacity (0 for zero capacity)."""
        if self.total_seats == 0:
            return 0.0
        return round(self.used_seats / self.total_seats * 100, 2)

    def days_until_expiration(self, now: Optional[datetime] = None) -> Optional[int]:
        """Whole days (rounded up) until expiry, negative once expired."""
        if self.expiration_date is None:
            return None
        now = as_utc(now or utcnow())
        delta = as_utc(self.expiration_date) - now
        return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)

    def is_expiring_soon(self, now: Optional[datetime] = None, window_days: int = 30) -> bool:
        days = self.days_until_expiration(now)
        if days is None:
            return False
        return 0 < days <= window_days

    @property
    def cost_per_used_seat(self) -> Optional[float]:
        if self.used_seats == 0:
            return None
        cost = self.annual_cost or self.purchase_cost
        return round(cost / self.used_seats, 2)


def to_plain(value):
    """Recursively turn enums into values and dates into ISO strings."""
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
