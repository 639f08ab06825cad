"""
itam.accounting
===============

Derived‑field computation for :class:`itam.models.License`.

Every license write goes through :func:`recompute_derived_fields` (or a
configured :class:`LicenseAccountant`) immediately before persistence.
The engine never raises for out‑of‑range numbers: negative available
seats and over‑100 % utilization are data, reported through
``compliance_status``.

The module also carries the seat assignment helpers and the portfolio
reports (expiring, compliance, utilization, underused) that operate on
any iterable of licenses.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from .errors import SeatAllocationError
from .models import (
    ComplianceStatus,
    License,
    LicenseStatus,
    LicenseType,
    RenewalStatus,
    as_utc,
    utcnow,
)

DEFAULT_EXPIRING_WINDOW_DAYS = 30
DEFAULT_AT_RISK_THRESHOLD = 0.9
DEFAULT_UNDERUTILIZED_THRESHOLD = 0.3

# Statuses the date‑driven rule never overwrites.
STICKY_STATUSES = frozenset({LicenseStatus.CANCELLED})


class LicenseAccountant:
    """
    Configurable derived‑field engine.

    Parameters
    ----------
    expiring_window_days : int, default=30
        A license with ``0 <= days_until_expiration <= window`` is
        ``expiring``.
    at_risk_threshold : float, default=0.9
        Utilization ratio at or above which a license is ``at-risk``.

    Example
    -------
    >>> acct = LicenseAccountant()
    >>> lic = acct.recompute(License("Office", "Microsoft", total_seats=10, used_seats=9))
    >>> lic.available_seats, lic.compliance_status
    (1, <ComplianceStatus.AT_RISK: 'at-risk'>)
    """

    def __init__(
        self,
        expiring_window_days: int = DEFAULT_EXPIRING_WINDOW_DAYS,
        at_risk_threshold: float = DEFAULT_AT_RISK_THRESHOLD,
    ) -> None:
        self.expiring_window_days = expiring_window_days
        self.at_risk_threshold = at_risk_threshold

    # ------------------------------------------------------------------
    # Individual rules
    # ------------------------------------------------------------------
    @staticmethod
    def available_seats(lic: License) -> int:
        """No floor at zero: a negative value signals over‑allocation."""
        return lic.total_seats - lic.used_seats

    def classify_status(self, lic: License, now: Optional[datetime] = None) -> LicenseStatus:
        """Expiration‑driven status; perpetual, cancelled and undated licenses keep theirs."""
        if lic.type == LicenseType.PERPETUAL or lic.status in STICKY_STATUSES:
            return lic.status
        days = lic.days_until_expiration(now)
        if days is None:
            return lic.status
        if days < 0:
            return LicenseStatus.EXPIRED
        if days <= self.expiring_window_days:
            return LicenseStatus.EXPIRING
        return LicenseStatus.ACTIVE

    def classify_compliance(self, lic: License) -> ComplianceStatus:
        """Seat‑utilization driven; zero seats with zero use counts as compliant."""
        if lic.used_seats > lic.total_seats:
            return ComplianceStatus.NON_COMPLIANT
        if lic.total_seats <= 0:
            return ComplianceStatus.COMPLIANT
        if lic.used_seats / lic.total_seats >= self.at_risk_threshold:
            return ComplianceStatus.AT_RISK
        return ComplianceStatus.COMPLIANT

    # ------------------------------------------------------------------
    # Whole‑record recomputation
    # ------------------------------------------------------------------
    def recompute(self, lic: License, now: Optional[datetime] = None) -> License:
        """Return a copy of *lic* with every derived field brought up to date."""
        out = dataclasses.replace(lic, assigned_to=list(lic.assigned_to))
        out.available_seats = self.available_seats(lic)
        out.status = self.classify_status(lic, now)
        out.compliance_status = self.classify_compliance(lic)

        cost = lic.annual_cost or lic.purchase_cost
        out.cost_per_seat = round(cost / lic.total_seats, 2) if lic.total_seats > 0 else None
        if lic.annual_cost and lic.monthly_estimate is None:
            out.monthly_estimate = round(lic.annual_cost / 12, 2)
        if lic.renewal_status is None:
            if lic.type == LicenseType.PERPETUAL:
                out.renewal_status = RenewalStatus.NOT_APPLICABLE
            elif lic.auto_renew:
                out.renewal_status = RenewalStatus.AUTO_RENEWING
        return out


_default_accountant = LicenseAccountant()


def recompute_derived_fields(lic: License, now: Optional[datetime] = None) -> License:
    """Recompute ``available_seats``, ``status`` and ``compliance_status`` with default thresholds."""
    return _default_accountant.recompute(lic, now)


# ---------------------------------------------------------------------
# Seat assignment
# ---------------------------------------------------------------------
def assign_seat(
    lic: License,
    user_id: str,
    accountant: LicenseAccountant = _default_accountant,
    now: Optional[datetime] = None,
) -> License:
    """Give *user_id* one seat; refuses when full or already assigned."""
    if lic.used_seats >= lic.total_seats:
        raise SeatAllocationError(f"no available seats on license {lic.license_id}")
    if user_id in lic.assigned_to:
        raise SeatAllocationError(f"user {user_id} is already assigned to license {lic.license_id}")
    updated = dataclasses.replace(
        lic, assigned_to=[*lic.assigned_to, user_id], used_seats=lic.used_seats + 1
    )
    return accountant.recompute(updated, now)


def unassign_seat(
    lic: License,
    user_id: str,
    accountant: LicenseAccountant = _default_accountant,
    now: Optional[datetime] = None,
) -> License:
    """Release the seat held by *user_id*."""
    if user_id not in lic.assigned_to:
        raise SeatAllocationError(f"user {user_id} is not assigned to license {lic.license_id}")
    remaining = [u for u in lic.assigned_to if u != user_id]
    updated = dataclasses.replace(
        lic, assigned_to=remaining, used_seats=max(0, lic.used_seats - 1)
    )
    return accountant.recompute(updated, now)


# ---------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------
def expiring_licenses(
    licenses: Iterable[License],
    days: int = DEFAULT_EXPIRING_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> List[License]:
    """Licenses expiring between *now* and *now + days*, cancelled ones excluded."""
    now = as_utc(now or utcnow())
    horizon = now + timedelta(days=days)
    return [
        lic
        for lic in licenses
        if lic.expiration_date is not None
        and lic.status != LicenseStatus.CANCELLED
        and now <= as_utc(lic.expiration_date) <= horizon
    ]


def compliance_report(licenses: Iterable[License]) -> Dict[str, int]:
    counts = {s.value: 0 for s in ComplianceStatus}
    for lic in licenses:
        counts[lic.compliance_status.value] += 1
    counts["total"] = sum(counts.values())
    return counts


def utilization_stats(licenses: Iterable[License]) -> Dict[str, float]:
    """Seat totals across ``active`` licenses."""
    active = [lic for lic in licenses if lic.status == LicenseStatus.ACTIVE]
    total = sum(lic.total_seats for lic in active)
    used = sum(lic.used_seats for lic in active)
    return {
        "total_seats": total,
        "used_seats": used,
        "available_seats": total - used,
        "utilization_rate": round(used / total * 100, 2) if total > 0 else 0.0,
    }


def underutilized_licenses(
    licenses: Iterable[License],
    threshold: float = DEFAULT_UNDERUTILIZED_THRESHOLD,
) -> List[License]:
    """Active licenses whose utilization ratio is below *threshold*."""
    return [
        lic
        for lic in licenses
        if lic.status == LicenseStatus.ACTIVE
        and lic.total_seats > 0
        and lic.used_seats / lic.total_seats < threshold
    ]
