"""
api.deps
========

FastAPI dependency providers.

Each request gets its own SQLModel session, closed when the response is
sent; the registries and the audit log are thin wrappers around it.
Tests swap them for in‑memory objects via ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Iterator, Optional

from fastapi import Depends, Header
from sqlmodel import Session

from itam.accounting import LicenseAccountant
from itam.db import SessionLocal
from itam.inventory_db import DBAssetRegistry, DBHistoryLog, DBLicenseRegistry
from itam.settings import settings


def get_session() -> Iterator[Session]:
    """Per‑request session."""
    with SessionLocal() as session:
        yield session


@lru_cache
def get_accountant() -> LicenseAccountant:
    """Derived‑field engine with the configured thresholds."""
    return LicenseAccountant(
        expiring_window_days=settings.expiring_window_days,
        at_risk_threshold=settings.at_risk_threshold,
    )


def get_asset_registry(session: Session = Depends(get_session)) -> DBAssetRegistry:
    return DBAssetRegistry(session, strict=settings.strict_required_fields)


def get_license_registry(
    session: Session = Depends(get_session),
    accountant: LicenseAccountant = Depends(get_accountant),
) -> DBLicenseRegistry:
    return DBLicenseRegistry(session, accountant=accountant)


def get_history(session: Session = Depends(get_session)) -> DBHistoryLog:
    """Audit log sharing the request's session."""
    return DBHistoryLog(session)


def get_actor(x_actor_id: Optional[str] = Header(None)) -> str:
    """Acting user id from the ``X-Actor-Id`` header."""
    return x_actor_id or "system"
