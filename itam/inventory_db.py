"""
itam.inventory_db
=================

SQLite‑backed implementation of the registry public surface.

These adapters wrap the CRUD helpers in :mod:`itam.db` so that any code
expecting the in‑memory :class:`~itam.inventory.AssetRegistry` or
:class:`~itam.inventory.LicenseRegistry` can switch to a persistent
store without changing its calls.  :class:`DBHistoryLog` does the same
for the audit trail.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, List, Optional

from sqlmodel import Session

from .accounting import LicenseAccountant
from .db import (
    SessionLocal,
    add_history,
    all_assets,
    all_history,
    all_licenses,
    delete_license,
    get_asset,
    get_license,
    upsert_asset,
    upsert_license,
)
from .history import HistoryEntry, HistoryLog
from .inventory import AssetOperations, LicenseOperations
from .models import Asset, License
from .validation import AssetValidator


class _SessionOwner:
    def __init__(self, session: Session | None) -> None:
        self._session: Session = session if session is not None else SessionLocal()

    # ----------------------------------------------------- context manager
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._session.close()


class DBAssetRegistry(_SessionOwner, AssetOperations):
    """
    Drop‑in replacement for :class:`AssetRegistry` backed by SQLite.

    Methods mirror the in‑memory registry:
    * add(asset) / update(id, **changes) / transition(id, state)
    * get(id) / find_by_state(state) / state_counts()
    * iteration / len()
    """

    def __init__(
        self,
        session: Session | None = None,
        validator: Optional[AssetValidator] = None,
        strict: bool = False,
    ) -> None:
        _SessionOwner.__init__(self, session)
        AssetOperations.__init__(self, validator, strict)

    def _store(self, asset: Asset) -> None:
        upsert_asset(self._session, asset)

    def get(self, asset_id: str) -> Asset:
        asset = get_asset(self._session, asset_id)
        if asset is None:
            raise KeyError(asset_id)
        return asset

    def __iter__(self) -> Iterator[Asset]:
        yield from all_assets(self._session)

    def __len__(self) -> int:
        return len(all_assets(self._session))


class DBLicenseRegistry(_SessionOwner, LicenseOperations):
    """Drop‑in replacement for :class:`LicenseRegistry` backed by SQLite."""

    def __init__(
        self,
        session: Session | None = None,
        accountant: Optional[LicenseAccountant] = None,
    ) -> None:
        _SessionOwner.__init__(self, session)
        LicenseOperations.__init__(self, accountant)

    def _store(self, lic: License) -> None:
        self._save(lic)

    def _save(self, lic: License, now: Optional[datetime] = None) -> License:
        return upsert_license(self._session, lic, self.accountant, now)

    def get(self, license_id: str) -> License:
        lic = get_license(self._session, license_id)
        if lic is None:
            raise KeyError(license_id)
        return lic

    def remove(self, license_id: str) -> License:
        lic = self.get(license_id)
        delete_license(self._session, license_id)
        return lic

    def __iter__(self) -> Iterator[License]:
        yield from all_licenses(self._session)

    def __len__(self) -> int:
        return len(all_licenses(self._session))


class DBHistoryLog(_SessionOwner, HistoryLog):
    """Audit log persisted to the ``historydb`` table."""

    def __init__(self, session: Session | None = None) -> None:
        _SessionOwner.__init__(self, session)

    def _append(self, entry: HistoryEntry) -> None:
        add_history(self._session, entry)

    def _all(self) -> List[HistoryEntry]:
        return all_history(self._session)
