"""
itam.inventory
==============

In‑memory registries for assets and licenses.

This module is intentionally simple, only the standard library and the
rule modules, so that it can be unit‑tested without a database.
:mod:`itam.inventory_db` offers the same public surface on SQLite.

Both registries are the write path: assets are checked on creation and
moved only through :func:`itam.lifecycle.request_transition`; licenses
are always stored with freshly recomputed derived fields.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from .accounting import LicenseAccountant, assign_seat, unassign_seat
from .errors import ValidationError
from .lifecycle import request_transition
from .models import Asset, AssetState, License
from .validation import DEFAULT_REQUIRED_FIELDS, AssetValidator, check_identifiers

logger = logging.getLogger(__name__)

# States a record may be created in; everything else goes through the table.
CREATION_STATES = frozenset({AssetState.ORDERED, AssetState.RECEIVED})

# License fields that always hold a value.
REQUIRED_LICENSE_FIELDS = (
    "name", "vendor", "type", "total_seats", "used_seats", "status", "purchase_cost", "auto_renew",
)


class AssetOperations:
    """
    Registry behaviour shared by the in‑memory and DB‑backed stores.

    Subclasses provide ``_store(asset)``, ``get(asset_id)`` and iteration.
    """

    def __init__(self, validator: Optional[AssetValidator] = None, strict: bool = False) -> None:
        self.validator = validator or AssetValidator(DEFAULT_REQUIRED_FIELDS)
        self.strict = strict

    def _store(self, asset: Asset) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def get(self, asset_id: str) -> Asset:  # pragma: no cover - abstract
        raise NotImplementedError

    def __iter__(self) -> Iterator[Asset]:  # pragma: no cover - abstract
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def add(self, asset: Asset) -> Asset:
        """
        Insert a new asset.

        New assets start in ``Ordered`` (or ``Received`` when entering
        mid‑flow); later states are only reachable through
        :meth:`transition`.  Identifier patterns are always enforced.
        Missing class‑required fields are logged, or raised as
        :class:`ValidationError` when the registry is strict.
        """
        if asset.state not in CREATION_STATES:
            raise ValidationError(
                "state", f"new assets must start in Ordered or Received, not {asset.state}"
            )
        check_identifiers(asset)
        if self.contains(asset.global_asset_id):
            raise ValidationError("global_asset_id", f"{asset.global_asset_id} already exists")
        missing = self.validator.missing_fields(asset)
        if missing:
            if self.strict:
                raise ValidationError(missing[0], f"required field {missing[0]} is missing")
            logger.info(f"Asset {asset.global_asset_id} created without {', '.join(missing)}")
        self._store(asset)
        return asset

    def update(self, asset_id: str, **changes) -> Asset:
        """Edit non‑lifecycle fields.  ``state`` and the id are not editable here."""
        for locked in ("state", "global_asset_id"):
            if locked in changes:
                raise ValidationError(locked, f"{locked} cannot be changed by an update")
        updated = dataclasses.replace(self.get(asset_id), **changes)
        check_identifiers(updated)
        self._store(updated)
        return updated

    def transition(self, asset_id: str, target: AssetState) -> Asset:
        """Move an asset through the life‑cycle table and persist the result."""
        current = self.get(asset_id)
        try:
            moved = request_transition(current, target)
        except ValueError as exc:
            logger.warning(f"Rejected transition for {asset_id}: {exc}")
            raise
        if target == AssetState.DISPOSED and moved.owner is not None:
            moved = dataclasses.replace(moved, owner=None)
        self._store(moved)
        logger.info(f"Asset {asset_id} moved {current.state} → {target}")
        return moved

    def contains(self, asset_id: str) -> bool:
        try:
            self.get(asset_id)
        except KeyError:
            return False
        return True

    def find_by_state(self, state: AssetState) -> List[Asset]:
        """Return all assets currently at the given state."""
        return [a for a in self if a.state == state]

    def state_counts(self) -> Dict[str, int]:
        counts = {s.value: 0 for s in AssetState}
        for a in self:
            counts[a.state.value] += 1
        return counts


class AssetRegistry(AssetOperations):
    """
    Dictionary‑backed asset store keyed by ``global_asset_id``.

    Example
    -------
    >>> from itam.models import AssetClass
    >>> reg = AssetRegistry()
    >>> _ = reg.add(Asset("AS-2025-000001", AssetClass.LAPTOP))
    >>> reg.transition("AS-2025-000001", AssetState.RECEIVED).state
    <AssetState.RECEIVED: 'Received'>
    """

    def __init__(self, validator: Optional[AssetValidator] = None, strict: bool = False) -> None:
        super().__init__(validator, strict)
        self._assets: Dict[str, Asset] = {}

    def _store(self, asset: Asset) -> None:
        self._assets[asset.global_asset_id] = asset

    def get(self, asset_id: str) -> Asset:
        """Retrieve by id (raise KeyError if not present)."""
        return self._assets[asset_id]

    def __iter__(self) -> Iterator[Asset]:
        return iter(list(self._assets.values()))

    def __len__(self) -> int:
        return len(self._assets)


class LicenseOperations:
    """License behaviour shared by the in‑memory and DB‑backed stores."""

    def __init__(self, accountant: Optional[LicenseAccountant] = None) -> None:
        self.accountant = accountant or LicenseAccountant()

    def _store(self, lic: License) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def get(self, license_id: str) -> License:  # pragma: no cover - abstract
        raise NotImplementedError

    def remove(self, license_id: str) -> License:  # pragma: no cover - abstract
        raise NotImplementedError

    def __iter__(self) -> Iterator[License]:  # pragma: no cover - abstract
        raise NotImplementedError

    # ------------------------------------------------------------------
    def _save(self, lic: License, now: Optional[datetime] = None) -> License:
        stored = self.accountant.recompute(lic, now)
        self._store(stored)
        return stored

    def add(self, lic: License, now: Optional[datetime] = None) -> License:
        """Insert or overwrite a license; returns the stored (recomputed) record."""
        stored = self._save(lic, now)
        logger.info(
            f"License {stored.license_id} saved: {stored.available_seats} seats free, "
            f"{stored.status}, {stored.compliance_status}"
        )
        return stored

    def update(self, license_id: str, now: Optional[datetime] = None, **changes) -> License:
        """Apply authoritative field changes; derived fields are recomputed, never taken."""
        for derived in ("available_seats", "compliance_status", "cost_per_seat", "license_id"):
            if derived in changes:
                raise ValidationError(derived, f"{derived} cannot be set directly")
        for name in REQUIRED_LICENSE_FIELDS:
            if name in changes and changes[name] is None:
                raise ValidationError(name, f"{name} cannot be null")
        return self._save(dataclasses.replace(self.get(license_id), **changes), now)

    def assign(self, license_id: str, user_id: str, now: Optional[datetime] = None) -> License:
        lic = self._save(assign_seat(self.get(license_id), user_id, self.accountant, now), now)
        logger.info(f"User {user_id} assigned a seat on {license_id}")
        return lic

    def unassign(self, license_id: str, user_id: str, now: Optional[datetime] = None) -> License:
        lic = self._save(unassign_seat(self.get(license_id), user_id, self.accountant, now), now)
        logger.info(f"User {user_id} released a seat on {license_id}")
        return lic

    def refresh(self, now: Optional[datetime] = None) -> List[License]:
        """Re‑run the engine over every stored license (e.g. after the date rolls over)."""
        return [self._save(lic, now) for lic in list(self)]


class LicenseRegistry(LicenseOperations):
    """Dictionary‑backed license store keyed by ``license_id``."""

    def __init__(self, accountant: Optional[LicenseAccountant] = None) -> None:
        super().__init__(accountant)
        self._licenses: Dict[str, License] = {}

    def _store(self, lic: License) -> None:
        self._licenses[lic.license_id] = lic

    def get(self, license_id: str) -> License:
        return self._licenses[license_id]

    def remove(self, license_id: str) -> License:
        return self._licenses.pop(license_id)

    def __iter__(self) -> Iterator[License]:
        return iter(list(self._licenses.values()))

    def __len__(self) -> int:
        return len(self._licenses)
