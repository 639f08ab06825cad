#!/usr/bin/env python
"""
Seed database with sample assets and licenses for testing.

Assets are created in ``Ordered`` and walked through the transition table
by the registry, so the seeded data obeys the same rules as API writes.
"""

import json
from datetime import date, timedelta

from itam.db import create_all
from itam.inventory_db import DBAssetRegistry, DBLicenseRegistry
from itam.models import (
    Asset,
    AssetClass,
    AssetDocument,
    AssetState,
    DocumentType,
    License,
    LicenseStatus,
    LicenseType,
    Location,
    Owner,
    Purchase,
    Warranty,
    as_utc,
)
from itam.validation import generate_asset_tag, generate_global_asset_id

HQ = Location(region="EMEA", site="LON", room="3.14")

# (class, model, route through the life‑cycle, owner)
SAMPLE_ASSETS = [
    (AssetClass.LAPTOP, "Latitude 7440",
     [AssetState.RECEIVED, AssetState.IN_STAGING, AssetState.IN_SERVICE],
     Owner("u-1001", "maria.garcia@example.com", "Maria Garcia", "Finance", "CC-100")),
    (AssetClass.LAPTOP, "MacBook Pro 14",
     [AssetState.RECEIVED, AssetState.IN_STAGING, AssetState.IN_SERVICE, AssetState.IN_REPAIR],
     Owner("u-1002", "david.kim@example.com", "David Kim", "Engineering", "CC-200")),
    (AssetClass.DESKTOP, "OptiPlex 7010",
     [AssetState.RECEIVED, AssetState.IN_STAGING],
     None),
    (AssetClass.MONITOR, "U2723QE",
     [AssetState.RECEIVED],
     None),
    (AssetClass.DOCK, "WD19S",
     [],
     None),
    (AssetClass.TABLET, "iPad Air",
     [AssetState.RECEIVED, AssetState.IN_STAGING, AssetState.IN_SERVICE, AssetState.RETIRED],
     Owner("u-1003", "susan.taylor@example.com", "Susan Taylor", "Sales", "CC-300")),
]

SAMPLE_LICENSES = [
    License("Microsoft 365 E3", "Microsoft", total_seats=100, used_seats=87,
            annual_cost=43200.0, auto_renew=True, category="Productivity",
            expiration_date=as_utc(date.today() + timedelta(days=200))),
    License("Adobe Creative Cloud", "Adobe", total_seats=10, used_seats=10,
            annual_cost=7200.0, category="Design",
            expiration_date=as_utc(date.today() + timedelta(days=21))),
    License("JetBrains All Products", "JetBrains", total_seats=20, used_seats=4,
            annual_cost=5980.0, category="Development",
            expiration_date=as_utc(date.today() + timedelta(days=300))),
    License("Windows Server 2022", "Microsoft", type=LicenseType.PERPETUAL,
            total_seats=8, used_seats=9, purchase_cost=8000.0, category="Infrastructure"),
    License("Zoom Business", "Zoom", total_seats=50, used_seats=12,
            annual_cost=9000.0, category="Communication",
            expiration_date=as_utc(date.today() - timedelta(days=10))),
    License("Legacy CRM", "Acme", total_seats=25, used_seats=0,
            status=LicenseStatus.CANCELLED, category="Sales"),
]


def _build_asset(seq: int, asset_class: AssetClass, model: str) -> Asset:
    received = date.today() - timedelta(days=30 * seq)
    return Asset(
        global_asset_id=generate_global_asset_id(seq),
        asset_class=asset_class,
        model=model,
        asset_tag=generate_asset_tag("LON", "IT", seq),
        serial_number=f"SN{seq:08d}",
        location=HQ,
        purchase=Purchase(po=f"PO-{seq:05d}", order_date=received, unit_cost=1200.0,
                          vendor="Contoso", cost_center="CC-100"),
        warranty=Warranty(provider="Contoso", start=received,
                          end=received + timedelta(days=3 * 365)),
    )


def seed_database(assets=None, licenses=None):
    """Add sample assets and licenses to the database."""
    if assets is None:
        assets = DBAssetRegistry()
    if licenses is None:
        licenses = DBLicenseRegistry()

    for seq, (asset_class, model, route, owner) in enumerate(SAMPLE_ASSETS, start=1):
        asset = assets.add(_build_asset(seq, asset_class, model))
        for target in route:
            if target == AssetState.IN_SERVICE and owner is not None:
                assets.update(asset.global_asset_id, owner=owner)
            asset = assets.transition(asset.global_asset_id, target)
        print(f"Added: {asset.global_asset_id} {model} ({asset.state})")

    # retire → dispose needs a wipe certificate
    tablet = generate_global_asset_id(len(SAMPLE_ASSETS))
    assets.update(tablet, docs=[AssetDocument(DocumentType.WIPE_CERT, "https://files.example.com/wipe/6.pdf")])
    assets.transition(tablet, AssetState.DISPOSED)
    print(f"Disposed: {tablet}")

    for lic in SAMPLE_LICENSES:
        stored = licenses.add(lic)
        print(f"Added: {stored.name} ({stored.status}, {stored.compliance_status})")

    print(f"\nAdded {len(SAMPLE_ASSETS)} assets and {len(SAMPLE_LICENSES)} licenses to the database!")
    print(json.dumps(assets.state_counts(), indent=2))


if __name__ == "__main__":
    print("Ensuring database tables exist...")
    create_all()

    print("Seeding database with sample assets and licenses...")
    seed_database()

    print("\nDone! You can now run the API server with:")
    print("uvicorn api.main:app --reload --port 8001")
