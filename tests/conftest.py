"""
Pytest configuration: make sure `import itam` and `import api` work
regardless of where pytest is invoked.

It prepends the project root (one directory above *tests/*) to
``sys.path`` **before** any tests are collected, and provides shared
fixtures: sample assets, a fixed clock and an in‑memory SQLite engine.
"""

import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, create_engine  # noqa: E402

from itam.db import create_all  # noqa: E402
from itam.models import (  # noqa: E402
    Asset,
    AssetClass,
    AssetState,
    Location,
    Owner,
    Purchase,
    Warranty,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed evaluation instant so date‑driven rules are deterministic."""
    return NOW


@pytest.fixture
def owner():
    return Owner("u-42", "ada.lovelace@example.com", "Ada Lovelace", "Engineering", "CC-200")


@pytest.fixture
def laptop(owner):
    """A fully populated end‑user device, still in ``Ordered``."""
    return Asset(
        global_asset_id="AS-2025-000123",
        asset_class=AssetClass.LAPTOP,
        model="Latitude 7440",
        asset_tag="LON-IT-00123",
        serial_number="SN00012345",
        owner=owner,
        location=Location(region="EMEA", site="LON", room="3.14"),
        purchase=Purchase(po="PO-00001", order_date=date(2025, 1, 10), unit_cost=1450.0,
                          vendor="Contoso", invoice="INV-9"),
        warranty=Warranty(provider="Contoso", start=date(2025, 1, 10), end=date(2028, 1, 10)),
        device_guids={"intune": "b1c2d3"},
    )


@pytest.fixture
def monitor():
    return Asset("AS-2025-000124", AssetClass.MONITOR, model="U2723QE")


@pytest.fixture
def staged(laptop):
    """Laptop sitting in staging, owner not yet assigned."""
    from dataclasses import replace
    return replace(laptop, state=AssetState.IN_STAGING, owner=None)


@pytest.fixture
def engine():
    """Fresh in‑memory SQLite database shared by every session of one test."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s
