"""
tests/test_cli.py
=================

Command‑line entry points, run against an in‑memory database.
"""

import json

import pytest
from sqlmodel import Session

import itam.inventory_db
from itam import cli
from itam.inventory_db import DBLicenseRegistry
from itam.models import License


@pytest.fixture
def db(engine, monkeypatch):
    """Point every registry the CLI opens at the test engine."""
    monkeypatch.setattr(itam.inventory_db, "SessionLocal", lambda: Session(engine))
    return engine


def test_states_lists_table(capsys):
    assert cli.main(["states"]) == 0
    out = capsys.readouterr().out
    assert "In Staging  → In Service  [ownerRequired]" in out
    assert "terminal: Disposed" in out


def test_next_states(capsys):
    assert cli.main(["next-states", "Retired"]) == 0
    assert capsys.readouterr().out.strip() == "Disposed"


def test_next_states_unknown_state(capsys):
    assert cli.main(["next-states", "Sideways"]) == 2
    assert "unknown state" in capsys.readouterr().err


def test_report(db, capsys):
    with DBLicenseRegistry() as reg:
        reg.add(License("Office", "Microsoft", total_seats=10, used_seats=11))
    assert cli.main(["report", "--refresh"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["compliance"]["non-compliant"] == 1
    assert report["utilization"]["used_seats"] == 11
    assert report["expiring"] == []


def test_chart(db, tmp_path, capsys):
    assert cli.main(["chart", "--out-dir", str(tmp_path)]) == 0
    assert (tmp_path / "asset_states.png").exists()
    assert (tmp_path / "license_compliance.png").exists()
