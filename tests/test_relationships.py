"""
tests/test_relationships.py
===========================

Unit tests for itam.relationships.AssetRelationshipGraph
"""

import pytest

from itam.models import Asset, AssetClass
from itam.relationships import AssetRelationshipGraph


def test_link_and_children():
    rg = AssetRelationshipGraph()
    rg.link("AS-2025-000001", "AS-2025-000002")
    rg.link("AS-2025-000001", "AS-2025-000003")
    assert rg.children("AS-2025-000001") == ["AS-2025-000002", "AS-2025-000003"]
    assert rg.parent("AS-2025-000002") == "AS-2025-000001"
    assert rg.parent("AS-2025-000001") is None


def test_relink_replaces_parent():
    rg = AssetRelationshipGraph()
    rg.link("A", "C")
    rg.link("B", "C")
    assert rg.parent("C") == "B"
    assert rg.children("A") == []


def test_self_and_cycle_rejected():
    rg = AssetRelationshipGraph()
    with pytest.raises(ValueError):
        rg.link("A", "A")
    rg.link("A", "B")
    rg.link("B", "C")
    with pytest.raises(ValueError):
        rg.link("C", "A")
    assert rg.descendants("A") == ["B", "C"]


def test_unlink():
    rg = AssetRelationshipGraph()
    rg.link("A", "B")
    rg.unlink("B")
    assert rg.parent("B") is None
    rg.unlink("missing")  # no-op


def test_to_json_from_asset_data():
    rg = AssetRelationshipGraph()
    rg.add_asset_data(Asset("AS-2025-000001", AssetClass.LAPTOP, model="X1"))
    rg.add_asset_data(Asset("AS-2025-000002", AssetClass.DOCK, parent_id="AS-2025-000001"))
    data = rg.to_json()
    nodes = {n["id"]: n for n in data["nodes"]}
    assert nodes["AS-2025-000001"]["type"] == "ROOT"
    assert nodes["AS-2025-000001"]["model"] == "X1"
    assert nodes["AS-2025-000002"]["type"] == "ATTACHED"
    assert nodes["AS-2025-000002"]["class"] == "Dock"
    assert data["links"] == [{"source": "AS-2025-000001", "target": "AS-2025-000002"}]
