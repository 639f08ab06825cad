"""
tests/test_viz.py
=================

Smoke tests: every chart helper writes a non‑empty PNG.
"""

from itam.models import Asset, AssetClass, AssetState, License
from itam.accounting import recompute_derived_fields
from itam.relationships import AssetRelationshipGraph
from itam import viz


def test_state_summary(tmp_path):
    assets = [
        Asset("AS-2025-000001", AssetClass.LAPTOP),
        Asset("AS-2025-000002", AssetClass.LAPTOP, state=AssetState.IN_SERVICE),
    ]
    out = viz.state_summary(assets, tmp_path / "states.png")
    assert out.exists() and out.stat().st_size > 0


def test_compliance_summary_creates_parent_dir(tmp_path):
    lics = [recompute_derived_fields(License("A", "V", total_seats=10, used_seats=u)) for u in (1, 9, 11)]
    out = viz.compliance_summary(lics, tmp_path / "nested" / "compliance.png")
    assert out.exists()


def test_relationship_graph(tmp_path):
    rg = AssetRelationshipGraph()
    rg.link("AS-2025-000001", "AS-2025-000002")
    out = viz.plot_relationship_graph(rg, tmp_path / "graph.png")
    assert out.exists()
