"""
itam.viz
========

Minimal plotting helpers used by the CLI and dashboard screenshots.

Outputs are PNGs written to :data:`itam.settings.settings.image_dir`
(auto‑created if needed).  Filenames can be overridden via keyword
argument.
"""
from __future__ import annotations

import os
from collections import Counter
from pathlib import Path
from typing import Iterable, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import networkx as nx  # noqa: E402

from .models import Asset, AssetState, ComplianceStatus, License  # noqa: E402
from .relationships import AssetRelationshipGraph  # noqa: E402
from .settings import settings  # noqa: E402

_COMPLIANCE_COLOURS = {
    ComplianceStatus.COMPLIANT: "#2b9348",
    ComplianceStatus.AT_RISK: "#f4a261",
    ComplianceStatus.NON_COMPLIANT: "#d62828",
}


def _out(out_path: Optional[str | os.PathLike], default_name: str) -> Path:
    path = Path(out_path) if out_path else Path(settings.image_dir) / default_name
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _bar_chart(labels, counts, colours, title: str, ylabel: str, out_path: Path) -> Path:
    plt.figure(figsize=(8, 4))
    bars = plt.bar(labels, counts, color=colours, edgecolor="#333")
    # add counts on top of each bar
    for rect, cnt in zip(bars, counts):
        plt.text(rect.get_x() + rect.get_width() / 2,
                 cnt + 0.05,
                 str(cnt),
                 ha="center", va="bottom",
                 fontsize=8, color="#333")
    # subtle y‑axis grid for readability
    plt.grid(axis="y", linestyle=":", alpha=0.3)
    plt.xticks(rotation=30, ha="right")
    plt.title(title)
    plt.ylabel(ylabel)
    plt.tight_layout()
    plt.savefig(out_path, dpi=120, bbox_inches="tight")
    plt.close()
    return out_path


# ---------------------------------------------------------------------
# Plot 1 – bar chart of asset counts by life‑cycle state
# ---------------------------------------------------------------------
def state_summary(
    assets: Iterable[Asset],
    out_path: Optional[str | os.PathLike] = None,
) -> Path:
    """
    Generate a bar chart of how many assets are in each state.

    Every state appears, in life‑cycle order, even when its count is zero.

    Returns
    -------
    pathlib.Path
        Final image path for convenience.
    """
    counts = Counter(a.state for a in assets)
    labels = [s.value for s in AssetState]
    ys = [counts.get(s, 0) for s in AssetState]
    return _bar_chart(labels, ys, "#8d99ae", "Asset State Snapshot", "Asset Count",
                      _out(out_path, "asset_states.png"))


# ---------------------------------------------------------------------
# Plot 2 – license compliance distribution
# ---------------------------------------------------------------------
def compliance_summary(
    licenses: Iterable[License],
    out_path: Optional[str | os.PathLike] = None,
) -> Path:
    counts = Counter(lic.compliance_status for lic in licenses)
    statuses = list(ComplianceStatus)
    return _bar_chart(
        [s.value for s in statuses],
        [counts.get(s, 0) for s in statuses],
        [_COMPLIANCE_COLOURS[s] for s in statuses],
        "License Compliance",
        "License Count",
        _out(out_path, "license_compliance.png"),
    )


# ---------------------------------------------------------------------
# Plot 3 – attachment graph
# ---------------------------------------------------------------------
def plot_relationship_graph(
    rg: AssetRelationshipGraph,
    out_path: Optional[str | os.PathLike] = None,
) -> Path:
    """Draw a NetworkX spring‑layout graph of parent → child attachments."""
    plt.figure(figsize=(6, 6))
    pos = nx.spring_layout(rg.g, seed=42)

    nx.draw_networkx_nodes(rg.g, pos, node_color="#8d99ae", node_size=800)
    nx.draw_networkx_labels(rg.g, pos, font_size=6, font_color="white")
    nx.draw_networkx_edges(rg.g, pos, arrowstyle="->", arrowsize=15)

    plt.title("Asset Attachments")
    plt.axis("off")
    plt.tight_layout()

    out_path = _out(out_path, "asset_attachments.png")
    plt.savefig(out_path, dpi=120, bbox_inches="tight")
    plt.close()
    return out_path
