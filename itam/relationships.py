"""
itam.relationships
==================

Parent → child attachment graph between assets (a laptop owns its dock
and monitors), built on NetworkX.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import networkx as nx

from .models import Asset


class AssetRelationshipGraph:
    """
    Lightweight wrapper around a DiGraph of asset attachments.

    Every child has at most one parent, and links never form a cycle.

    Example
    -------
    >>> rg = AssetRelationshipGraph()
    >>> rg.link("AS-2025-000001", "AS-2025-000002")
    >>> rg.link("AS-2025-000001", "AS-2025-000003")
    >>> rg.children("AS-2025-000001")
    ['AS-2025-000002', 'AS-2025-000003']
    """

    def __init__(self) -> None:
        self.g = nx.DiGraph()
        self._asset_data: Dict[str, Dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def link(self, parent: str, child: str) -> None:
        """
        Attach *child* to *parent*.

        An existing parent of *child* is replaced.  Raises ValueError for
        a self link or a link that would close a cycle.
        """
        if parent == child:
            raise ValueError("an asset cannot be attached to itself")
        if child in self.g and parent in self.g and nx.has_path(self.g, child, parent):
            raise ValueError(f"linking {parent} → {child} would create a cycle")

        for old_parent in list(self.g.predecessors(child)) if child in self.g else []:
            self.g.remove_edge(old_parent, child)
        self.g.add_edge(parent, child)

    def unlink(self, child: str) -> None:
        """Detach *child* from its parent (no‑op if it has none)."""
        for old_parent in list(self.g.predecessors(child)) if child in self.g else []:
            self.g.remove_edge(old_parent, child)

    def children(self, parent: str) -> List[str]:
        """Return the assets directly attached to *parent*."""
        return list(self.g.successors(parent)) if parent in self.g else []

    def parent(self, child: str) -> Optional[str]:
        parents = list(self.g.predecessors(child)) if child in self.g else []
        return parents[0] if parents else None

    def descendants(self, asset_id: str) -> List[str]:
        """Everything attached below *asset_id*, at any depth."""
        return sorted(nx.descendants(self.g, asset_id)) if asset_id in self.g else []

    def add_asset_data(self, asset: Asset) -> None:
        """Add or update node metadata; also records ``asset.parent_id`` as a link."""
        self._asset_data[asset.global_asset_id] = {
            "class": asset.asset_class.value,
            "model": asset.model,
            "state": asset.state.value,
        }
        if asset.global_asset_id not in self.g:
            self.g.add_node(asset.global_asset_id)
        if asset.parent_id:
            self.link(asset.parent_id, asset.global_asset_id)

    def get_asset_data(self, asset_id: str) -> Optional[Dict[str, Any]]:
        return self._asset_data.get(asset_id)

    def to_json(self) -> Dict[str, Any]:
        """``{"nodes": [...], "links": [...]}`` for the frontend graph view."""
        nodes = []
        for node in self.g.nodes():
            data = self.get_asset_data(node) or {}
            nodes.append({
                "id": node,
                "class": data.get("class", "Unknown"),
                "model": data.get("model"),
                "state": data.get("state", "Unknown"),
                "type": "ROOT" if self.parent(node) is None else "ATTACHED",
            })
        links = [{"source": s, "target": t} for s, t in self.g.edges()]
        return {"nodes": nodes, "links": links}
