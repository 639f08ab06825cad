"""
ITAM
====

Rule core of an IT asset management service: the asset life‑cycle
state machine and the license seat / compliance accounting engine.

Import structure
----------------
`import itam` is intentionally cheap: only the stdlib-based rule
sub‑modules are imported by default.  Heavy dependencies such as
*sqlmodel*, *matplotlib* and *networkx* are only imported when you
explicitly access :pymod:`itam.db`, :pymod:`itam.viz` or
:pymod:`itam.relationships`.

Sub‑modules
~~~~~~~~~~~
- :pymod:`itam.models`         – ``Asset`` / ``License`` dataclasses + enums
- :pymod:`itam.lifecycle`      – transition table and guard (`request_transition`)
- :pymod:`itam.validation`     – identifier patterns, required‑field policy
- :pymod:`itam.accounting`     – derived license fields, seat ops, reports
- :pymod:`itam.inventory`      – in‑memory registries (the write path)
- :pymod:`itam.inventory_db`   – SQLite‑backed registries
- :pymod:`itam.history`        – audit log of successful writes
- :pymod:`itam.relationships`  – asset attachment graph (NetworkX)
- :pymod:`itam.viz`            – plotting helpers

Quick start
-----------
>>> from itam.models import Asset, AssetClass, AssetState
>>> from itam.lifecycle import request_transition
>>> a = Asset("AS-2025-000123", AssetClass.LAPTOP)
>>> request_transition(a, AssetState.RECEIVED).state
<AssetState.RECEIVED: 'Received'>
"""

__all__ = [
    "models",
    "errors",
    "lifecycle",
    "validation",
    "accounting",
    "inventory",
    "history",
    "pagination",
]

__version__ = "0.1.0"
