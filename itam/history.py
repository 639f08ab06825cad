"""
itam.history
============

Append‑only audit trail of successful writes.

The rule modules never call this directly; the HTTP layer records an
entry after each create, update or delete so the history reflects only
changes that were actually persisted.
"""

from __future__ import annotations

import dataclasses
import enum
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from .models import to_plain, utcnow


class Action(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


@dataclass
class HistoryEntry:
    actor_id: str
    action: Action
    resource_type: str
    resource_id: str
    previous_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=utcnow)


def snapshot(record: Any) -> Optional[Dict[str, Any]]:
    """JSON‑friendly dict of a dataclass record (enums → values, dates → ISO)."""
    if record is None:
        return None
    return to_plain(dataclasses.asdict(record))


class HistoryLog:
    """
    In‑memory audit log, newest entries last.

    Storage goes through ``_append`` and ``_all`` so a persistent log only
    needs to override those two.
    """

    def __init__(self) -> None:
        self._entries: List[HistoryEntry] = []

    def _append(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def _all(self) -> List[HistoryEntry]:
        """Every entry, oldest first."""
        return list(self._entries)

    def record(
        self,
        actor_id: str,
        action: Action,
        resource_type: str,
        resource_id: str,
        previous: Any = None,
        new: Any = None,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            actor_id=actor_id,
            action=Action(action),
            resource_type=resource_type,
            resource_id=resource_id,
            previous_value=snapshot(previous),
            new_value=snapshot(new),
        )
        self._append(entry)
        return entry

    def entries(
        self,
        resource_type: Optional[str] = None,
        action: Optional[Action] = None,
        limit: Optional[int] = None,
    ) -> List[HistoryEntry]:
        """Newest first, optionally filtered."""
        hits = [
            e for e in reversed(self._all())
            if (resource_type is None or e.resource_type == resource_type)
            and (action is None or e.action == action)
        ]
        return hits[:limit] if limit is not None else hits

    def resource_logs(self, resource_type: str, resource_id: str) -> List[HistoryEntry]:
        return [
            e for e in reversed(self._all())
            if e.resource_type == resource_type and e.resource_id == resource_id
        ]

    def user_activity(self, actor_id: str, limit: int = 50) -> List[HistoryEntry]:
        return [e for e in reversed(self._all()) if e.actor_id == actor_id][:limit]

    def stats(self) -> Dict[str, Any]:
        entries = self._all()
        return {
            "total": len(entries),
            "by_action": dict(Counter(e.action.value for e in entries)),
            "by_resource_type": dict(Counter(e.resource_type for e in entries)),
        }

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._all())

    def __len__(self) -> int:
        return len(self._all())
