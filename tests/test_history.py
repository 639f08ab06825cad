"""
tests/test_history.py
=====================

Unit tests for itam.history.HistoryLog
"""

from itam.history import Action, HistoryLog
from itam.models import License


def _demo_log():
    log = HistoryLog()
    lic = License("Office", "Microsoft", license_id="lic-1")
    log.record("alice", Action.CREATE, "License", "lic-1", new=lic)
    log.record("bob", Action.UPDATE, "Asset", "AS-2025-000001")
    log.record("alice", Action.DELETE, "License", "lic-1", previous=lic)
    return log


def test_snapshots_are_plain():
    log = _demo_log()
    created = log.resource_logs("License", "lic-1")[-1]
    assert created.action is Action.CREATE
    assert created.previous_value is None
    assert created.new_value["type"] == "subscription"
    assert created.new_value["license_id"] == "lic-1"


def test_entries_newest_first_and_filtered():
    log = _demo_log()
    assert [e.action for e in log.entries()] == [Action.DELETE, Action.UPDATE, Action.CREATE]
    assert len(log.entries(resource_type="License")) == 2
    assert len(log.entries(action=Action.UPDATE)) == 1
    assert len(log.entries(limit=1)) == 1


def test_user_activity_and_stats():
    log = _demo_log()
    assert len(log.user_activity("alice")) == 2
    assert log.user_activity("carol") == []
    assert log.stats() == {
        "total": 3,
        "by_action": {"CREATE": 1, "UPDATE": 1, "DELETE": 1},
        "by_resource_type": {"License": 2, "Asset": 1},
    }
    assert len(log) == 3
