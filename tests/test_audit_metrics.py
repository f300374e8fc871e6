"""
Tests for the audit trail and Prometheus metrics.
"""

import json
from datetime import datetime, timedelta

import pytest

from claimauthz.audit import (
    DecisionRecord, FileAuditLogger, MemoryAuditLogger, create_audit_logger
)
from claimauthz.metrics import AuthzMetrics, MetricConfig, create_metrics


def make_record(**overrides):
    values = dict(
        resource_id="reports",
        policy="claimauthz.require_claim",
        allowed=True,
        reason="Access allowed",
        principal_id="alice",
    )
    values.update(overrides)
    return DecisionRecord(**values)


class TestAuditLoggers:
    """Test audit logger implementations."""

    def test_memory_logger_filters(self):
        audit = MemoryAuditLogger()
        audit.log(make_record())
        audit.log(make_record(allowed=False, principal_id="bob"))
        audit.log(make_record(resource_id="admin"))

        assert len(audit.get_events()) == 3
        assert len(audit.get_events(resource_id="reports")) == 2
        assert [e.principal_id for e in audit.get_events(allowed=False)] == ["bob"]

    def test_memory_logger_time_filters(self):
        audit = MemoryAuditLogger()
        now = datetime.now()
        audit.log(make_record(timestamp=now - timedelta(hours=2)))
        audit.log(make_record(timestamp=now))

        assert len(audit.get_events(start_time=now - timedelta(hours=1))) == 1
        assert len(audit.get_events(end_time=now - timedelta(hours=1))) == 1

    def test_memory_logger_is_bounded(self):
        audit = MemoryAuditLogger(max_entries=2)
        for i in range(5):
            audit.log(make_record(resource_id=f"r{i}"))

        assert [e.resource_id for e in audit.get_events()] == ["r3", "r4"]

    def test_file_logger_round_trip(self, tmp_path):
        path = tmp_path / "audit.log"
        audit = FileAuditLogger(str(path))
        first = make_record()
        audit.log(first)
        audit.log(make_record(allowed=False, principal_id=None))

        assert len(path.read_text().splitlines()) == 2

        events = audit.get_events()
        assert events[0] == first
        assert audit.get_events(allowed=False)[0].principal_id is None

    def test_file_logger_skips_malformed_lines(self, tmp_path):
        path = tmp_path / "audit.log"
        audit = FileAuditLogger(str(path))
        audit.log(make_record())
        with open(path, "a", encoding="utf-8") as f:
            f.write("not json\n\n{\"event_id\": \"x\"}\n[1, 2]\n42\n")
            bad_timestamp = dict(make_record().to_dict(), timestamp=12345)
            f.write(json.dumps(bad_timestamp) + "\n")

        assert len(audit.get_events()) == 1

    def test_file_logger_missing_file(self, tmp_path):
        audit = FileAuditLogger(str(tmp_path / "absent.log"))
        assert audit.get_events() == []

    def test_factory(self, tmp_path):
        assert create_audit_logger("none") is None
        assert isinstance(create_audit_logger("memory", max_entries=5), MemoryAuditLogger)

        file_logger = create_audit_logger("file", file_path=str(tmp_path / "a.log"))
        assert isinstance(file_logger, FileAuditLogger)

        with pytest.raises(ValueError):
            create_audit_logger("syslog")


class TestAuthzMetrics:
    """Test Prometheus metrics."""

    def test_record_decision(self):
        metrics = create_metrics()
        metrics.record_decision(True, "p")
        metrics.record_decision(True, "p")
        metrics.record_decision(False, "p")

        assert metrics.decision_count(True, "p") == 2
        assert metrics.decision_count(False, "p") == 1
        assert metrics.decision_count(True, "other") == 0

    def test_time_evaluation(self):
        metrics = AuthzMetrics()
        with metrics.time_evaluation("p"):
            pass

        count = metrics.registry.get_sample_value(
            "claimauthz_evaluation_duration_seconds_count", {"policy": "p"}
        )
        assert count == 1

    def test_disabled_metrics_record_nothing(self):
        metrics = AuthzMetrics(MetricConfig(enabled=False))
        metrics.record_decision(True, "p")
        with metrics.time_evaluation("p"):
            pass

        assert metrics.decision_count(True, "p") == 0

    def test_export(self):
        metrics = AuthzMetrics()
        metrics.record_decision(False, "p")

        text = metrics.export()
        assert "claimauthz_decisions_total" in text
        assert 'allowed="false"' in text

    def test_independent_registries(self):
        first = AuthzMetrics()
        second = AuthzMetrics()
        first.record_decision(True, "p")

        assert second.decision_count(True, "p") == 0
