from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from configurer.adapters.schema import CatalogPayload, dump_report, load_catalog, load_report
from configurer.domain.report import Event, LogEntry, Report, ResourceStatus


def test_load_catalog_accepts_bare_data() -> None:
    catalog = load_catalog(
        {
            "name": "node",
            "version": 42,
            "resources": [{"type": "exec", "title": 7, "exported": False, "tags": ["a"]}],
            "unknown_field": "ignored",
        }
    )

    assert catalog.version == "42"
    assert catalog.resources[0].title == "7"
    assert catalog.resources[0].tags == ("a",)


def test_load_catalog_rejects_missing_name() -> None:
    with pytest.raises(ValidationError):
        CatalogPayload.model_validate({"data": {"resources": []}})


def test_report_document_keeps_metrics_and_statuses() -> None:
    report = Report(
        "apply",
        host="node",
        environment="production",
        configuration_version="3",
        time=datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
    )
    report.add_log(
        LogEntry(level="notice", message="Applied", source="configurer", time=datetime(2024, 5, 1, tzinfo=UTC))
    )
    status = ResourceStatus(resource="File[/etc/motd]", evaluation_time=0.2)
    status.add_event(Event(status="failure", message="denied", property="content"))
    report.add_resource_status(status)
    report.finalize_report()

    document = dump_report(report)
    loaded = load_report(document)

    assert document["status"] == "failed"
    assert document["time"].startswith("2024-05-01T12:00:00")
    assert loaded.status == "failed"
    assert loaded.metrics["resources"]["failed"] == 1
    assert loaded.logs[0].message == "Applied"
    assert loaded.resource_statuses["File[/etc/motd]"].events[0].message == "denied"
    assert loaded.finalized


def test_report_without_host_cannot_be_serialised() -> None:
    with pytest.raises(ValueError, match="without a host"):
        dump_report(Report())
