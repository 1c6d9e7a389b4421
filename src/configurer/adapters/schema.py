"""Pydantic models describing catalog and report documents on the wire and at rest."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime  # noqa: TC003
from typing import Any, Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from configurer import __version__
from configurer.domain.catalog import Edge, RawCatalog, Resource
from configurer.domain.report import Event, LogEntry, Report, ResourceStatus


def _stringify(value: object) -> object:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class DocumentModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ResourcePayload(DocumentModel):
    type: str
    title: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    exported: bool = False

    _normalize_title = field_validator("title", mode="before")(_stringify)


class EdgePayload(DocumentModel):
    source: str
    target: str


class CatalogData(DocumentModel):
    name: str
    version: str | None = None
    environment: str | None = None
    classes: list[str] = Field(default_factory=list)
    resources: list[ResourcePayload] = Field(default_factory=list)
    edges: list[EdgePayload] = Field(default_factory=list)

    _normalize_version = field_validator("version", mode="before")(_stringify)


class CatalogPayload(DocumentModel):
    document_type: Literal["Catalog"] = "Catalog"
    data: CatalogData

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_data(cls, value: object) -> object:
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            if "data" not in mapping_value and "name" in mapping_value:
                return {"document_type": "Catalog", "data": dict(mapping_value)}
        return value

    def to_domain(self) -> RawCatalog:
        data = self.data
        return RawCatalog(
            name=data.name,
            version=data.version,
            environment=data.environment,
            classes=tuple(data.classes),
            resources=[
                Resource(
                    type=item.type,
                    title=item.title,
                    parameters=dict(item.parameters),
                    tags=tuple(item.tags),
                    exported=item.exported,
                )
                for item in data.resources
            ],
            edges=[Edge(source=edge.source, target=edge.target) for edge in data.edges],
        )

    @classmethod
    def from_domain(cls, catalog: RawCatalog) -> CatalogPayload:
        return cls(
            data=CatalogData(
                name=catalog.name,
                version=catalog.version,
                environment=catalog.environment,
                classes=list(catalog.classes),
                resources=[
                    ResourcePayload(
                        type=resource.type,
                        title=resource.title,
                        parameters=dict(resource.parameters),
                        tags=list(resource.tags),
                        exported=resource.exported,
                    )
                    for resource in catalog.resources
                ],
                edges=[EdgePayload(source=edge.source, target=edge.target) for edge in catalog.edges],
            )
        )


class LogPayload(DocumentModel):
    level: str
    message: str
    source: str
    time: datetime


class EventPayload(DocumentModel):
    status: Literal["success", "failure", "noop", "audit"]
    message: str = ""
    property: str | None = None
    previous_value: Any = None
    desired_value: Any = None


class ResourceStatusPayload(DocumentModel):
    resource: str
    evaluation_time: float = 0.0
    changed: bool = False
    out_of_sync: bool = False
    failed: bool = False
    skipped: bool = False
    scheduled: bool = False
    events: list[EventPayload] = Field(default_factory=list)


class ReportPayload(DocumentModel):
    host: str
    kind: str = "apply"
    time: datetime
    environment: str | None = None
    configuration_version: str | None = None
    status: Literal["failed", "changed", "unchanged"] | None = None
    transaction_uuid: str | None = None
    agent_version: str = __version__
    metrics: dict[str, dict[str, Any]] = Field(default_factory=dict)
    logs: list[LogPayload] = Field(default_factory=list)
    resource_statuses: dict[str, ResourceStatusPayload] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, report: Report) -> ReportPayload:
        if report.host is None:
            raise ValueError("Cannot serialise a report without a host")
        return cls(
            host=report.host,
            kind=report.kind,
            time=report.time,
            environment=report.environment,
            configuration_version=report.configuration_version,
            status=report.status,
            transaction_uuid=report.transaction_uuid,
            metrics=report.metrics,
            logs=[
                LogPayload(level=entry.level, message=entry.message, source=entry.source, time=entry.time)
                for entry in report.logs
            ],
            resource_statuses={
                ref: ResourceStatusPayload(
                    resource=status.resource,
                    evaluation_time=status.evaluation_time,
                    changed=status.changed,
                    out_of_sync=status.out_of_sync,
                    failed=status.failed,
                    skipped=status.skipped,
                    scheduled=status.scheduled,
                    events=[
                        EventPayload(
                            status=event.status,
                            message=event.message,
                            property=event.property,
                            previous_value=event.previous_value,
                            desired_value=event.desired_value,
                        )
                        for event in status.events
                    ],
                )
                for ref, status in report.resource_statuses.items()
            },
        )

    def to_domain(self) -> Report:
        report = Report(
            self.kind,
            host=self.host,
            environment=self.environment,
            configuration_version=self.configuration_version,
            time=self.time,
        )
        report.status = self.status
        report.transaction_uuid = self.transaction_uuid
        report.metrics = {name: dict(values) for name, values in self.metrics.items()}
        report.finalized = self.status is not None
        for entry in self.logs:
            report.add_log(
                LogEntry(level=entry.level, message=entry.message, source=entry.source, time=entry.time)
            )
        for payload in self.resource_statuses.values():
            status = ResourceStatus(
                resource=payload.resource,
                evaluation_time=payload.evaluation_time,
                changed=payload.changed,
                out_of_sync=payload.out_of_sync,
                failed=payload.failed,
                skipped=payload.skipped,
                scheduled=payload.scheduled,
                events=[
                    Event(
                        status=event.status,
                        message=event.message,
                        property=event.property,
                        previous_value=event.previous_value,
                        desired_value=event.desired_value,
                    )
                    for event in payload.events
                ],
            )
            report.add_resource_status(status)
        return report


def dump_catalog(catalog: RawCatalog) -> dict[str, Any]:
    return CatalogPayload.from_domain(catalog).model_dump(mode="json")


def load_catalog(document: object) -> RawCatalog:
    return CatalogPayload.model_validate(document).to_domain()


def dump_report(report: Report) -> dict[str, Any]:
    return ReportPayload.from_domain(report).model_dump(mode="json")


def load_report(document: object) -> Report:
    return ReportPayload.model_validate(document).to_domain()
