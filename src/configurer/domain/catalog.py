"""Catalog types: the retrieved description and its executable resource graph."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

log = logging.getLogger(__name__)

# Relationship parameters: "require"/"subscribe" point at prerequisites,
# "before"/"notify" point at dependents.
PREREQUISITE_PARAMETERS: Final[tuple[str, ...]] = ("require", "subscribe")
DEPENDENT_PARAMETERS: Final[tuple[str, ...]] = ("before", "notify")

_REF_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?P<type>[^\[\]]+)\[(?P<title>.+)\]$", re.DOTALL)


class CatalogError(RuntimeError):
    """Raised when a catalog cannot be converted, finalized or mutated."""


def resource_ref(resource_type: str, title: str) -> str:
    """Return the canonical ``Type[title]`` reference."""

    segments = [segment.capitalize() for segment in resource_type.split("::")]
    return f"{'::'.join(segments)}[{title}]"


def parse_ref(ref: str) -> tuple[str, str]:
    match = _REF_PATTERN.match(ref.strip())
    if match is None:
        raise CatalogError(f"Invalid resource reference: {ref!r}")
    return match.group("type"), match.group("title")


def _canonical(ref: str) -> str:
    return resource_ref(*parse_ref(ref))


@dataclass(slots=True)
class Resource:
    type: str
    title: str
    parameters: dict[str, Any] = field(default_factory=dict)
    tags: tuple[str, ...] = ()
    exported: bool = False

    @property
    def ref(self) -> str:
        return resource_ref(self.type, self.title)

    def relationship_refs(self, names: Iterable[str]) -> list[str]:
        refs: list[str] = []
        for name in names:
            value = self.parameters.get(name)
            if value is None:
                continue
            values = value if isinstance(value, (list, tuple)) else [value]
            for item in values:
                resource_type, title = parse_ref(str(item))
                refs.append(resource_ref(resource_type, title))
        return refs


@dataclass(slots=True, frozen=True)
class Edge:
    source: str
    target: str


@dataclass(slots=True)
class RawCatalog:
    """A catalog as retrieved from a terminus, before conversion."""

    name: str
    version: str | None = None
    environment: str | None = None
    classes: tuple[str, ...] = ()
    resources: list[Resource] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def to_executable(self) -> ExecutableCatalog:
        """Build the executable graph; the raw catalog is left untouched."""

        catalog = ExecutableCatalog(
            name=self.name,
            version=self.version,
            environment=self.environment,
            classes=self.classes,
        )
        for resource in self.resources:
            if resource.exported:
                continue
            catalog.add_resource(
                Resource(
                    type=resource.type,
                    title=resource.title,
                    parameters=dict(resource.parameters),
                    tags=resource.tags,
                )
            )
        for edge in self.edges:
            catalog.add_edge(edge.source, edge.target)
        return catalog


class ExecutableCatalog:
    """Resource graph ready for application.

    Resources and edges may be added until :meth:`finalize` runs; afterwards the
    structure is frozen and an evaluation order is available.
    """

    def __init__(
        self,
        name: str,
        *,
        version: str | None = None,
        environment: str | None = None,
        classes: Iterable[str] = (),
    ) -> None:
        self.name = name
        self.version = version
        self.environment = environment
        self.classes: tuple[str, ...] = tuple(classes)
        self.retrieval_duration: float | None = None
        self._resources: dict[str, Resource] = {}
        self._edges: list[Edge] = []
        self._prerequisites: dict[str, set[str]] = {}
        self._order: tuple[str, ...] | None = None

    def __repr__(self) -> str:
        return f"ExecutableCatalog(name={self.name!r}, resources={len(self._resources)})"

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, ref: object) -> bool:
        return ref in self._resources

    @property
    def finalized(self) -> bool:
        return self._order is not None

    @property
    def resources(self) -> Mapping[str, Resource]:
        return dict(self._resources)

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges)

    def resource(self, ref: str) -> Resource | None:
        return self._resources.get(ref)

    def add_resource(self, resource: Resource) -> None:
        self._ensure_mutable()
        if resource.ref in self._resources:
            raise CatalogError(f"Duplicate declaration: {resource.ref} is already declared")
        self._resources[resource.ref] = resource

    def add_edge(self, source: str, target: str) -> None:
        self._ensure_mutable()
        self._edges.append(Edge(source=_canonical(source), target=_canonical(target)))

    def finalize(self) -> None:
        """Resolve dependency edges and freeze the graph."""

        if self.finalized:
            return

        prerequisites: dict[str, set[str]] = {ref: set() for ref in self._resources}
        for edge in self._edges:
            self._link(prerequisites, before=edge.source, after=edge.target)
        for ref, resource in self._resources.items():
            for other in resource.relationship_refs(PREREQUISITE_PARAMETERS):
                self._link(prerequisites, before=other, after=ref)
            for other in resource.relationship_refs(DEPENDENT_PARAMETERS):
                self._link(prerequisites, before=ref, after=other)

        sorter = TopologicalSorter(prerequisites)
        try:
            order = tuple(sorter.static_order())
        except CycleError as exc:
            cycle = " => ".join(exc.args[1])
            raise CatalogError(f"Found dependency cycle: {cycle}") from exc

        self._prerequisites = prerequisites
        self._order = order
        log.debug("Finalized catalog %s with %d resources", self.name, len(order))

    def ordered_resources(self) -> Iterator[Resource]:
        if self._order is None:
            raise CatalogError(f"Catalog {self.name} must be finalized before evaluation")
        for ref in self._order:
            yield self._resources[ref]

    def prerequisites(self, ref: str) -> frozenset[str]:
        return frozenset(self._prerequisites.get(ref, ()))

    def write_class_file(self, path: str | os.PathLike[str]) -> None:
        """Persist the declared classes, one per line, for later introspection."""

        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        content = "\n".join(self.classes)
        target.write_text(f"{content}\n" if content else "", encoding="utf-8")
        target.chmod(0o640)

    def _link(self, prerequisites: dict[str, set[str]], *, before: str, after: str) -> None:
        for ref in (before, after):
            if ref not in self._resources:
                raise CatalogError(f"Could not find dependency {ref} in catalog {self.name}")
        prerequisites[after].add(before)

    def _ensure_mutable(self) -> None:
        if self.finalized:
            raise CatalogError(f"Catalog {self.name} is finalized and cannot be modified")
