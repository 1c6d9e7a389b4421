"""Ports for locating and storing resources such as catalogs and reports."""

from __future__ import annotations

from typing import Protocol, TypedDict, runtime_checkable


class FindOptions(TypedDict, total=False):
    """Options accepted by a find call.

    ``ignore_cache`` skips the cache and asks the authoritative terminus;
    ``ignore_terminus`` answers from the cache only. ``facts`` and
    ``facts_format`` carry the node's encoded facts to termini that need them.
    """

    ignore_cache: bool
    ignore_terminus: bool
    facts: str
    facts_format: str


@runtime_checkable
class Terminus[T](Protocol):
    """A backend strategy answering find/save requests for one kind of resource."""

    name: str
    requires_facts: bool

    def find(self, key: str, options: FindOptions) -> T | None: ...

    def save(self, key: str, resource: T) -> None: ...


__all__ = ["FindOptions", "Terminus"]
