from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest

from configurer.domain.indirection import Indirection

if TYPE_CHECKING:
    from configurer.domain.ports.locating import FindOptions


@dataclass
class MemoryTerminus:
    name: str
    requires_facts: bool = False
    documents: dict[str, str] = field(default_factory=dict)
    finds: list[tuple[str, FindOptions]] = field(default_factory=list)
    error: Exception | None = None
    save_error: Exception | None = None

    def find(self, key: str, options: FindOptions) -> str | None:
        self.finds.append((key, options))
        if self.error is not None:
            raise self.error
        return self.documents.get(key)

    def save(self, key: str, resource: str) -> None:
        if self.save_error is not None:
            raise self.save_error
        self.documents[key] = resource


def test_find_prefers_cache_by_default() -> None:
    remote = MemoryTerminus("rest", documents={"node": "remote"})
    cache = MemoryTerminus("store", documents={"node": "cached"})
    indirection = Indirection("catalog", remote, cache=cache)

    assert indirection.find("node") == "cached"
    assert remote.finds == []


def test_ignore_cache_goes_to_terminus_and_refreshes_cache() -> None:
    remote = MemoryTerminus("rest", documents={"node": "remote"})
    cache = MemoryTerminus("store", documents={"node": "cached"})
    indirection = Indirection("catalog", remote, cache=cache)

    assert indirection.find("node", ignore_cache=True) == "remote"
    assert cache.finds == []
    assert cache.documents["node"] == "remote"


def test_ignore_terminus_answers_from_cache_only() -> None:
    remote = MemoryTerminus("rest", documents={"node": "remote"})
    cache = MemoryTerminus("store")
    indirection = Indirection("catalog", remote, cache=cache)

    assert indirection.find("node", ignore_terminus=True) is None
    assert remote.finds == []


def test_conflicting_flags_are_rejected() -> None:
    indirection = Indirection("catalog", MemoryTerminus("rest"))

    with pytest.raises(ValueError, match="mutually exclusive"):
        indirection.find("node", ignore_cache=True, ignore_terminus=True)


def test_options_reach_the_terminus() -> None:
    remote = MemoryTerminus("rest", requires_facts=True, documents={"node": "remote"})
    indirection = Indirection("catalog", remote)

    indirection.find("node", ignore_cache=True, facts="abc", facts_format="yaml")

    assert remote.finds == [("node", {"ignore_cache": True, "facts": "abc", "facts_format": "yaml"})]
    assert indirection.requires_facts


def test_terminus_errors_propagate_without_retry() -> None:
    remote = MemoryTerminus("rest", error=ConnectionError("refused"))
    indirection = Indirection("catalog", remote)

    with pytest.raises(ConnectionError):
        indirection.find("node", ignore_cache=True)
    assert len(remote.finds) == 1


def test_cache_write_failures_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    remote = MemoryTerminus("rest", documents={"node": "remote"})
    cache = MemoryTerminus("store", save_error=OSError("disk full"))
    indirection = Indirection("catalog", remote, cache=cache)

    with caplog.at_level(logging.ERROR):
        assert indirection.find("node", ignore_cache=True) == "remote"

    assert "Could not cache catalog for node: disk full" in caplog.messages


def test_save_derives_key() -> None:
    store = MemoryTerminus("store")
    indirection = Indirection("report", store, key_of=lambda document: document.split(":")[0])

    indirection.save("node:unchanged")
    indirection.save("other", key="explicit")

    assert store.documents == {"node": "node:unchanged", "explicit": "other"}


def test_save_without_key_function_requires_key() -> None:
    indirection = Indirection("report", MemoryTerminus("store"))

    with pytest.raises(ValueError, match="pass key="):
        indirection.save("document")
