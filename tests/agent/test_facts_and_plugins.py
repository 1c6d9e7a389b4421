from __future__ import annotations

import base64
import logging
import zlib

import pytest
import yaml

from configurer.agent import FactError, FactHandler, PluginHandler
from tests.helpers.agent import FakeFactCollector, FakePluginSynchronizer


def test_find_facts_wraps_collector_errors() -> None:
    handler = FactHandler(
        FakeFactCollector(error=RuntimeError("no facter")),
        certname="node.example.com",
        facts_format="yaml",
    )

    with pytest.raises(FactError, match="Could not retrieve local facts: no facter"):
        handler.find_facts()


def test_facts_for_uploading_reuses_collected_facts() -> None:
    collector = FakeFactCollector()
    handler = FactHandler(collector, certname="node.example.com", facts_format="yaml")

    handler.find_facts()
    payload = handler.facts_for_uploading()

    assert collector.collected == ["node.example.com"]
    assert payload["facts_format"] == "yaml"
    document = yaml.safe_load(payload["facts"])
    assert document["name"] == "node.example.com"
    assert document["values"]["kernel"] == "Linux"


def test_facts_for_uploading_compressed_format() -> None:
    handler = FactHandler(FakeFactCollector(), certname="node.example.com", facts_format="b64_zlib_yaml")

    payload = handler.facts_for_uploading()

    assert payload["facts_format"] == "b64_zlib_yaml"
    document = yaml.safe_load(zlib.decompress(base64.b64decode(payload["facts"])).decode())
    assert document["values"]["osfamily"] == "Debian"


def test_plugins_download_only_when_enabled() -> None:
    synchronizer = FakePluginSynchronizer()

    PluginHandler(synchronizer, pluginsync=False, factsync=False).download_plugins()
    PluginHandler(synchronizer, pluginsync=False, factsync=False).download_fact_plugins()
    assert synchronizer.downloads == []

    handler = PluginHandler(synchronizer, pluginsync=True, factsync=True)
    handler.download_fact_plugins()
    handler.download_plugins()
    assert synchronizer.downloads == ["fact_plugins", "plugins"]


def test_plugins_without_source_warn(caplog: pytest.LogCaptureFixture) -> None:
    handler = PluginHandler(None, pluginsync=True, factsync=True)

    with caplog.at_level(logging.WARNING):
        handler.download_plugins()
        handler.download_fact_plugins()

    assert "pluginsync is enabled but no plugin source is configured" in caplog.messages
    assert "factsync is enabled but no plugin source is configured" in caplog.messages
