from __future__ import annotations

from configurer.adapters.facter import LocalFactCollector
from configurer.domain.ports import FactCollector


def test_collect_merges_environment_overrides() -> None:
    collector = LocalFactCollector(
        environ={"FACTER_role": "web", "FACTER_": "ignored", "PATH": "/usr/bin"},
        builtin=lambda: {"kernel": "Linux", "role": "unknown"},
    )

    facts = collector.collect("node.example.com")

    assert facts.name == "node.example.com"
    assert facts.values == {"kernel": "Linux", "role": "web", "clientcert": "node.example.com"}


def test_builtin_facts_describe_the_host() -> None:
    facts = LocalFactCollector(environ={}).collect("node")

    assert {"fqdn", "hostname", "kernel", "processorcount"} <= facts.values.keys()
    assert isinstance(LocalFactCollector(), FactCollector)
