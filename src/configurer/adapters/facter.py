"""Fact collection from the local host."""

from __future__ import annotations

import os
import platform
import socket
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from configurer.domain.facts import Facts

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from configurer.domain.ports.facts import FactCollector

FACT_ENV_PREFIX: Final[str] = "FACTER_"


def _builtin_facts() -> dict[str, Any]:
    fqdn = socket.getfqdn()
    hostname, _, domain = fqdn.partition(".")
    uname = platform.uname()
    return {
        "fqdn": fqdn,
        "hostname": hostname or uname.node,
        "domain": domain or None,
        "kernel": uname.system,
        "kernelrelease": uname.release,
        "architecture": uname.machine,
        "operatingsystem": platform.system(),
        "processorcount": os.cpu_count() or 1,
        "python_version": platform.python_version(),
    }


@dataclass(slots=True)
class LocalFactCollector:
    """Collect built-in host facts, overridable through ``FACTER_<name>`` variables."""

    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)
    builtin: Callable[[], dict[str, Any]] = field(default=_builtin_facts)

    def collect(self, name: str) -> Facts:
        values = self.builtin()
        for key, value in self.environ.items():
            if key.startswith(FACT_ENV_PREFIX) and len(key) > len(FACT_ENV_PREFIX):
                values[key[len(FACT_ENV_PREFIX) :].lower()] = value
        values["clientcert"] = name
        return Facts(name=name, values=values)


if TYPE_CHECKING:
    _collector_check: FactCollector = LocalFactCollector()
