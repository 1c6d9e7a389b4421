"""Agent settings recognised by the run orchestrator."""

from __future__ import annotations

import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from configurer.common.storage import get_cache_database_uri, get_vardir

from .env import env_choice, env_flag, env_float, env_int, env_str
from .rest import RestConfig

CATALOG_TERMINI: Final[tuple[str, ...]] = ("rest", "cache")
REPORT_TERMINI: Final[tuple[str, ...]] = ("rest", "store")
FACT_FORMATS: Final[tuple[str, ...]] = ("b64_zlib_yaml", "yaml")

DEFAULT_SERVER: Final[str] = "configurer"
DEFAULT_MASTERPORT: Final[int] = 8140
DEFAULT_ENVIRONMENT: Final[str] = "production"
DEFAULT_HTTP_TIMEOUT: Final[float] = 120.0


@dataclass(frozen=True, slots=True)
class AgentSettings:
    """Holds every setting the agent consults during a run."""

    certname: str
    vardir: Path
    environment: str = DEFAULT_ENVIRONMENT
    server: str = DEFAULT_SERVER
    masterport: int = DEFAULT_MASTERPORT
    prerun_command: str = ""
    postrun_command: str = ""
    summarize: bool = False
    report: bool = True
    usecacheonfailure: bool = True
    use_cached_catalog: bool = False
    catalog_terminus: str = "rest"
    report_terminus: str = "rest"
    pluginsync: bool = False
    factsync: bool = False
    facts_format: str = "b64_zlib_yaml"
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    ca_file: str | None = None
    cert_file: str | None = None
    key_file: str | None = None

    @property
    def statedir(self) -> Path:
        return self.vardir / "state"

    @property
    def lastrunfile(self) -> Path:
        return self.statedir / "last_run_summary.yaml"

    @property
    def lockfile(self) -> Path:
        return self.statedir / "agent_catalog_run.lock"

    @property
    def disabled_lockfile(self) -> Path:
        return self.statedir / "agent_disabled.lock"

    @property
    def classfile(self) -> Path:
        return self.statedir / "classes.txt"

    @property
    def statefile(self) -> Path:
        return self.statedir / "state.yaml"

    def rest_config(self) -> RestConfig:
        cert = (self.cert_file, self.key_file) if self.cert_file and self.key_file else None
        return RestConfig(
            name="master",
            base_url=f"https://{self.server}:{self.masterport}",
            timeout_seconds=self.http_timeout,
            verify=self.ca_file or True,
            cert=cert,
        )

    @classmethod
    def from_environment(cls) -> AgentSettings:
        vardir = Path(env_str("vardir", "") or get_vardir()).expanduser()
        return cls(
            certname=(env_str("certname", "") or socket.getfqdn()).lower(),
            vardir=vardir,
            environment=env_str("environment", DEFAULT_ENVIRONMENT) or DEFAULT_ENVIRONMENT,
            server=env_str("server", DEFAULT_SERVER) or DEFAULT_SERVER,
            masterport=env_int("masterport", DEFAULT_MASTERPORT),
            prerun_command=env_str("prerun_command", ""),
            postrun_command=env_str("postrun_command", ""),
            summarize=env_flag("summarize", default=False),
            report=env_flag("report", default=True),
            usecacheonfailure=env_flag("usecacheonfailure", default=True),
            use_cached_catalog=env_flag("use_cached_catalog", default=False),
            catalog_terminus=env_choice("catalog_terminus", "rest", CATALOG_TERMINI),
            report_terminus=env_choice("report_terminus", "rest", REPORT_TERMINI),
            pluginsync=env_flag("pluginsync", default=False),
            factsync=env_flag("factsync", default=False),
            facts_format=env_choice("facts_format", "b64_zlib_yaml", FACT_FORMATS),
            http_timeout=env_float("http_timeout", DEFAULT_HTTP_TIMEOUT),
            ca_file=env_str("ca_file", "") or None,
            cert_file=env_str("cert_file", "") or None,
            key_file=env_str("key_file", "") or None,
        )

    def cache_database_uri(self) -> str:
        return get_cache_database_uri(self.vardir)


def get_agent_settings() -> AgentSettings:
    return AgentSettings.from_environment()
