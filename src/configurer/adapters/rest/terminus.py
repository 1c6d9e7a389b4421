"""REST terminus: catalogs and reports exchanged with the configuration server."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from configurer.adapters.schema import dump_catalog, dump_report, load_catalog, load_report
from configurer.domain.catalog import RawCatalog
from configurer.domain.report import Report

from .client import RestClient, RestError

if TYPE_CHECKING:
    from collections.abc import Callable

    from configurer.config.rest import RestConfig
    from configurer.domain.ports.locating import FindOptions

log = logging.getLogger(__name__)

_ACCEPT_HEADERS = {"Accept": "application/json"}


def _default_client_factory(config: RestConfig) -> RestClient:
    return RestClient(config)


@dataclass
class RestTerminus[T]:
    """Finds and saves one kind of document at ``/{environment}/{indirection}/{key}``.

    Requests carry the node's facts when given; a 404 means the document does not
    exist. Every other failure raises :class:`RestError`.
    """

    indirection: str
    config: RestConfig
    environment: str
    dump: Callable[[T], dict[str, Any]]
    load: Callable[[object], T]
    client_factory: Callable[[RestConfig], RestClient] = field(default=_default_client_factory)
    requires_facts: bool = True

    @property
    def name(self) -> str:
        return f"rest:{self.indirection}"

    def find(self, key: str, options: FindOptions) -> T | None:
        return asyncio.run(self._find_async(key, options))

    def save(self, key: str, resource: T) -> None:
        asyncio.run(self._save_async(key, resource))

    def path_for(self, key: str) -> str:
        return f"/{quote(self.environment, safe='')}/{self.indirection}/{quote(key, safe='')}"

    async def _find_async(self, key: str, options: FindOptions) -> T | None:
        params: dict[str, str] = {}
        if "facts" in options and "facts_format" in options:
            params["facts"] = options["facts"]
            params["facts_format"] = options["facts_format"]

        async with self.client_factory(self.config) as client:
            response = await client.get(
                self.path_for(key),
                params=httpx.QueryParams(params),
                headers=_ACCEPT_HEADERS,
            )
        if response.status_code == httpx.codes.NOT_FOUND:
            log.debug("%s %s not found on %s", self.indirection, key, self.config.base_url)
            return None
        _raise_for_status(response, f"find {self.indirection} {key}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise RestError(f"Invalid {self.indirection} document for {key}: {exc}") from exc
        return self.load(payload)

    async def _save_async(self, key: str, resource: T) -> None:
        async with self.client_factory(self.config) as client:
            response = await client.put(
                self.path_for(key),
                json=self.dump(resource),
                headers=_ACCEPT_HEADERS,
            )
        _raise_for_status(response, f"save {self.indirection} {key}")


def _raise_for_status(response: httpx.Response, action: str) -> None:
    if response.is_success:
        return
    detail = response.text.strip() or response.reason_phrase
    raise RestError(
        f"Could not {action}: server returned {response.status_code}: {detail}",
        status_code=response.status_code,
    )


def rest_catalog_terminus(
    config: RestConfig,
    environment: str,
    *,
    client_factory: Callable[[RestConfig], RestClient] = _default_client_factory,
) -> RestTerminus[RawCatalog]:
    return RestTerminus(
        indirection="catalog",
        config=config,
        environment=environment,
        dump=dump_catalog,
        load=load_catalog,
        client_factory=client_factory,
    )


def rest_report_terminus(
    config: RestConfig,
    environment: str,
    *,
    client_factory: Callable[[RestConfig], RestClient] = _default_client_factory,
) -> RestTerminus[Report]:
    return RestTerminus(
        indirection="report",
        config=config,
        environment=environment,
        dump=dump_report,
        load=load_report,
        client_factory=client_factory,
    )
