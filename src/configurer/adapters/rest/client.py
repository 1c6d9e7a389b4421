"""Async HTTP client used by the REST termini."""

from __future__ import annotations

import ssl
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import HeaderTypes, QueryParamTypes, URLTypes

    from configurer.config.rest import RestConfig


class RestError(RuntimeError):
    """Raised when a REST call fails at the transport or HTTP level."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RequestOptions(TypedDict, total=False):
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: float
    headers: HeaderTypes
    verify: ssl.SSLContext | bool
    transport: httpx.AsyncBaseTransport


def build_ssl_context(config: RestConfig) -> ssl.SSLContext | bool:
    if config.verify is False:
        return False
    if config.verify is True and config.cert is None:
        return True
    cafile = config.verify if isinstance(config.verify, str) else None
    context = ssl.create_default_context(cafile=cafile)
    if config.cert is not None:
        certfile, keyfile = config.cert
        context.load_cert_chain(certfile=certfile, keyfile=keyfile)
    return context


class RestClient:
    def __init__(
        self,
        config: RestConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        client_kwargs: AsyncClientOptions = {
            "base_url": config.base_url,
            "timeout": config.timeout_seconds,
            "verify": build_ssl_context(config),
        }
        if config.default_headers is not None:
            client_kwargs["headers"] = dict(config.default_headers)
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> RestClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise RestError(f"{method} {url} on {self.config.name} failed: {exc}") from exc

    async def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def put(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)
