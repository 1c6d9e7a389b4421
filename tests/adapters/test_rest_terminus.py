from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from configurer.adapters.rest import RestClient, RestError, rest_catalog_terminus, rest_report_terminus
from configurer.config import RestConfig
from configurer.domain.report import Report
from tests.helpers.agent import make_raw_catalog

Handler = Callable[[httpx.Request], httpx.Response]

CONFIG = RestConfig(name="master", base_url="https://config.example.com:8140")


def _factory(handler: Handler, seen: list[httpx.Request]) -> Callable[[RestConfig], RestClient]:
    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    def factory(config: RestConfig) -> RestClient:
        return RestClient(config, transport=httpx.MockTransport(recording))

    return factory


def _catalog_document() -> dict[str, object]:
    return {
        "document_type": "Catalog",
        "data": {
            "name": "node.example.com",
            "version": 1700000000,
            "environment": "production",
            "classes": ["settings"],
            "resources": [{"type": "file", "title": "/etc/motd", "parameters": {"content": "hi"}}],
            "edges": [],
        },
    }


def test_find_catalog_sends_facts_and_parses_document() -> None:
    seen: list[httpx.Request] = []
    terminus = rest_catalog_terminus(
        CONFIG,
        "production",
        client_factory=_factory(lambda _request: httpx.Response(200, json=_catalog_document()), seen),
    )

    catalog = terminus.find(
        "node.example.com",
        {"ignore_cache": True, "facts": "a+b/c==", "facts_format": "b64_zlib_yaml"},
    )

    assert catalog is not None
    assert catalog.version == "1700000000"
    assert catalog.resources[0].title == "/etc/motd"
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/production/catalog/node.example.com"
    assert request.url.params["facts"] == "a+b/c=="
    assert request.url.params["facts_format"] == "b64_zlib_yaml"
    assert terminus.requires_facts
    assert terminus.name == "rest:catalog"


def test_find_without_facts_sends_no_query() -> None:
    seen: list[httpx.Request] = []
    terminus = rest_catalog_terminus(
        CONFIG,
        "production",
        client_factory=_factory(lambda _request: httpx.Response(200, json=_catalog_document()), seen),
    )

    terminus.find("node.example.com", {})

    assert "facts" not in seen[0].url.params
    assert "facts_format" not in seen[0].url.params


def test_not_found_means_absent() -> None:
    terminus = rest_catalog_terminus(
        CONFIG,
        "production",
        client_factory=_factory(lambda _request: httpx.Response(404, text="Not Found"), []),
    )

    assert terminus.find("node.example.com", {}) is None


def test_server_errors_raise() -> None:
    terminus = rest_catalog_terminus(
        CONFIG,
        "production",
        client_factory=_factory(lambda _request: httpx.Response(500, text="compile failed"), []),
    )

    with pytest.raises(RestError, match="compile failed") as excinfo:
        terminus.find("node.example.com", {})
    assert excinfo.value.status_code == 500


def test_transport_errors_raise() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    terminus = rest_catalog_terminus(CONFIG, "production", client_factory=_factory(refuse, []))

    with pytest.raises(RestError, match="connection refused"):
        terminus.find("node.example.com", {})


def test_invalid_json_raises() -> None:
    terminus = rest_catalog_terminus(
        CONFIG,
        "production",
        client_factory=_factory(lambda _request: httpx.Response(200, text="<html>"), []),
    )

    with pytest.raises(RestError, match="Invalid catalog document"):
        terminus.find("node.example.com", {})


def test_save_report_puts_json() -> None:
    seen: list[httpx.Request] = []
    terminus = rest_report_terminus(
        CONFIG,
        "production",
        client_factory=_factory(lambda _request: httpx.Response(200, json={}), seen),
    )
    report = Report("apply", host="node.example.com", environment="production")
    report.finalize_report()

    terminus.save("node.example.com", report)

    request = seen[0]
    assert request.method == "PUT"
    assert request.url.path == "/production/report/node.example.com"
    body = json.loads(request.content)
    assert body["host"] == "node.example.com"
    assert body["status"] == "unchanged"


def test_save_failure_raises() -> None:
    terminus = rest_report_terminus(
        CONFIG,
        "production",
        client_factory=_factory(lambda _request: httpx.Response(403, text="Forbidden"), []),
    )
    report = Report("apply", host="node.example.com")

    with pytest.raises(RestError, match="403"):
        terminus.save("node.example.com", report)


def test_path_escapes_keys() -> None:
    terminus = rest_catalog_terminus(CONFIG, "dev env")

    assert terminus.path_for("a/b") == "/dev%20env/catalog/a%2Fb"


def test_catalog_save_round_trip_payload() -> None:
    seen: list[httpx.Request] = []
    terminus = rest_catalog_terminus(
        CONFIG,
        "production",
        client_factory=_factory(lambda _request: httpx.Response(204), seen),
    )

    terminus.save("node.example.com", make_raw_catalog())

    body = json.loads(seen[0].content)
    assert body["document_type"] == "Catalog"
    assert body["data"]["classes"] == ["settings", "ntp"]
