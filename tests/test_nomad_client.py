"""
Tests for the live Nomad source.

Most cases use httpx.MockTransport for exact control over status and
body; one starts the fake health server in a thread like a real agent.
"""

import threading
import time
from http.server import HTTPServer

import httpx
import pytest

from nomad_exporter.collector.nomad_client import DEFAULT_ADDRESS, NomadHealthSource
from nomad_exporter.exceptions import ScrapeError, ScrapeErrorKind
from nomad_exporter.mock.fake_nomad_server import _HealthHandler


def _source(handler, **kwargs) -> NomadHealthSource:
    kwargs.setdefault("address", "http://nomad.test:4646/v1/agent/health")
    return NomadHealthSource(transport=httpx.MockTransport(handler), **kwargs)


def _start_test_server() -> HTTPServer:
    server = HTTPServer(("127.0.0.1", 0), _HealthHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    time.sleep(0.2)  # let it bind
    return server


def test_fetch_decodes_payload():
    source = _source(lambda request: httpx.Response(200, json={
        "uptime_sec": 120.5,
        "status_code_count": {"200": 10},
    }))
    health = source.fetch()
    assert health.uptime_sec == 120.5
    assert health.status_code_count == {"200": 10.0}
    source.close()


def test_region_sent_as_query_param():
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json={})

    source = _source(handler, region="eu-west")
    source.fetch()
    assert seen[0].params["region"] == "eu-west"
    assert seen[0].path == "/v1/agent/health"
    source.close()


def test_no_region_no_query_param():
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json={})

    source = _source(handler)
    source.fetch()
    assert "region" not in seen[0].params
    source.close()


def test_bad_status():
    source = _source(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(ScrapeError) as exc_info:
        source.fetch()
    assert exc_info.value.kind is ScrapeErrorKind.BAD_STATUS
    assert exc_info.value.status_code == 503
    assert "status 503" in str(exc_info.value)
    source.close()


def test_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    source = _source(handler)
    with pytest.raises(ScrapeError) as exc_info:
        source.fetch()
    assert exc_info.value.kind is ScrapeErrorKind.TRANSPORT
    source.close()


def test_malformed_json_is_decode_error():
    source = _source(lambda request: httpx.Response(200, text="{not json"))
    with pytest.raises(ScrapeError) as exc_info:
        source.fetch()
    assert exc_info.value.kind is ScrapeErrorKind.DECODE
    source.close()


def test_wrong_shape_is_decode_error():
    source = _source(lambda request: httpx.Response(200, json={"uptime_sec": "soon"}))
    with pytest.raises(ScrapeError) as exc_info:
        source.fetch()
    assert exc_info.value.kind is ScrapeErrorKind.DECODE
    source.close()


def test_empty_address_falls_back_to_default():
    source = NomadHealthSource(address="")
    assert source.address == DEFAULT_ADDRESS
    source.close()


def test_name_includes_address_and_region():
    source = NomadHealthSource(address="http://localhost:4646", region="global")
    assert "localhost:4646" in source.name()
    assert "global" in source.name()
    source.close()


def test_fetch_from_fake_server():
    server = _start_test_server()
    try:
        host, port = server.server_address
        source = NomadHealthSource(address=f"http://{host}:{port}/v1/agent/health")
        first = source.fetch()
        second = source.fetch()

        assert first.uptime_sec > 0
        assert second.uptime_sec > first.uptime_sec
        assert second.total_status_code_count["200"] >= first.total_status_code_count["200"]

        source.close()
    finally:
        server.shutdown()


def test_unreachable_agent_is_transport_error():
    server = _start_test_server()
    host, port = server.server_address
    server.shutdown()
    server.server_close()

    source = NomadHealthSource(address=f"http://{host}:{port}/", timeout_seconds=1.0)
    with pytest.raises(ScrapeError) as exc_info:
        source.fetch()
    assert exc_info.value.kind is ScrapeErrorKind.TRANSPORT
    source.close()
