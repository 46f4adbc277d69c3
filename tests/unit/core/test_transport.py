"""
Tests for HttpxTransport using respx mocks.
"""

import datetime
import json

import httpx
import pytest
import pytest_asyncio
import respx

from http_pipeline.core.models import RequestDescriptor
from http_pipeline.core.transport import HttpxTransport, RawResponse, Transport, TransportFailure

URL = "https://api.example.com/users"


def descriptor(**kwargs):
    kwargs.setdefault("url", URL)
    kwargs.setdefault("method", "GET")
    kwargs.setdefault("data_type", "json")
    kwargs.setdefault("response_type", "text")
    return RequestDescriptor(**kwargs)


@pytest_asyncio.fixture
async def transport():
    transport = HttpxTransport()
    yield transport
    await transport.aclose()


def test_httpx_transport_satisfies_protocol():
    assert isinstance(HttpxTransport(), Transport)


class TestDecoding:

    @respx.mock
    @pytest.mark.asyncio
    async def test_json_body(self, transport):
        respx.get(URL).mock(return_value=httpx.Response(200, json={"users": ["alice"]}))

        raw = await transport.send(descriptor())

        assert isinstance(raw, RawResponse)
        assert raw.status == 200
        assert raw.body == {"users": ["alice"]}
        assert raw.headers["content-type"] == "application/json"

    @respx.mock
    @pytest.mark.asyncio
    async def test_invalid_json_falls_back_to_text(self, transport):
        respx.get(URL).mock(return_value=httpx.Response(200, text="not json"))

        raw = await transport.send(descriptor())
        assert raw.body == "not json"

    @respx.mock
    @pytest.mark.asyncio
    async def test_empty_body(self, transport):
        respx.get(URL).mock(return_value=httpx.Response(204))

        raw = await transport.send(descriptor())
        assert raw.status == 204
        assert raw.body == ""

    @respx.mock
    @pytest.mark.asyncio
    async def test_text_data_type(self, transport):
        respx.get(URL).mock(return_value=httpx.Response(200, json={"a": 1}))

        raw = await transport.send(descriptor(data_type="text"))
        assert json.loads(raw.body) == {"a": 1}

    @respx.mock
    @pytest.mark.asyncio
    async def test_base64_data_type(self, transport):
        respx.get(URL).mock(return_value=httpx.Response(200, content=b"\x00\x01"))

        raw = await transport.send(descriptor(data_type="base64"))
        assert raw.body == "AAE="

    @respx.mock
    @pytest.mark.asyncio
    async def test_arraybuffer_response_type(self, transport):
        respx.get(URL).mock(return_value=httpx.Response(200, content=b"\x89PNG"))

        raw = await transport.send(descriptor(response_type="arraybuffer"))
        assert raw.body == b"\x89PNG"

    @respx.mock
    @pytest.mark.asyncio
    async def test_error_status_is_not_an_exception(self, transport):
        respx.get(URL).mock(return_value=httpx.Response(503, json={"error": "down"}))

        raw = await transport.send(descriptor())
        assert raw.status == 503
        assert raw.body == {"error": "down"}


class TestRequestBuilding:

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_data_sent_as_query(self, transport):
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))

        await transport.send(descriptor(data={"page": 2, "skip": None}))

        request = route.calls.last.request
        assert request.url.params["page"] == "2"
        assert "skip" not in request.url.params
        assert request.content == b""

    @respx.mock
    @pytest.mark.asyncio
    async def test_post_mapping_sent_as_json(self, transport):
        route = respx.post(URL).mock(return_value=httpx.Response(201, json={"id": 1}))

        raw = await transport.send(descriptor(method="POST", data={"name": "alice"}))

        assert raw.status == 201
        assert json.loads(route.calls.last.request.content) == {"name": "alice"}

    @respx.mock
    @pytest.mark.asyncio
    async def test_post_string_sent_as_is(self, transport):
        route = respx.post(URL).mock(return_value=httpx.Response(200))

        await transport.send(descriptor(method="POST", data="a=1&b=2"))
        assert route.calls.last.request.content == b"a=1&b=2"

    @respx.mock
    @pytest.mark.asyncio
    async def test_headers_forwarded(self, transport):
        route = respx.get(URL).mock(return_value=httpx.Response(200))

        await transport.send(descriptor(headers={"Authorization": "Bearer abc"}))
        assert route.calls.last.request.headers["Authorization"] == "Bearer abc"


class TestFailures:

    @respx.mock
    @pytest.mark.asyncio
    async def test_timeout(self, transport):
        respx.get(URL).mock(side_effect=httpx.TimeoutException("Read timeout"))

        with pytest.raises(TransportFailure) as exc_info:
            await transport.send(descriptor(timeout=0.5))

        assert exc_info.value.timed_out is True
        assert exc_info.value.code == "ETIMEDOUT"
        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)

    @respx.mock
    @pytest.mark.asyncio
    async def test_connect_error(self, transport):
        respx.get(URL).mock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(TransportFailure) as exc_info:
            await transport.send(descriptor())

        assert exc_info.value.timed_out is False
        assert exc_info.value.code == "ConnectError"
        assert "Connection refused" in exc_info.value.message

    @respx.mock
    @pytest.mark.asyncio
    async def test_unserializable_body(self, transport):
        route = respx.post(URL).mock(return_value=httpx.Response(201))

        with pytest.raises(TransportFailure) as exc_info:
            await transport.send(descriptor(method="POST", data={"at": datetime.datetime(2024, 1, 1)}))

        assert exc_info.value.code == "EENCODE"
        assert isinstance(exc_info.value.__cause__, TypeError)
        assert not route.called

    @respx.mock
    @pytest.mark.asyncio
    async def test_invalid_url(self, transport):
        with pytest.raises(TransportFailure) as exc_info:
            await transport.send(descriptor(url="https://api.example.com/us\x00ers"))

        assert exc_info.value.code == "InvalidURL"
        assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)

    @respx.mock
    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", ["page=2", [("page", 2)]])
    async def test_get_data_must_be_mapping(self, transport, data):
        route = respx.get(URL).mock(return_value=httpx.Response(200))

        with pytest.raises(TransportFailure) as exc_info:
            await transport.send(descriptor(data=data))

        assert exc_info.value.code == "EENCODE"
        assert not route.called


class TestClients:

    @pytest.mark.asyncio
    async def test_one_client_per_verify_flag(self):
        transport = HttpxTransport()
        secure = transport._get_client(True)
        insecure = transport._get_client(False)

        assert secure is transport._get_client(True)
        assert secure is not insecure

        await transport.aclose()
        assert transport._clients == {}

    @respx.mock
    @pytest.mark.asyncio
    async def test_external_client_is_used_and_not_closed(self):
        respx.get(URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        async with httpx.AsyncClient() as external:
            transport = HttpxTransport(client=external)
            raw = await transport.send(descriptor(ssl_verify=False))
            await transport.aclose()

            assert raw.body == {"ok": True}
            assert not external.is_closed
