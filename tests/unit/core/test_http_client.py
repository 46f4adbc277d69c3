"""
Тесты HttpClient: конвейер запроса, retry, кэш и de-duplication.
"""

import asyncio
import json

import pytest

from http_pipeline.core.config import BusinessRule, CacheConfig, ClientConfig
from http_pipeline.core.exceptions import (
    BusinessError,
    ClientError,
    HttpError,
    NetworkError,
    TimeoutError,
)
from http_pipeline.core.http_client import HttpClient, create_client, create_default_client
from http_pipeline.core.logging import LoggingConfig, get_correlation_id, set_correlation_id
from http_pipeline.core.models import RequestDescriptor, ResponseEnvelope
from http_pipeline.core.storage import MemoryStorage
from http_pipeline.core.transport import HttpxTransport
from http_pipeline.plugins import HeadersPlugin

BASE_URL = "https://api.example.com"


async def settle(rounds: int = 10):
    for _ in range(rounds):
        await asyncio.sleep(0)


class TestRequest:

    @pytest.mark.asyncio
    async def test_get_builds_url_from_base_and_params(self, client, fake_transport):
        response = await client.get("/users", params={"page": 1, "active": True})

        assert response.status_code == 200
        assert response.data == {"ok": True}
        sent = fake_transport.calls[0]
        assert sent.url == "https://api.example.com/users?page=1&active=true"
        assert sent.method == "GET"
        assert sent.header("Content-Type") == "application/json"
        assert sent.timeout == 10.0

    @pytest.mark.asyncio
    async def test_absolute_url_ignores_base(self, client, fake_transport):
        await client.get("https://other.example.com/ping")
        assert fake_transport.calls[0].url == "https://other.example.com/ping"

    @pytest.mark.parametrize("verb,method", [
        ("post", "POST"), ("put", "PUT"), ("patch", "PATCH"),
    ])
    @pytest.mark.asyncio
    async def test_body_verbs(self, client, fake_transport, verb, method):
        await getattr(client, verb)("/users/1", data={"name": "alice"})

        sent = fake_transport.calls[0]
        assert sent.method == method
        assert sent.data == {"name": "alice"}

    @pytest.mark.parametrize("verb,method", [
        ("delete", "DELETE"), ("head", "HEAD"), ("options", "OPTIONS"),
    ])
    @pytest.mark.asyncio
    async def test_bodyless_verbs(self, client, fake_transport, verb, method):
        await getattr(client, verb)("/users/1")
        assert fake_transport.calls[0].method == method

    @pytest.mark.asyncio
    async def test_call_options_override_defaults(self, client, fake_transport):
        await client.get("/users", headers={"content-type": "text/plain"}, timeout=2)

        sent = fake_transport.calls[0]
        assert dict(sent.headers) == {"content-type": "text/plain"}
        assert sent.timeout == 2

    @pytest.mark.asyncio
    async def test_unknown_options_pass_through_in_extra(self, client, fake_transport):
        await client.get("/users", firstIpv4=True)
        assert fake_transport.calls[0].extra["firstIpv4"] is True

    @pytest.mark.asyncio
    async def test_descriptor_argument_with_overrides(self, client, fake_transport):
        descriptor = RequestDescriptor(url="/users", method="POST", data={"a": 1})

        await client.request(descriptor, method="PUT")

        sent = fake_transport.calls[0]
        assert sent.method == "PUT"
        assert sent.data == {"a": 1}

    @pytest.mark.asyncio
    async def test_caller_descriptor_not_mutated(self, client):
        descriptor = RequestDescriptor(url="/users")
        client.interceptors.request.use(lambda r: r.with_headers({"X-Id": "1"}))

        await client.request(descriptor)

        assert descriptor.headers is None
        assert descriptor.url == "/users"


class TestErrors:

    @pytest.mark.asyncio
    async def test_http_error(self, client, fake_transport):
        fake_transport.add(404, {"error": "not found"})

        with pytest.raises(HttpError) as exc_info:
            await client.get("/users/42")

        error = exc_info.value
        assert error.status_code == 404
        assert error.response.data == {"error": "not found"}
        assert error.request.url == "https://api.example.com/users/42"

    @pytest.mark.asyncio
    async def test_network_error(self, client, fake_transport):
        fake_transport.fail("connection refused", code="ECONNREFUSED")

        with pytest.raises(NetworkError) as exc_info:
            await client.get("/users")

        error = exc_info.value
        assert error.code == "ECONNREFUSED"
        assert error.status_code is None
        assert error.response.status_code == 0
        assert error.response.err_msg == "connection refused"

    @pytest.mark.asyncio
    async def test_timeout_error(self, client, fake_transport):
        fake_transport.fail("timed out", code=None, timed_out=True)

        with pytest.raises(TimeoutError) as exc_info:
            await client.get("/users", timeout=3)

        assert exc_info.value.timeout == 3

    @pytest.mark.asyncio
    async def test_os_error_from_transport_is_network_error(self):
        class BrokenTransport:
            async def send(self, descriptor):
                raise ConnectionRefusedError(111, "Connection refused")

        client = HttpClient(ClientConfig(base_url=BASE_URL), transport=BrokenTransport())

        with pytest.raises(NetworkError) as exc_info:
            await client.get("/users")

        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)

    @pytest.mark.asyncio
    async def test_foreign_transport_exception_is_wrapped(self):
        class BrokenTransport:
            async def send(self, descriptor):
                raise RuntimeError("driver crashed")

        client = HttpClient(ClientConfig(base_url=BASE_URL), transport=BrokenTransport())
        seen = []
        client.interceptors.response.use(None, lambda error: seen.append(error))

        with pytest.raises(ClientError) as exc_info:
            await client.get("/users")

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "driver crashed" in exc_info.value.message
        assert seen == [exc_info.value]

    @pytest.mark.asyncio
    async def test_business_error(self, make_client, fake_transport):
        client = make_client(ClientConfig(base_url=BASE_URL, business_rule=BusinessRule()))
        fake_transport.add(200, {"code": 10002, "message": "Wrong password"})

        with pytest.raises(BusinessError) as exc_info:
            await client.post("/login", data={"user": "a"})

        assert exc_info.value.business_code == 10002
        assert exc_info.value.message == "Wrong password"
        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_business_rule_off_by_default(self, client, fake_transport):
        fake_transport.add(200, {"code": 10002, "message": "Wrong password"})

        response = await client.post("/login")
        assert response.data["code"] == 10002


class TestInterceptors:

    @pytest.mark.asyncio
    async def test_request_interceptors_in_order(self, client, fake_transport):
        client.interceptors.request.use(lambda r: r.with_headers({"X-Order": "first"}))

        async def second(request):
            return request.with_headers({"X-Order": request.header("X-Order") + ",second"})

        client.interceptors.request.use(second)

        await client.get("/users")
        assert fake_transport.calls[0].header("X-Order") == "first,second"

    @pytest.mark.asyncio
    async def test_ejected_interceptor_skipped(self, client, fake_transport):
        slot = client.interceptors.request.use(lambda r: r.with_headers({"X-Skip": "1"}))
        client.interceptors.request.eject(slot)

        await client.get("/users")
        assert fake_transport.calls[0].header("X-Skip") is None

    @pytest.mark.asyncio
    async def test_response_interceptor_transforms(self, client):
        client.interceptors.response.use(lambda r: r.evolve(data=r.data["ok"]))

        response = await client.get("/users")
        assert response.data is True

    @pytest.mark.asyncio
    async def test_foreign_exception_in_request_interceptor_is_wrapped(self, client, fake_transport):
        def broken(request):
            raise ValueError("bad header")

        client.interceptors.request.use(broken)

        with pytest.raises(ClientError) as exc_info:
            await client.get("/users")

        assert type(exc_info.value) is ClientError
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert "bad header" in exc_info.value.message
        assert fake_transport.call_count == 0

    @pytest.mark.asyncio
    async def test_client_error_in_interceptor_propagates_unchanged(self, client):
        error = HttpError(418)

        def reject(request):
            raise error

        client.interceptors.request.use(reject)

        with pytest.raises(HttpError) as exc_info:
            await client.get("/users")

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_error_handler_recovers(self, client, fake_transport):
        fake_transport.add(500, {"error": "boom"})
        fallback = ResponseEnvelope(data="fallback", status_code=200)
        client.interceptors.response.use(None, lambda error: fallback)

        assert await client.get("/users") is fallback

    @pytest.mark.asyncio
    async def test_error_handler_returning_none_passes_error(self, client, fake_transport):
        fake_transport.add(500)
        seen = []
        client.interceptors.response.use(None, lambda error: seen.append(error.status_code))

        with pytest.raises(HttpError):
            await client.get("/users")

        assert seen == [500]

    @pytest.mark.asyncio
    async def test_error_handler_can_replace_error(self, client, fake_transport):
        fake_transport.add(500)
        replacement = NetworkError("replaced")

        def replace(error):
            raise replacement

        client.interceptors.response.use(None, replace)

        with pytest.raises(NetworkError) as exc_info:
            await client.get("/users")

        assert exc_info.value is replacement


class TestRequestWithRetry:

    @pytest.mark.asyncio
    async def test_retries_until_success(self, client, fake_transport, fake_clock):
        fake_transport.add(503).add(503).add(200, {"users": []})

        response = await client.get_with_retry("/users", retries=2, retry_delay=0.1)

        assert response.data == {"users": []}
        assert fake_transport.call_count == 3
        assert fake_clock.sleeps == pytest.approx([0.1, 0.2])

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_last_error(self, client, fake_transport, fake_clock):
        fake_transport.add(503).add(502).add(500)

        with pytest.raises(HttpError) as exc_info:
            await client.post_with_retry("/orders", data={"id": 1}, retries=2, retry_delay=0.1)

        assert exc_info.value.status_code == 500
        assert fake_transport.call_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_not_retried(self, client, fake_transport):
        fake_transport.add(404)

        with pytest.raises(HttpError):
            await client.get_with_retry("/users", retries=3, retry_delay=0.1)

        assert fake_transport.call_count == 1

    @pytest.mark.asyncio
    async def test_retry_condition(self, client, fake_transport, fake_clock):
        fake_transport.add(429).add(200)

        response = await client.get_with_retry(
            "/users", retries=1, retry_delay=0.5,
            retry_condition=lambda error: error.status_code == 429,
        )

        assert response.status_code == 200
        assert fake_clock.sleeps == [0.5]

    @pytest.mark.asyncio
    async def test_max_retry_delay(self, client, fake_transport, fake_clock):
        fake_transport.add(500).add(500).add(500).add(200)

        await client.get_with_retry("/users", retries=3, retry_delay=1.0, max_retry_delay=1.5)
        assert fake_clock.sleeps == [1.0, 1.5, 1.5]

    @pytest.mark.asyncio
    async def test_config_retry_policy_used_by_default(self, make_client, fake_transport, fake_clock):
        client = make_client(ClientConfig.create(base_url=BASE_URL, retries=1, retry_delay=0.2))
        fake_transport.fail().add(200)

        await client.request_with_retry("/users")

        assert fake_transport.call_count == 2
        assert fake_clock.sleeps == [0.2]

    @pytest.mark.asyncio
    async def test_request_interceptors_run_once_per_call(self, client, fake_transport):
        calls = []
        client.interceptors.request.use(lambda r: calls.append(1) or r)
        fake_transport.add(503).add(200)

        await client.get_with_retry("/users", retries=1, retry_delay=0.1)

        assert len(calls) == 1
        assert fake_transport.call_count == 2

    @pytest.mark.asyncio
    async def test_response_interceptors_run_once_after_retries(self, client, fake_transport):
        calls = []
        client.interceptors.response.use(lambda r: calls.append(r.status_code) or r)
        fake_transport.add(503).add(200)

        await client.get_with_retry("/users", retries=1, retry_delay=0.1)
        assert calls == [200]


class TestCache:

    @pytest.mark.asyncio
    async def test_cache_hit_returns_same_envelope(self, client, fake_transport):
        first = await client.get_with_retry("/users", cache=True, cache_ttl=5)
        second = await client.get_with_retry("/users", cache=True, cache_ttl=5)

        assert fake_transport.call_count == 1
        assert second is first
        assert client.stats.snapshot()["cache_hits"] == 1

    @pytest.mark.asyncio
    async def test_cache_entry_expires(self, client, fake_transport, fake_clock):
        await client.get_with_retry("/users", cache=True, cache_ttl=5)
        fake_clock.advance(5.001)
        await client.get_with_retry("/users", cache=True, cache_ttl=5)

        assert fake_transport.call_count == 2

    @pytest.mark.asyncio
    async def test_cache_disabled_by_default(self, client, fake_transport):
        await client.get_with_retry("/users")
        await client.get_with_retry("/users")
        assert fake_transport.call_count == 2

    @pytest.mark.asyncio
    async def test_cache_enabled_in_config(self, make_client, fake_transport):
        client = make_client(ClientConfig(base_url=BASE_URL, cache=CacheConfig(enabled=True, ttl=10)))

        await client.get_with_retry("/users")
        await client.get_with_retry("/users")
        assert fake_transport.call_count == 1

    @pytest.mark.asyncio
    async def test_only_get_is_cached(self, client, fake_transport):
        await client.post_with_retry("/users", data={"a": 1}, cache=True)
        await client.post_with_retry("/users", data={"a": 1}, cache=True)
        assert fake_transport.call_count == 2

    @pytest.mark.asyncio
    async def test_different_params_are_different_entries(self, client, fake_transport):
        await client.get_with_retry("/users", params={"page": 1}, cache=True)
        await client.get_with_retry("/users", params={"page": 2}, cache=True)
        assert fake_transport.call_count == 2

    @pytest.mark.asyncio
    async def test_failure_not_cached(self, client, fake_transport):
        fake_transport.add(500)

        with pytest.raises(HttpError):
            await client.get_with_retry("/users", cache=True)

        response = await client.get_with_retry("/users", cache=True)
        assert response.data == {"ok": True}
        assert fake_transport.call_count == 2

    @pytest.mark.asyncio
    async def test_recovered_response_not_cached(self, client, fake_transport):
        fake_transport.add(500)
        client.interceptors.response.use(
            None, lambda error: ResponseEnvelope(data="fallback", status_code=200)
        )

        assert (await client.get_with_retry("/users", cache=True)).data == "fallback"
        assert (await client.get_with_retry("/users", cache=True)).data == {"ok": True}
        assert fake_transport.call_count == 2

    @pytest.mark.asyncio
    async def test_plain_request_bypasses_cache(self, client, fake_transport):
        await client.get_with_retry("/users", cache=True)
        await client.get("/users")
        assert fake_transport.call_count == 2

    @pytest.mark.asyncio
    async def test_clear_cache(self, client):
        await client.get_with_retry("/users", cache=True)
        await client.get_with_retry("/posts", cache=True)

        assert client.clear_cache("/users") == 1
        assert client.clear_cache() == 1
        assert len(client.cache) == 0


class TestDeduplication:

    @pytest.mark.asyncio
    async def test_concurrent_identical_requests_share_one_call(self, client, fake_transport):
        fake_transport.hold()
        tasks = [asyncio.ensure_future(client.get_with_retry("/users")) for _ in range(3)]
        await settle()

        assert fake_transport.call_count == 1
        assert client.pending_requests() == [client.fingerprint("/users")]

        fake_transport.release()
        results = await asyncio.gather(*tasks)

        assert all(result is results[0] for result in results)
        assert client.pending_requests() == []

    @pytest.mark.asyncio
    async def test_concurrent_failure_shared(self, client, fake_transport):
        fake_transport.hold()
        fake_transport.add(404)
        tasks = [asyncio.ensure_future(client.get_with_retry("/users")) for _ in range(2)]
        await settle()
        fake_transport.release()

        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert fake_transport.call_count == 1
        assert isinstance(results[0], HttpError)
        assert results[1] is results[0]

    @pytest.mark.asyncio
    async def test_cancel_request_prevents_caching(self, client, fake_transport):
        fake_transport.hold()
        task = asyncio.ensure_future(client.get_with_retry("/users", cache=True))
        await settle()

        key = client.fingerprint("/users")
        client.cancel_request(key)
        assert client.pending_requests() == []

        fake_transport.release()
        response = await task

        assert response.data == {"ok": True}
        assert key not in client.cache

    @pytest.mark.asyncio
    async def test_cancel_all_requests(self, client, fake_transport):
        fake_transport.hold()
        tasks = [
            asyncio.ensure_future(client.get_with_retry(url)) for url in ("/a", "/b")
        ]
        await settle()
        assert len(client.pending_requests()) == 2

        client.cancel_all_requests()
        assert client.pending_requests() == []

        fake_transport.release()
        await asyncio.gather(*tasks)


class TestFingerprint:

    def test_fingerprint_uses_merged_url_and_sorted_params(self, client):
        key = client.fingerprint("/users", params={"b": 2, "a": 1})
        assert key == 'GET:https://api.example.com/users?b=2&a=1:{}:{"a":1,"b":2}'

    def test_fingerprint_includes_body(self, client):
        key = client.fingerprint("/users", method="post", data={"name": "alice"})
        assert key == 'POST:https://api.example.com/users:{"name":"alice"}:{}'


class TestStatsAndCorrelation:

    @pytest.mark.asyncio
    async def test_stats_record_success_and_failure(self, client, fake_transport):
        fake_transport.add(200).add(500)

        await client.get("/a")
        with pytest.raises(HttpError):
            await client.get("/b")

        snapshot = client.stats.snapshot()
        assert snapshot["total"] == 2
        assert snapshot["success"] == 1
        assert snapshot["error"] == 1

    @pytest.mark.asyncio
    async def test_stats_count_retries(self, client, fake_transport):
        fake_transport.add(503).add(200)
        await client.get_with_retry("/users", retries=1, retry_delay=0.1)
        assert client.stats.snapshot()["retries"] == 1

    @pytest.mark.asyncio
    async def test_stats_saved_to_storage(self, fake_transport, fake_clock):
        storage = MemoryStorage()
        client = HttpClient(ClientConfig(base_url=BASE_URL), transport=fake_transport,
                            clock=fake_clock, storage=storage)

        await client.get("/users")
        assert storage.get("http_pipeline:stats")["total"] == 1

    @pytest.mark.asyncio
    async def test_correlation_id_set_for_request(self, client):
        seen = []
        client.interceptors.request.use(lambda r: seen.append(get_correlation_id()) or r)

        await client.get("/users")

        assert seen[0] is not None
        assert len(seen[0]) == 16
        assert get_correlation_id() is None

    @pytest.mark.asyncio
    async def test_existing_correlation_id_kept(self, client):
        seen = []
        client.interceptors.request.use(lambda r: seen.append(get_correlation_id()) or r)
        set_correlation_id("req-abc")

        await client.get_with_retry("/users")

        assert seen == ["req-abc"]
        assert get_correlation_id() == "req-abc"


class TestLogging:

    @pytest.mark.asyncio
    async def test_no_logger_without_config(self, client):
        assert client.logger is None

    @pytest.mark.asyncio
    async def test_request_lifecycle_logged(self, make_client, fake_transport, logging_config_with_file):
        client = make_client(ClientConfig(base_url=BASE_URL, logging=logging_config_with_file))
        fake_transport.add(503).add(200)

        await client.get_with_retry("/users", retries=1, retry_delay=0.1)
        await client.close()

        with open(logging_config_with_file.file_path) as f:
            records = [json.loads(line) for line in f if line.strip()]

        messages = [record["message"] for record in records]
        assert (
            messages.index("Request started")
            < messages.index("Retrying request")
            < messages.index("Request completed")
        )
        completed = records[messages.index("Request completed")]
        assert completed["status_code"] == 200
        assert completed["attempts"] == 2
        assert completed["url"] == "https://api.example.com/users"
        assert records[messages.index("Request started")]["correlation_id"] == completed["correlation_id"]

    @pytest.mark.asyncio
    async def test_failure_logged(self, make_client, fake_transport, logging_config_with_file):
        client = make_client(ClientConfig(base_url=BASE_URL, logging=logging_config_with_file))
        fake_transport.add(404)

        with pytest.raises(HttpError):
            await client.get("/missing")
        await client.close()

        with open(logging_config_with_file.file_path) as f:
            records = [json.loads(line) for line in f if line.strip()]

        failed = [record for record in records if record["message"] == "Request failed"]
        assert failed[0]["level"] == "ERROR"
        assert failed[0]["error_type"] == "HttpError"
        assert failed[0]["status_code"] == 404

    @pytest.mark.asyncio
    async def test_slow_request_logged_as_warning(self, make_client, fake_transport, tmp_path):
        logging_config = LoggingConfig.create(
            format="json",
            enable_console=False,
            enable_file=True,
            file_path=str(tmp_path / "slow.log"),
            slow_request_threshold=0.25,
        )
        client = make_client(ClientConfig(base_url=BASE_URL, logging=logging_config))
        fake_transport.add(200).add(503).add(200)

        await client.get_with_retry("/fast")
        await client.get_with_retry("/slow", retries=1, retry_delay=0.3)
        await client.close()

        with open(logging_config.file_path) as f:
            records = [json.loads(line) for line in f if line.strip()]

        completed = [r for r in records if r["message"] in ("Request completed", "Slow request")]
        assert [(r["message"], r["level"], r["url"]) for r in completed] == [
            ("Request completed", "INFO", "https://api.example.com/fast"),
            ("Slow request", "WARNING", "https://api.example.com/slow"),
        ]
        assert completed[1]["duration"] == 0.3

    @pytest.mark.asyncio
    async def test_cache_hit_logged_with_fingerprint(self, make_client, logging_config_with_file):
        client = make_client(ClientConfig(base_url=BASE_URL, logging=logging_config_with_file))

        await client.get_with_retry("/users", cache=True)
        await client.get_with_retry("/users", cache=True)
        await client.close()

        with open(logging_config_with_file.file_path) as f:
            records = [json.loads(line) for line in f if line.strip()]

        hit = next(r for r in records if r["message"] == "Cache hit")
        assert hit["from_cache"] is True
        assert hit["fingerprint"] == client.fingerprint("/users", method="GET")


class TestPlugins:

    @pytest.mark.asyncio
    async def test_plugins_installed_by_priority(self, fake_transport, fake_clock):
        headers = HeadersPlugin({"X-Trace": "1"})
        client = HttpClient(ClientConfig(base_url=BASE_URL), transport=fake_transport,
                            clock=fake_clock, plugins=[headers])

        await client.get("/users")

        assert client.plugins == [headers]
        assert fake_transport.calls[0].header("X-Trace") == "1"

    @pytest.mark.asyncio
    async def test_remove_plugin(self, client, fake_transport):
        plugin = HeadersPlugin({"X-Trace": "1"})
        client.add_plugin(plugin)
        client.remove_plugin(plugin)

        await client.get("/users")

        assert client.plugins == []
        assert fake_transport.calls[0].header("X-Trace") is None


class TestFactories:

    def test_create_client(self):
        client = create_client(base_url=BASE_URL, timeout=5)
        assert client.config.base_url == BASE_URL
        assert client.config.timeout == 5
        assert client.plugins == []

    @pytest.mark.asyncio
    async def test_default_client_adds_token_and_static_headers(self, fake_transport, fake_clock):
        storage = MemoryStorage({"token": "abc"})
        client = create_default_client(
            storage,
            base_url=BASE_URL,
            transport=fake_transport,
            clock=fake_clock,
            static_headers={"App-Version": "1.0.0"},
        )

        await client.get("/profile")

        sent = fake_transport.calls[0]
        assert sent.header("Authorization") == "Bearer abc"
        assert sent.header("App-Version") == "1.0.0"

    @pytest.mark.asyncio
    async def test_default_client_business_rule_and_401(self, fake_transport, fake_clock):
        storage = MemoryStorage({"token": "abc"})
        client = create_default_client(storage, base_url=BASE_URL, transport=fake_transport, clock=fake_clock)
        fake_transport.add(200, {"code": 10002, "message": "Wrong password"}).add(401)

        with pytest.raises(BusinessError):
            await client.post("/login")
        with pytest.raises(HttpError):
            await client.get("/profile")

        assert storage.get("token") is None

    @pytest.mark.asyncio
    async def test_default_client_without_token(self, fake_transport, fake_clock):
        client = create_default_client(base_url=BASE_URL, transport=fake_transport, clock=fake_clock)
        await client.get("/public")
        assert fake_transport.calls[0].header("Authorization") is None


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_async_context_manager_closes_owned_transport(self):
        async with HttpClient(ClientConfig(base_url=BASE_URL)) as client:
            transport = client._transport
            assert isinstance(transport, HttpxTransport)
            transport._get_client(True)

        assert transport._clients == {}

    @pytest.mark.asyncio
    async def test_external_transport_not_closed(self, fake_transport):
        closed = []
        fake_transport.aclose = lambda: closed.append(1)

        async with HttpClient(ClientConfig(), transport=fake_transport):
            pass

        assert closed == []
