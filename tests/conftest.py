"""
Pytest configuration and fixtures for http-pipeline-core tests.
"""

import asyncio
from collections import deque
from typing import Any, Dict, List, Optional

import pytest

from http_pipeline.core.config import ClientConfig
from http_pipeline.core.http_client import HttpClient
from http_pipeline.core.logging import clear_correlation_id
from http_pipeline.core.logging.config import LoggingConfig
from http_pipeline.core.models import RequestDescriptor
from http_pipeline.core.transport import RawResponse, TransportFailure

BASE_URL = "https://api.example.com"


class FakeClock:
    """Ручные часы: sleep() записывает задержку и сдвигает время."""

    def __init__(self, start: float = 1000.0):
        self._now = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now += seconds
        await asyncio.sleep(0)


class FakeTransport:
    """
    Транспорт по сценарию.

    Каждый send() записывает дескриптор в calls и берёт следующий
    элемент сценария (RawResponse или исключение). Пустой сценарий
    отдаёт default. hold() задерживает все ответы до release().
    """

    def __init__(self):
        self.calls: List[RequestDescriptor] = []
        self.default = RawResponse(status=200, headers={}, body={"ok": True})
        self._script: deque = deque()
        self._gate: Optional[asyncio.Event] = None

    def add(self, status: int = 200, body: Any = None, headers: Optional[Dict[str, str]] = None) -> "FakeTransport":
        self._script.append(RawResponse(status=status, headers=headers or {}, body=body))
        return self

    def fail(self, message: str = "connection refused", code: Any = "ECONNREFUSED",
             timed_out: bool = False) -> "FakeTransport":
        self._script.append(TransportFailure(message, code=code, timed_out=timed_out))
        return self

    def hold(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def send(self, descriptor: RequestDescriptor) -> RawResponse:
        self.calls.append(descriptor)
        if self._gate is not None:
            await self._gate.wait()
        item = self._script.popleft() if self._script else self.default
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture(autouse=True)
def _reset_correlation_id():
    clear_correlation_id()
    yield
    clear_correlation_id()


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return BASE_URL


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def client(base_url, fake_transport, fake_clock):
    """HttpClient на FakeTransport и FakeClock."""
    return HttpClient(ClientConfig(base_url=base_url), transport=fake_transport, clock=fake_clock)


@pytest.fixture
def make_client(fake_transport, fake_clock):
    """Фабрика клиентов с произвольным ClientConfig."""

    def _make(config: Optional[ClientConfig] = None, **kwargs) -> HttpClient:
        return HttpClient(
            config or ClientConfig(base_url=BASE_URL),
            transport=fake_transport,
            clock=fake_clock,
            **kwargs,
        )

    return _make


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig with file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "test.log"
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file)
    )
