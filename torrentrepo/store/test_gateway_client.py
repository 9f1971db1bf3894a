from __future__ import annotations

import asyncio

import pytest
from aiohttp import RequestInfo
from multidict import CIMultiDict
from yarl import URL

from torrentrepo.config import NetworkConfig
from torrentrepo.store import gateway_client, resilience
from torrentrepo.store.errors import QueryError, StoreConnectionError, SubmissionError
from torrentrepo.store.types import Credentials, QueryOptions


class _FakeLogger:
    def __init__(self) -> None:
        self.requests: list[tuple[str, str, object]] = []
        self.retries: list[tuple[str, int, int, int]] = []
        self.failures: list[tuple[str, int]] = []
        self.waits: list[tuple[str, float]] = []

    def store_request(self, method: str, url: str, payload=None) -> None:
        self.requests.append((method, url, payload))

    def store_response(self, _status: int, _data: object, _elapsed_ms: float) -> None:
        return None

    def store_retry(self, server: str, attempt: int, max_attempts: int, delay: int) -> None:
        self.retries.append((server, attempt, max_attempts, delay))

    def store_failed(self, server: str, max_attempts: int) -> None:
        self.failures.append((server, max_attempts))

    def store_wait_debug(self, server: str, seconds: float) -> None:
        return None

    def store_wait(self, server: str, seconds: float) -> None:
        self.waits.append((server, seconds))


class _FakeResponse:
    def __init__(self, url: str, status: int, payload: object, headers: dict | None = None) -> None:
        self.status = status
        self._payload = payload
        self.headers = CIMultiDict(headers or {})
        self.history = ()
        self.request_info = RequestInfo(URL(url), "POST", CIMultiDict(), URL(url))

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type=None):
        return self._payload

    async def text(self) -> str:
        return str(self._payload)


class _FakeSession:
    """Replays scripted (status, payload) pairs or exceptions, one per request."""

    def __init__(self, script: list) -> None:
        self.script = list(script)
        self.calls: list[dict] = []
        self.closed = False

    def request(self, method: str, url: str, json=None, headers=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers})
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        status, payload, *rest = step
        return _FakeResponse(url, status, payload, rest[0] if rest else None)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_env(monkeypatch: pytest.MonkeyPatch):
    fake_log = _FakeLogger()
    sleeps: list[float] = []

    async def _no_wait(_base_url: str, min_interval_seconds: float = 0.0) -> float:
        return 0.0

    async def _fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    monkeypatch.setattr(gateway_client.logger, "get_logger", lambda: fake_log)
    monkeypatch.setattr(gateway_client, "enforce_store_min_interval", _no_wait)
    monkeypatch.setattr(resilience.asyncio, "sleep", _fake_sleep)
    return fake_log, sleeps


def _adapter(script: list, max_retries: int = 3) -> tuple[gateway_client.GatewayStoreAdapter, _FakeSession]:
    adapter = gateway_client.GatewayStoreAdapter(
        NetworkConfig(name="testnet", url="https://gw.example/"),
        max_retries=max_retries,
    )
    session = _FakeSession(script)
    adapter._session = session  # type: ignore[assignment]
    return adapter, session


CREDS = Credentials(identity_id="owner", private_key_wif="cVsecretkey")


@pytest.mark.asyncio
async def test_query_posts_options_payload_and_returns_documents(fake_env) -> None:
    fake_log, _ = fake_env
    adapter, session = _adapter([(200, {"documents": [{"$id": "a"}, {"$id": "b"}]})])
    options = QueryOptions(limit=12, order_by=(("imdbId", "asc"),), where=(("imdbId", "==", 133093),))

    records = await adapter.query("contract", "movie", options)

    assert records == [{"$id": "a"}, {"$id": "b"}]
    assert session.calls == [
        {
            "method": "POST",
            "url": "https://gw.example/contracts/contract/documents/movie/query",
            "json": {"limit": 12, "orderBy": [["imdbId", "asc"]], "where": [["imdbId", "==", 133093]]},
            "headers": None,
        }
    ]
    assert fake_log.requests[0][0] == "POST"


@pytest.mark.asyncio
async def test_query_retries_transient_statuses_then_succeeds(fake_env) -> None:
    fake_log, sleeps = fake_env
    adapter, session = _adapter(
        [(503, "busy"), (429, "slow down", {"Retry-After": "7"}), (200, {"documents": []})]
    )

    records = await adapter.query("contract", "tv", QueryOptions(limit=12))

    assert records == []
    assert len(session.calls) == 3
    assert sleeps == [2, 7]
    assert [r[1] for r in fake_log.retries] == [1, 2]


@pytest.mark.asyncio
async def test_query_client_errors_are_not_retried(fake_env) -> None:
    _, sleeps = fake_env
    adapter, session = _adapter([(400, "bad where clause")])

    with pytest.raises(QueryError) as exc_info:
        await adapter.query("contract", "book", QueryOptions(limit=12))

    assert exc_info.value.status == 400
    assert "HTTP 400" in str(exc_info.value)
    assert len(session.calls) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_query_transport_failure_surfaces_as_connection_error(fake_env) -> None:
    fake_log, sleeps = fake_env
    adapter, _ = _adapter([asyncio.TimeoutError(), asyncio.TimeoutError()], max_retries=2)

    with pytest.raises(StoreConnectionError) as exc_info:
        await adapter.query("contract", "movie", QueryOptions(limit=12))

    assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)
    assert sleeps == [2]
    assert fake_log.failures == [("TESTNET", 2)]


@pytest.mark.asyncio
async def test_query_rejects_malformed_payload(fake_env) -> None:
    adapter, _ = _adapter([(200, {"documents": "nope"})])

    with pytest.raises(QueryError, match="unexpected type 'str'"):
        await adapter.query("contract", "movie", QueryOptions(limit=12))


@pytest.mark.asyncio
async def test_create_sends_credentials_only_in_header(fake_env) -> None:
    fake_log, _ = fake_env
    adapter, session = _adapter([(200, {"documentId": "doc-9"})])

    document_id = await adapter.create("contract", "other", "owner", {"title": "x"}, CREDS)

    assert document_id == "doc-9"
    call = session.calls[0]
    assert call["url"] == "https://gw.example/contracts/contract/documents/other"
    assert call["headers"] == {"Authorization": "WIF cVsecretkey"}
    assert call["json"]["ownerId"] == "owner"
    assert call["json"]["data"] == {"title": "x"}
    assert len(call["json"]["entropyHex"]) == 64
    assert "cVsecretkey" not in repr(fake_log.requests)


@pytest.mark.asyncio
async def test_create_without_document_id_is_a_submission_error(fake_env) -> None:
    adapter, _ = _adapter([(200, {"ok": True})])

    with pytest.raises(SubmissionError, match="missing documentId"):
        await adapter.create("contract", "other", "owner", {}, CREDS)


@pytest.mark.asyncio
async def test_fetch_contract_maps_404_to_none(fake_env) -> None:
    adapter, _ = _adapter([(404, "not found"), (200, {"id": "contract"})])

    assert await adapter.fetch_contract("contract") is None
    assert await adapter.fetch_contract("contract") == {"id": "contract"}


@pytest.mark.asyncio
async def test_register_contract_wraps_rejections(fake_env) -> None:
    adapter, session = _adapter([(409, "already exists")])

    with pytest.raises(SubmissionError) as exc_info:
        await adapter.register_contract({"id": "c"}, "owner", CREDS)

    assert exc_info.value.status == 409
    assert session.calls[0]["json"] == {"ownerId": "owner", "definition": {"id": "c"}}


@pytest.mark.asyncio
async def test_connect_failure_is_connection_error(fake_env) -> None:
    adapter, _ = _adapter([(500, "down")], max_retries=1)

    with pytest.raises(StoreConnectionError, match="Could not connect to testnet gateway"):
        await adapter.connect()


@pytest.mark.asyncio
async def test_close_closes_session(fake_env) -> None:
    adapter, session = _adapter([])

    await adapter.close()

    assert session.closed is True
    assert adapter._session is None


def test_adapter_requires_gateway_url() -> None:
    with pytest.raises(ValueError, match="no gateway url"):
        gateway_client.GatewayStoreAdapter(NetworkConfig(name="mainnet", url=""))


def test_wait_logging_only_above_threshold(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_log = _FakeLogger()
    monkeypatch.setattr(gateway_client.logger, "get_logger", lambda: fake_log)
    adapter = gateway_client.GatewayStoreAdapter(NetworkConfig(name="testnet", url="https://gw.example"))

    async def _wait(seconds: float):
        async def _inner(_base_url: str, min_interval_seconds: float = 0.0) -> float:
            return seconds

        monkeypatch.setattr(gateway_client, "enforce_store_min_interval", _inner)
        await adapter._enforce_interval()

    asyncio.run(_wait(0.2))
    assert fake_log.waits == []
    asyncio.run(_wait(1.5))
    assert fake_log.waits == [("https://gw.example", 1.5)]
