"""Document-store adapter for the JSON HTTP gateway in front of a network."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Mapping, Optional

import aiohttp

from torrentrepo import logger
from torrentrepo.__version__ import __version__
from torrentrepo.codec.contract_id import generate_entropy
from torrentrepo.config import NetworkConfig, RepoConfig
from torrentrepo.rate_limits import (
    STORE_MIN_INTERVAL_SECONDS,
    STORE_WAIT_LOG_THRESHOLD_SECONDS,
    enforce_store_min_interval,
)
from torrentrepo.store.errors import QueryError, StoreConnectionError, StoreError, SubmissionError
from torrentrepo.store.protocols import DocumentStore
from torrentrepo.store.resilience import (
    expect_dict,
    is_transport_exception,
    optional_list_of_dicts,
    run_with_retries,
)
from torrentrepo.store.types import Credentials, QueryOptions

DEFAULT_USER_AGENT = f"torrentrepo/{__version__}"


def build_auth_header(credentials: Credentials) -> str:
    key = (credentials.private_key_wif or "").strip()
    if not key:
        raise ValueError("A WIF private key is required for store writes.")
    return f"WIF {key}"


class GatewayStoreAdapter(DocumentStore):
    """DocumentStore backed by a network's HTTP gateway."""

    def __init__(
        self,
        network: NetworkConfig,
        timeout: int = 15,
        max_retries: int = 3,
        max_concurrency: int = 3,
        min_interval_seconds: float = STORE_MIN_INTERVAL_SECONDS,
    ):
        if not network.url:
            raise ValueError(f"Network '{network.name}' has no gateway url configured.")

        self.network = network
        self.timeout = timeout
        self.max_retries = max(1, int(max_retries))
        self.base_url = network.url.rstrip("/")
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._min_interval_seconds = max(0.0, float(min_interval_seconds))
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: RepoConfig, network_name: Optional[str] = None) -> "GatewayStoreAdapter":
        return cls(
            config.resolve_network(network_name),
            timeout=config.store.timeout,
            max_retries=config.store.max_retries,
            max_concurrency=config.store.max_concurrency,
            min_interval_seconds=config.store.min_interval_seconds,
        )

    async def connect(self) -> None:
        try:
            await self._request("GET", "/status")
        except Exception as exc:
            raise StoreConnectionError(
                f"Could not connect to {self.network.name} gateway at {self.base_url}: {exc}",
                status=_status_of(exc),
            ) from exc

    async def query(
        self,
        contract_id: str,
        collection_id: str,
        options: QueryOptions,
    ) -> list[dict]:
        path = f"/contracts/{contract_id}/documents/{collection_id}/query"
        try:
            data = await self._request("POST", path, options.to_payload())
            return optional_list_of_dicts(expect_dict(data, "query response"), "documents", "query response")
        except Exception as exc:
            raise _wrap(QueryError, f"Query on '{collection_id}' failed", exc) from exc

    async def create(
        self,
        contract_id: str,
        collection_id: str,
        owner_id: str,
        data: Mapping[str, Any],
        credentials: Credentials,
    ) -> str:
        path = f"/contracts/{contract_id}/documents/{collection_id}"
        body = {"ownerId": owner_id, "data": dict(data), "entropyHex": generate_entropy().hex()}
        try:
            payload = expect_dict(await self._request("POST", path, body, credentials), "create response")
            document_id = payload.get("documentId")
            if not isinstance(document_id, str) or not document_id:
                raise ValueError("create response is missing documentId")
            return document_id
        except Exception as exc:
            raise _wrap(SubmissionError, f"Creating '{collection_id}' document failed", exc) from exc

    async def fetch_contract(self, contract_id: str) -> dict | None:
        try:
            data = await self._request("GET", f"/contracts/{contract_id}", allow_not_found=True)
            if data is None:
                return None
            return expect_dict(data, "contract response")
        except Exception as exc:
            raise _wrap(QueryError, f"Fetching contract {contract_id} failed", exc) from exc

    async def register_contract(
        self,
        definition: Mapping[str, Any],
        owner_id: str,
        credentials: Credentials,
    ) -> dict:
        body = {"ownerId": owner_id, "definition": dict(definition)}
        try:
            return expect_dict(await self._request("POST", "/contracts", body, credentials), "register response")
        except Exception as exc:
            raise _wrap(SubmissionError, "Contract registration failed", exc) from exc

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        credentials: Optional[Credentials] = None,
        *,
        allow_not_found: bool = False,
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"Authorization": build_auth_header(credentials)} if credentials is not None else None
        log = logger.get_logger()
        log.store_request(method, url, payload)
        request_start = time.time()

        async def _attempt() -> tuple[int, Any]:
            session = await self._ensure_session()
            await self._enforce_interval()
            async with session.request(method, url, json=payload, headers=headers) as response:
                if allow_not_found and response.status == 404:
                    return response.status, None
                if response.status >= 400:
                    text = await response.text()
                    raise aiohttp.ClientResponseError(
                        request_info=response.request_info,
                        history=response.history,
                        status=response.status,
                        message=text,
                        headers=response.headers,
                    )
                return response.status, await response.json(content_type=None)

        def _on_retry(attempt: int, max_attempts: int, delay: int, _exc: Exception) -> None:
            log.store_retry(self.network.name.upper(), attempt, max_attempts, delay)

        async with self._semaphore:
            try:
                status, data = await run_with_retries(_attempt, max_attempts=self.max_retries, on_retry=_on_retry)
            except Exception as exc:
                if is_transport_exception(exc):
                    log.store_failed(self.network.name.upper(), self.max_retries)
                raise

        log.store_response(status, data, (time.time() - request_start) * 1000)
        return data

    async def _enforce_interval(self) -> None:
        wait = await enforce_store_min_interval(self.base_url, min_interval_seconds=self._min_interval_seconds)
        log = logger.get_logger()
        log.store_wait_debug(self.base_url, wait)
        if wait > STORE_WAIT_LOG_THRESHOLD_SECONDS:
            log.store_wait(self.base_url, wait)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                self._session = aiohttp.ClientSession(
                    headers={"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json"},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                )
            return self._session

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()


def _status_of(exc: BaseException) -> int | None:
    return exc.status if isinstance(exc, aiohttp.ClientResponseError) else None


def _wrap(error_type: type[StoreError], context: str, exc: Exception) -> StoreError:
    """Transport failures surface as StoreConnectionError; everything else as error_type."""
    if is_transport_exception(exc):
        return StoreConnectionError(f"{context}: gateway unreachable ({exc})")
    if isinstance(exc, aiohttp.ClientResponseError):
        return error_type(f"{context}: HTTP {exc.status} {exc.message}", status=exc.status)
    return error_type(f"{context}: {exc}")
