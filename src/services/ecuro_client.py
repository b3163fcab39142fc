"""Async HTTP client for the Ecuro Light API.

Every request carries the static ``app-access-token`` header and a fixed
timeout.  There are no retries: a failed call surfaces immediately as an
``EcuroAPIError`` whose message follows the shape
``Ecuro API Error (<status|unknown>): <message>``.
"""

from __future__ import annotations

import base64
import logging
import re
import threading
import time
from typing import Any

import httpx

from src.config import ECURO_ACCESS_TOKEN, ECURO_API_BASE_URL, REQUEST_TIMEOUT_SECONDS
from src.errors import EcuroAPIError
from src.services.metrics import metrics

logger = logging.getLogger(__name__)

JSON_ACCEPT = "application/json"
TEXT_ACCEPT = "text/csv, text/plain, */*"
BINARY_ACCEPT = "image/*, */*"
DEFAULT_BINARY_MIME = "image/png"

_UUID_IN_PATH = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


def _compact(values: dict[str, Any] | None) -> dict[str, Any] | None:
    """Drop ``None`` entries so optional fields are simply not sent."""
    if values is None:
        return None
    return {key: value for key, value in values.items() if value is not None}


def _upstream_message(response: httpx.Response) -> str:
    """Best available message: ``error`` field, then ``message``, then status text."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for field in ("error", "message"):
            if data.get(field):
                return str(data[field])
    return f"Request failed with status code {response.status_code}"


class EcuroClient:
    """Thin wrapper around the Ecuro Light REST API.

    Holds no per-call state, so a single instance is shared by every
    session and every transport.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url or ECURO_API_BASE_URL
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "accept": JSON_ACCEPT,
                "Content-Type": "application/json",
                "app-access-token": token or ECURO_ACCESS_TOKEN,
            },
            timeout=timeout or REQUEST_TIMEOUT_SECONDS,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Internal helpers ─────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        accept: str = JSON_ACCEPT,
    ) -> httpx.Response:
        """Issue exactly one HTTP call and normalise any failure."""
        endpoint = f"{method} {_UUID_IN_PATH.sub('{id}', path)}"
        started = time.perf_counter()
        try:
            response = await self._client.request(
                method,
                path,
                params=_compact(params),
                json=_compact(json_body),
                headers={"accept": accept},
            )
        except httpx.HTTPError as exc:
            latency_ms = (time.perf_counter() - started) * 1000
            metrics.record_failure(endpoint, "unknown", latency_ms)
            detail = str(exc) or type(exc).__name__
            logger.warning("Ecuro API %s failed before a response: %s", endpoint, detail)
            raise EcuroAPIError(f"Ecuro API Error (unknown): {detail}") from exc

        latency_ms = (time.perf_counter() - started) * 1000
        if not response.is_success:
            metrics.record_failure(endpoint, str(response.status_code), latency_ms)
            message = _upstream_message(response)
            logger.warning(
                "Ecuro API %s returned %d: %s", endpoint, response.status_code, message,
            )
            raise EcuroAPIError(
                f"Ecuro API Error ({response.status_code}): {message}",
                status_code=response.status_code,
            )

        metrics.record_success(endpoint, latency_ms)
        return response

    @staticmethod
    def _payload(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    # ── Public API ───────────────────────────────────────────────────

    async def get(self, path: str, query: dict[str, Any] | None = None) -> Any:
        """GET *path* and return the parsed JSON payload."""
        return self._payload(await self._request("GET", path, params=query))

    async def post(self, path: str, body: dict[str, Any] | None = None) -> Any:
        """POST a JSON *body* to *path* and return the parsed payload."""
        return self._payload(await self._request("POST", path, json_body=body or {}))

    async def put(self, path: str, body: dict[str, Any] | None = None) -> Any:
        """PUT to *path*; the body is optional (e.g. mark-as-read endpoints)."""
        return self._payload(await self._request("PUT", path, json_body=body))

    async def get_text(self, path: str, query: dict[str, Any] | None = None) -> str:
        """GET *path* as raw text (CSV exports)."""
        response = await self._request("GET", path, params=query, accept=TEXT_ACCEPT)
        return response.text

    async def get_binary_as_data_uri(self, path: str) -> str:
        """GET binary content and return it as a ``data:<mime>;base64,...`` URI.

        The MIME type comes from the upstream ``Content-Type`` header
        (parameters stripped) and defaults to ``image/png``.
        """
        response = await self._request("GET", path, accept=BINARY_ACCEPT)
        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        mime = content_type or DEFAULT_BINARY_MIME
        encoded = base64.b64encode(response.content).decode("ascii")
        return f"data:{mime};base64,{encoded}"


# ── Module-level singleton (thread-safe) ────────────────────────────
_client: EcuroClient | None = None
_client_lock = threading.Lock()


def get_ecuro_client() -> EcuroClient:
    """Return the shared EcuroClient, creating it on first use."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = EcuroClient()
    return _client


async def close_ecuro_client() -> None:
    """Close the shared client (process shutdown)."""
    global _client
    with _client_lock:
        client, _client = _client, None
    if client is not None:
        await client.aclose()
