"""Dentist directory kept in Supabase.

The ``dentist_specialities_expanded`` view has one row per dentist and
specialty (``dentist_id``, ``firstName``, ``clinic_id``,
``speciality_name``, ...).  Lookups are plain equality filters on those
columns.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from src.config import SUPABASE_KEY, SUPABASE_URL
from src.errors import SupabaseError
from src.services.metrics import metrics

logger = logging.getLogger(__name__)

DENTIST_TABLE = "dentist_specialities_expanded"
MISSING_CONFIGURATION = (
    "Variáveis SUPABASE_URL e SUPABASE_KEY são obrigatórias. "
    "Configure-as no .env ou nas variáveis de ambiente."
)


class DentistDirectory:
    """Read-only queries against the dentist view.

    The Supabase client is created lazily so the server starts without
    Supabase credentials; the dentist tools then fail with a clear message.
    """

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        *,
        client: AsyncClient | None = None,
    ):
        self._url = SUPABASE_URL if url is None else url
        self._key = SUPABASE_KEY if key is None else key
        self._client = client

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            if not self._url or not self._key:
                raise SupabaseError(MISSING_CONFIGURATION)
            self._client = await acreate_client(self._url, self._key)
        return self._client

    async def query(self, **filters: str) -> list[dict[str, Any]]:
        """Rows of the dentist view matching every ``column=value`` filter."""
        client = await self._get_client()
        query = client.table(DENTIST_TABLE).select("*")
        for column, value in filters.items():
            query = query.eq(column, value)

        endpoint = f"SELECT {DENTIST_TABLE}"
        t0 = time.perf_counter()
        try:
            response = await query.execute()
        except APIError as exc:
            metrics.record_failure(endpoint, str(exc.code or "unknown"), (time.perf_counter() - t0) * 1000)
            logger.warning("Supabase query on %s failed: %s", DENTIST_TABLE, exc.message)
            raise SupabaseError(f"Supabase Error: {exc.message}") from exc
        except httpx.HTTPError as exc:
            metrics.record_failure(endpoint, "unknown")
            logger.warning("Supabase unreachable: %s", exc)
            raise SupabaseError(f"Supabase Error: {exc}") from exc

        metrics.record_success(endpoint, (time.perf_counter() - t0) * 1000)
        return list(response.data or [])


# ── Singleton ────────────────────────────────────────────────────────
_directory: DentistDirectory | None = None
_directory_lock = threading.Lock()


def get_dentist_directory() -> DentistDirectory:
    """Return the shared DentistDirectory, creating it on first use."""
    global _directory
    if _directory is None:
        with _directory_lock:
            if _directory is None:
                _directory = DentistDirectory()
    return _directory
