"""CloudWatch custom metrics for upstream Ecuro API calls.

Every call made by ``EcuroClient`` is recorded here: one count data point,
one latency data point and, on failure, one error data point dimensioned by
the upstream status (``"unknown"`` when the request never got an answer).

* Data points are collected in a thread-safe in-memory buffer.
* A daemon thread flushes the buffer to CloudWatch every
  ``FLUSH_INTERVAL_SECONDS`` when ``METRICS_ENABLED=true``.
* Otherwise metrics are only logged at DEBUG level.

Usage
-----
>>> from src.services.metrics import metrics
>>> metrics.record_success("GET /list-clinics", latency_ms=84.2)
>>> metrics.record_failure("POST /", status="404", latency_ms=120.0)
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "EcuroMCP"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # CloudWatch API limit per PutMetricData call


class MetricsClient:
    """Batched CloudWatch publisher for upstream call metrics."""

    def __init__(self) -> None:
        self._enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None

        if self._enabled:
            self._start_flush_thread()

    def _get_cw_client(self):
        """Create the boto3 CloudWatch client on first use."""
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    # ── Public API ────────────────────────────────────────────────────

    def record_success(self, endpoint: str, latency_ms: float) -> None:
        """Record an upstream call that returned a 2xx answer."""
        now = datetime.now(UTC)
        self._append(_count_point(now, endpoint, "success"))
        self._append(_latency_point(now, endpoint, latency_ms))
        logger.debug("Metric: %s success latency=%.1fms", endpoint, latency_ms)

    def record_failure(self, endpoint: str, status: str, latency_ms: float = 0) -> None:
        """Record an upstream call that failed with *status* (or ``"unknown"``)."""
        now = datetime.now(UTC)
        self._append(_count_point(now, endpoint, "failure"))
        self._append(
            {
                "MetricName": "Upstream/ErrorCount",
                "Dimensions": [
                    {"Name": "Endpoint", "Value": endpoint},
                    {"Name": "UpstreamStatus", "Value": status},
                ],
                "Timestamp": now,
                "Value": 1,
                "Unit": "Count",
            }
        )
        if latency_ms > 0:
            self._append(_latency_point(now, endpoint, latency_ms))
        logger.debug(
            "Metric: %s failure status=%s latency=%.1fms", endpoint, status, latency_ms,
        )

    def flush(self) -> int:
        """Send buffered metrics to CloudWatch.  Returns count sent."""
        with self._lock:
            if not self._buffer:
                return 0
            batch = self._buffer[:]
            self._buffer.clear()

        if not self._enabled:
            logger.debug("Metrics flush skipped (not enabled): %d items", len(batch))
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for i in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[i : i + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    # ── Internal ──────────────────────────────────────────────────────

    def _append(self, metric_data: dict[str, Any]) -> None:
        with self._lock:
            self._buffer.append(metric_data)

    def _start_flush_thread(self) -> None:
        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        t = threading.Thread(target=_loop, daemon=True, name="metrics-flush")
        t.start()
        atexit.register(self.flush)
        logger.info(
            "Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS,
        )


def _count_point(now: datetime, endpoint: str, outcome: str) -> dict[str, Any]:
    return {
        "MetricName": "Upstream/RequestCount",
        "Dimensions": [
            {"Name": "Endpoint", "Value": endpoint},
            {"Name": "Outcome", "Value": outcome},
        ],
        "Timestamp": now,
        "Value": 1,
        "Unit": "Count",
    }


def _latency_point(now: datetime, endpoint: str, latency_ms: float) -> dict[str, Any]:
    return {
        "MetricName": "Upstream/Latency",
        "Dimensions": [{"Name": "Endpoint", "Value": endpoint}],
        "Timestamp": now,
        "Value": latency_ms,
        "Unit": "Milliseconds",
    }


# ── Module-level singleton ──────────────────────────────────────────
metrics = MetricsClient()
