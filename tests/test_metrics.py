"""Tests for the CloudWatch metrics client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from src.services.metrics import MetricsClient


class TestMetricsRecording:
    """Verify that record_success / record_failure buffer the right data."""

    def _make_client(self, *, enabled: bool = False) -> MetricsClient:
        with patch.dict("os.environ", {"METRICS_ENABLED": str(enabled).lower()}):
            return MetricsClient()

    def test_record_success_appends_two_data_points(self):
        client = self._make_client()
        client.record_success("GET /list-clinics", latency_ms=123.4)
        # Should buffer RequestCount + Latency
        assert len(client._buffer) == 2
        names = {m["MetricName"] for m in client._buffer}
        assert names == {"Upstream/RequestCount", "Upstream/Latency"}

    def test_record_failure_without_latency(self):
        client = self._make_client()
        client.record_failure("POST /", status="unknown")
        # RequestCount + ErrorCount, no latency since default 0
        assert len(client._buffer) == 2
        names = {m["MetricName"] for m in client._buffer}
        assert names == {"Upstream/RequestCount", "Upstream/ErrorCount"}

    def test_record_failure_with_latency_appends_three_data_points(self):
        client = self._make_client()
        client.record_failure("GET /list-returns", status="500", latency_ms=500.0)
        assert len(client._buffer) == 3

    def test_success_dimensions(self):
        client = self._make_client()
        client.record_success("GET /list-specialties", latency_ms=50.0)
        count_metric = next(
            m for m in client._buffer
            if m["MetricName"] == "Upstream/RequestCount"
        )
        dim_map = {d["Name"]: d["Value"] for d in count_metric["Dimensions"]}
        assert dim_map == {"Endpoint": "GET /list-specialties", "Outcome": "success"}

    def test_failure_dimensions_include_upstream_status(self):
        client = self._make_client()
        client.record_failure("GET /patient-details", status="404", latency_ms=12.0)
        error_metric = next(
            m for m in client._buffer
            if m["MetricName"] == "Upstream/ErrorCount"
        )
        dim_map = {d["Name"]: d["Value"] for d in error_metric["Dimensions"]}
        assert dim_map["UpstreamStatus"] == "404"


class TestMetricsFlush:
    """Verify flush behaviour with and without CloudWatch enabled."""

    def test_flush_when_disabled_does_not_call_boto3(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "false"}):
            client = MetricsClient()
        client.record_success("GET /list-clinics", latency_ms=100.0)
        assert client.flush() == 0

    def test_flush_clears_buffer(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "false"}):
            client = MetricsClient()
        client.record_success("GET /list-clinics", latency_ms=100.0)
        assert len(client._buffer) == 2
        client.flush()
        assert len(client._buffer) == 0

    def test_flush_when_enabled_calls_put_metric_data(self):
        with (
            patch.dict("os.environ", {"METRICS_ENABLED": "true"}),
            patch.object(MetricsClient, "_start_flush_thread"),
        ):
            client = MetricsClient()

        mock_cw = MagicMock()
        client._cw_client = mock_cw  # inject mock

        client.record_success("GET /list-clinics", latency_ms=100.0)
        sent = client.flush()

        assert sent == 2
        mock_cw.put_metric_data.assert_called_once()
        call_args = mock_cw.put_metric_data.call_args
        assert call_args[1]["Namespace"] == "EcuroMCP"
        assert len(call_args[1]["MetricData"]) == 2

    def test_flush_empty_buffer_returns_zero(self):
        with (
            patch.dict("os.environ", {"METRICS_ENABLED": "true"}),
            patch.object(MetricsClient, "_start_flush_thread"),
        ):
            client = MetricsClient()
        assert client.flush() == 0


@pytest.mark.anyio
class TestUpstreamCallsAreRecorded:
    async def test_client_records_failure_status(self, upstream, monkeypatch):
        from src.errors import EcuroAPIError
        from src.services import ecuro_client

        recorder = MagicMock()
        monkeypatch.setattr(ecuro_client, "metrics", recorder)
        upstream.reply(404, json={"error": "missing"})

        with pytest.raises(EcuroAPIError):
            await upstream.client.get(
                "/logo/3f2b8c1e-5d4a-4b6f-9e7d-1a2b3c4d5e6f",
            )

        endpoint, status, _latency = recorder.record_failure.call_args[0]
        assert endpoint == "GET /logo/{id}"
        assert status == "404"
