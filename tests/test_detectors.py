"""
Tests for the detector client, registry and concurrent aggregation.
"""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from antipattern_insights.core import (
    DEFAULT_DETECTOR_ENDPOINTS,
    AggregationError,
    DetectorApiConfig,
    DetectorFetchError,
)
from antipattern_insights.detectors import (
    AntiPatternClient,
    DetectorResult,
    DetectorSpec,
    build_detector_specs,
    fetch_detector_results,
)
from antipattern_insights.detectors.registry import labels
from antipattern_insights.insights import collect_insights


class TestAntiPatternClient:
    """Tests for AntiPatternClient."""

    def test_url_for(self, test_config):
        client = AntiPatternClient()
        assert client.base_url == "http://mock-analysis:8000/api/anti-patterns"
        assert client.url_for("cyclic") == "http://mock-analysis:8000/api/anti-patterns/cyclic"
        assert client.url_for("/cyclic") == client.url_for("cyclic")

    def test_base_url_override(self, test_config):
        client = AntiPatternClient(base_url="http://other:9000/api/")
        assert client.url_for("knot") == "http://other:9000/api/knot"

    def test_get_json(self, test_config, mock_session):
        client = AntiPatternClient()
        client._session = mock_session()
        assert client.get_json("bottleneck") == {"services": [{"service": "Service-A", "incoming_calls": 12}]}
        client._session.get.assert_called_once_with(
            "http://mock-analysis:8000/api/anti-patterns/bottleneck", timeout=2
        )

    def test_get_json_connection_error(self, test_config, mock_session):
        client = AntiPatternClient()
        client._session = mock_session(failing=("cyclic",))
        with pytest.raises(DetectorFetchError) as exc_info:
            client.get_json("cyclic", label="Cyclic Dependencies")
        assert exc_info.value.label == "Cyclic Dependencies"
        assert isinstance(exc_info.value.cause, requests.ConnectionError)

    def test_get_json_bad_status(self, test_config, mock_session):
        client = AntiPatternClient()
        client._session = mock_session(bodies={})
        with pytest.raises(DetectorFetchError) as exc_info:
            client.get_json("missing")
        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("body", [{}, [], ["not", "an", "object"]])
    def test_get_json_rejects_empty_or_non_object(self, test_config, mock_session, body):
        client = AntiPatternClient()
        client._session = mock_session(bodies={"knot": body})
        with pytest.raises(DetectorFetchError):
            client.get_json("knot")

    def test_get_json_invalid_json(self, test_config):
        response = MagicMock(ok=True, status_code=200)
        response.json.side_effect = ValueError("Expecting value")
        client = AntiPatternClient()
        client._session = MagicMock()
        client._session.get.return_value = response
        with pytest.raises(DetectorFetchError, match="invalid JSON"):
            client.get_json("knot")

    def test_fetch_endpoint_returns_none_on_failure(self, test_config, mock_session):
        client = AntiPatternClient()
        client._session = mock_session(failing=("cyclic",))
        assert client.fetch_endpoint("cyclic") is None
        assert client.fetch_endpoint("knot") is not None

    def test_health_check_healthy(self, test_config, aggregate_payload):
        client = AntiPatternClient()
        client._session = MagicMock()
        client._session.get.return_value = MagicMock(ok=True, status_code=200, **{"json.return_value": aggregate_payload})
        healthy, details = client.health_check()
        assert healthy
        assert details["error"] is None
        assert details["detectors_configured"] == len(test_config.detectors.endpoints)
        assert details["categories"] == sorted(aggregate_payload)
        assert client._session.get.call_args.args[0].endswith("/" + test_config.detectors.aggregate_endpoint)

    def test_health_check_unreachable(self, test_config):
        client = AntiPatternClient()
        client._session = MagicMock()
        client._session.get.side_effect = requests.ConnectionError("refused")
        healthy, details = client.health_check()
        assert not healthy
        assert details["error"] == "refused"
        assert details["categories"] == []
        assert details["latency_ms"] is not None

    def test_health_check_bad_status(self, test_config):
        client = AntiPatternClient()
        client._session = MagicMock()
        client._session.get.return_value = MagicMock(ok=False, status_code=503, reason="Service Unavailable")
        healthy, details = client.health_check()
        assert not healthy
        assert details["status_code"] == 503
        assert "Service Unavailable" in details["error"]

    def test_health_check_too_slow(self, test_config, aggregate_payload):
        client = AntiPatternClient()
        client._session = MagicMock()
        client._session.get.return_value = MagicMock(ok=True, status_code=200, **{"json.return_value": aggregate_payload})
        healthy, details = client.health_check(max_latency_ms=-1)
        assert not healthy
        assert "limit" in details["error"]

    def test_context_manager_closes_session(self, test_config):
        with AntiPatternClient() as client:
            client._session = MagicMock()
        client._session.close.assert_called_once()


class TestRegistry:
    """Tests for detector specs."""

    def test_default_registry(self, test_config):
        specs = build_detector_specs(AntiPatternClient())
        assert labels(specs) == list(DEFAULT_DETECTOR_ENDPOINTS)
        assert len(specs) == 12

    def test_spec_fetch_uses_client(self, test_config):
        client = MagicMock()
        client.fetch_endpoint.return_value = {"cycles": []}
        specs = build_detector_specs(client, test_config.detectors)
        assert specs[0].fetch() == {"cycles": []}
        client.fetch_endpoint.assert_called_once_with("cyclic", label="Cyclic Dependencies")

    def test_extract(self):
        spec = DetectorSpec(label="Knot Pattern", result_key="dense_clusters", fetch=lambda: None)
        assert spec.extract({"dense_clusters": [1]}) == [1]
        assert spec.extract({"other": [1]}) is None
        assert spec.extract(None) is None

    def test_result_empty(self):
        assert DetectorResult(label="x").empty
        assert not DetectorResult(label="x", payload=[{}]).empty


class TestFetchDetectorResults:
    """Tests for concurrent detector invocation."""

    def test_results_in_registry_order(self, fake_specs):
        results = fetch_detector_results(fake_specs)
        assert [r.label for r in results] == labels(fake_specs)
        assert all(r.ok for r in results)

    def test_failing_detector_isolated(self, make_spec):
        specs = [
            make_spec("Cyclic Dependencies", "cycles", error=RuntimeError("boom")),
            make_spec("Knot Pattern", "dense_clusters", {"dense_clusters": [{"service": "a"}]}),
        ]
        failed, ok = fetch_detector_results(specs)
        assert not failed.ok
        assert failed.payload is None
        assert "boom" in failed.error
        assert ok.ok and ok.payload == [{"service": "a"}]

    def test_no_response(self, make_spec):
        (result,) = fetch_detector_results([make_spec("Knot Pattern", "dense_clusters", None)])
        assert not result.ok
        assert result.empty

    def test_missing_result_key_is_empty_not_failed(self, make_spec):
        (result,) = fetch_detector_results([make_spec("Knot Pattern", "dense_clusters", {"other": [1]})])
        assert result.ok
        assert result.empty

    def test_empty_specs(self):
        assert fetch_detector_results([]) == []

    def test_fetches_run_concurrently(self):
        """All fetches are in flight at once."""
        barrier = threading.Barrier(3, timeout=5)

        def fetch():
            barrier.wait()
            return {"services": ["a"]}

        specs = [DetectorSpec(label=f"d{i}", result_key="services", fetch=fetch) for i in range(3)]
        results = fetch_detector_results(specs)
        assert all(r.ok for r in results)

    def test_join_failure_raises_aggregation_error(self, fake_specs):
        with patch(
            "antipattern_insights.detectors.aggregator.as_completed",
            side_effect=RuntimeError("executor broke"),
        ):
            with pytest.raises(AggregationError):
                fetch_detector_results(fake_specs)


@pytest.mark.integration
class TestOneDetectorDown:
    """One endpoint fails while the other eleven succeed."""

    def test_collection_excludes_only_failed_detector(self, test_config, mock_session, today):
        client = AntiPatternClient()
        client._session = mock_session(failing=("cyclic",))
        specs = build_detector_specs(client)

        result = collect_insights(specs, today=today, max_workers=4)

        names = {i.name for i in result.insights}
        assert "Cyclic Dependencies" not in names
        assert result.failed_detectors == ("Cyclic Dependencies",)
        expected = set(DEFAULT_DETECTOR_ENDPOINTS) - {"Cyclic Dependencies", "Eventual Consistency Issues"}
        assert names == expected
        assert len(result.insights) == 10

    def test_unaffected_entries_match_full_run(self, test_config, mock_session, today):
        client = AntiPatternClient()
        client._session = mock_session()
        full = collect_insights(build_detector_specs(client), today=today)

        client._session = mock_session(failing=("cyclic",))
        partial = collect_insights(build_detector_specs(client), today=today)

        assert list(partial.insights) == [i for i in full.insights if i.name != "Cyclic Dependencies"]


def test_default_config_max_workers():
    assert DetectorApiConfig().max_workers == 12
