"""Tests del cliente del backend y del arranque de topics."""

from unittest.mock import MagicMock

import pytest
import requests

from prediction_service.clients.backend_client import BackendClient
from prediction_service.domain.point import HistoricalBatch, Point, SavedPrediction
from prediction_service.monitor.registry import MonitorRegistry
from prediction_service.runners.topic_stream_runner import bootstrap_topics, run_stream
from prediction_service.in_memory_broker import InMemorySampleBroker
from prediction_service.domain.point import TopicSample


NOW = 1_700_000_000  # 2023-11-14T22:13:20Z


def respond(get=None, post=None):
    """side_effect para session.request: un JSON por método HTTP."""

    def _request(method, url, **kwargs):
        response = MagicMock()
        response.json.return_value = get if method == "GET" else post
        return response

    return _request


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return BackendClient("http://backend:4000", session=session, clock=lambda: NOW)


API_HISTORY = {
    "success": True,
    "data": {
        "historyGraphData": [{"time": 1, "value": 2}],
        "predictionGraphData": [{"time": 3, "value": 4}],
        "predictions": [],
    },
}


class TestBackendClient:

    def test_fetch_history_builds_query(self, client, session):
        session.request.side_effect = respond(get=API_HISTORY)

        batch = client.fetch_history("plant/temp", "1D")

        method, url = session.request.call_args.args
        assert (method, url) == ("GET", "http://backend:4000/mqtt/prediction/plant%2Ftemp")
        assert session.request.call_args.kwargs["params"] == {"timeframe": "1D", "limit": 5000}
        assert batch.history == [{"time": 1, "value": 2}]
        assert batch.predictions == [{"time": 3, "value": 4}]
        assert session.request.call_count == 1

    def test_two_hours_uses_raw_range(self, client, session):
        session.request.side_effect = respond(
            get=API_HISTORY,
            post={
                "success": True,
                "messages": [
                    {"timestamp": "2023-11-14T22:13:00Z", "message": "21.5"},
                    {"timestamp": "2023-11-14T22:13:10Z", "message": "offline"},
                ],
            },
        )

        batch = client.fetch_history("plant/temp", "2H")

        post, get = session.request.call_args_list
        assert post.args == ("POST", "http://backend:4000/mqtt/realtime-data/custom-range")
        assert post.kwargs["json"] == {
            "topic": "plant/temp",
            "from": "2023-11-14T20:13:20.000Z",
            "to": "2023-11-14T22:13:20.000Z",
            "granularity": "seconds",
            "sortOrder": "asc",
            "limit": 10000,
            "aggregationMethod": "average",
        }
        assert get.kwargs["params"] == {"timeframe": "2h", "limit": 10000}
        assert batch.history == [Point(NOW - 20, 21.5)]
        # La base de predicciones sigue saliendo de la API
        assert batch.predictions == [{"time": 3, "value": 4}]

    def test_two_hours_falls_back_to_api_history(self, client, session):
        session.request.side_effect = respond(get=API_HISTORY, post={"success": True, "messages": []})

        batch = client.fetch_history("plant/temp", "2H")

        assert batch.history == [{"time": 1, "value": 2}]

    def test_raw_range_survives_api_failure(self, client, session):
        def _request(method, url, **kwargs):
            if method == "GET":
                raise requests.Timeout("slow")
            return respond(post={"success": True, "messages": [{"timestamp": 10, "message": 1}]})(
                method, url
            )

        session.request.side_effect = _request

        batch = client.fetch_history("a", "2H")

        assert batch.history == [Point(10, 1.0)]
        assert batch.predictions == []

    def test_fetch_saved_prediction(self, client, session):
        session.request.side_effect = respond(
            get={"success": True, "data": {"threshold": 70, "predictionHistory": []}}
        )
        saved = client.fetch_saved_prediction("a")
        assert saved.threshold == 70.0

    def test_network_error_returns_none(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")
        assert client.fetch_history("a", "1D") is None
        assert client.fetch_history("a", "2H") is None
        assert client.fetch_saved_prediction("a") is None


class TestBootstrap:

    def test_restores_then_loads_history(self):
        registry = MonitorRegistry()
        client = MagicMock()
        client.fetch_saved_prediction.return_value = SavedPrediction(threshold=40)
        client.fetch_history.return_value = HistoricalBatch(history=[{"time": 5, "value": 1}])

        bootstrap_topics(registry, client, ["a", "b"], "8H")

        assert registry.topics() == ["a", "b"]
        monitor = registry.get("a")
        assert monitor.threshold == 40.0
        assert monitor.retention_seconds == 28800
        assert monitor.live_series() == [Point(5, 1.0)]
        client.fetch_history.assert_any_call("b", "8H")

    def test_backend_unavailable_leaves_monitor_idle(self):
        registry = MonitorRegistry()
        client = MagicMock()
        client.fetch_saved_prediction.return_value = None
        client.fetch_history.return_value = None

        bootstrap_topics(registry, client, ["a"], "2H")

        assert registry.get("a").live_series() == []


class TestRunStream:

    def test_routes_broker_samples(self):
        registry = MonitorRegistry()
        registry.subscribe("a")
        broker = InMemorySampleBroker()
        broker.publish(TopicSample("a", {"success": True, "message": {"message": "1", "timestamp": 10}}))
        broker.publish(TopicSample("ghost", {"success": True, "message": {"message": "1", "timestamp": 10}}))
        broker.stop()

        run_stream(broker, registry)

        assert registry.get("a").live_series() == [Point(10, 1.0)]
