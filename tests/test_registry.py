"""Tests de MonitorRegistry."""

import threading
from datetime import timezone

import pytest

from conftest import NOW, live_message
from prediction_service.domain.point import HistoricalBatch, SavedPrediction
from prediction_service.monitor.registry import MonitorHandle, MonitorRegistry


@pytest.fixture
def registry(events) -> MonitorRegistry:
    return MonitorRegistry(emit=events.append, clock=lambda: NOW, display_tz=timezone.utc)


class TestSubscription:

    def test_subscribe_returns_handle(self, registry):
        handle = registry.subscribe("a")
        assert isinstance(handle, MonitorHandle)
        assert handle.topic == "a"
        assert "a" in registry
        assert len(registry) == 1

    def test_resubscribe_returns_same_handle(self, registry):
        first = registry.subscribe("a", threshold=10)
        second = registry.subscribe("a", threshold=50)
        assert first == second
        assert registry.get("a").threshold == 10.0

    def test_unsubscribe(self, registry):
        handle = registry.subscribe("a")
        assert registry.unsubscribe(handle) is True
        assert "a" not in registry
        assert registry.unsubscribe(handle) is False

    def test_stale_handle_does_not_remove_new_monitor(self, registry):
        old = registry.subscribe("a")
        registry.unsubscribe(old)
        registry.subscribe("a")
        assert registry.unsubscribe(old) is False
        assert "a" in registry

    def test_unsubscribe_by_topic(self, registry):
        registry.subscribe("a")
        assert registry.unsubscribe("a") is True


class TestRouting:

    def test_unknown_topic_is_dropped(self, registry, events):
        assert registry.route_sample("ghost", live_message(1, 100)) is False
        assert "ghost" not in registry
        assert events == []

    def test_routes_to_subscribed_monitor(self, registry, events):
        registry.subscribe("a")
        assert registry.route_sample("a", live_message(1, 100)) is True
        assert events[0].topic == "a"

    def test_monitors_are_independent(self, registry):
        registry.subscribe("a")
        registry.subscribe("b")
        registry.route_sample("a", live_message(1, 100))
        registry.route_sample("a", live_message(2, 101))

        assert len(registry.get("a").live_series()) == 2
        assert registry.get("b").live_series() == []

    def test_no_routing_after_unsubscribe(self, registry):
        handle = registry.subscribe("a")
        registry.unsubscribe(handle)
        assert registry.route_sample("a", live_message(1, 100)) is False

    def test_concurrent_routing_across_topics(self, registry):
        topics = [f"t{i}" for i in range(4)]
        for topic in topics:
            registry.subscribe(topic)

        def feed(topic):
            for t in range(1, 201):
                registry.route_sample(topic, live_message(t, t))

        threads = [threading.Thread(target=feed, args=(topic,)) for topic in topics]
        for th in threads:
            th.start()
        for th in threads:
            th.join()

        for topic in topics:
            assert registry.get(topic).stats.accepted == 200


class TestBulkOperations:

    def test_load_history_and_restore(self, registry):
        registry.subscribe("a")
        assert registry.restore("a", SavedPrediction(threshold=55)) is True
        assert registry.load_history("a", HistoricalBatch(history=[{"time": 1, "value": 2}])) is True
        assert registry.load_history("ghost", HistoricalBatch()) is False
        assert registry.get("a").threshold == 55.0

    def test_set_thresholds(self, registry):
        registry.subscribe("a")
        registry.subscribe("b")

        results = registry.set_thresholds({"a": 0, "b": 50, "missing": 10})

        assert results == {"a": True, "b": True, "missing": False}
        assert registry.get("a").threshold == 99.0
        assert registry.get("b").threshold == 50.0

    @pytest.mark.parametrize("value", [0, 0.0, "0", "0.0", " 0 ", "", None])
    def test_zero_or_blank_threshold_uses_default(self, registry, value):
        """Cero o vacío, como número o como texto, vuelven al umbral por defecto."""
        registry.subscribe("a", threshold=10)

        assert registry.set_thresholds({"a": value}) == {"a": True}
        assert registry.get("a").threshold == 99.0

    def test_snapshot(self, registry):
        registry.subscribe("a", label="Sensor A")
        registry.subscribe("b")
        registry.route_sample("a", live_message(1, 100))

        snapshot = registry.snapshot(now=NOW)

        assert set(snapshot) == {"a", "b"}
        assert snapshot["a"].label == "Sensor A"
        assert len(snapshot["a"].live_series) == 1
        assert snapshot["b"].live_series == []
        assert registry.topics() == ["a", "b"]
