"""Fixtures compartidas para los tests del motor de predicción."""

import random
from datetime import timezone
from typing import List

import pytest

from prediction_service.domain.events import PredictionEvent
from prediction_service.models.trend_forecaster import TrendForecaster
from prediction_service.monitor.topic_monitor import TopicMonitor

# 2023-11-14T22:13:20Z
NOW = 1_700_000_000


class FixedRandom(random.Random):
    """RNG que siempre devuelve el mismo valor (0.5 → ruido cero)."""

    def __init__(self, value: float = 0.5):
        super().__init__(0)
        self._value = value

    def random(self) -> float:
        return self._value


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def fixed_rng() -> FixedRandom:
    return FixedRandom(0.5)


@pytest.fixture
def events() -> List[PredictionEvent]:
    return []


@pytest.fixture
def make_monitor(events, fixed_rng):
    """Factory de TopicMonitor determinista (reloj fijo, sin ruido, UTC)."""

    def _make(topic: str = "plant/temp", **kwargs) -> TopicMonitor:
        kwargs.setdefault("emit", events.append)
        kwargs.setdefault("forecaster", TrendForecaster(rng=fixed_rng))
        kwargs.setdefault("clock", lambda: NOW)
        kwargs.setdefault("display_tz", timezone.utc)
        return TopicMonitor(topic, **kwargs)

    return _make


def live_message(value, timestamp) -> dict:
    """Evento tal como lo entrega el transporte en vivo."""
    return {"success": True, "message": {"message": str(value), "timestamp": timestamp}}
