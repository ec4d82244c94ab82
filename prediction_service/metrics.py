"""Métricas Prometheus del motor de predicción."""

from __future__ import annotations

from prometheus_client import Counter, Gauge

SAMPLES_PROCESSED = Counter(
    "prediction_samples_processed_total",
    "Live samples processed by topic monitors",
    ["result"],  # accepted, rejected, malformed
)

UNKNOWN_TOPIC_SAMPLES = Counter(
    "prediction_unknown_topic_samples_total",
    "Samples routed to a topic with no subscribed monitor",
)

DISPATCH_EVENTS = Counter(
    "prediction_dispatch_events_total",
    "Prediction events handed to the persistence sink",
    ["result"],  # sent, dropped, failed
)

ACTIVE_MONITORS = Gauge(
    "prediction_active_monitors",
    "Currently subscribed topic monitors",
)
