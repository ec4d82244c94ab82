from __future__ import annotations

"""Runner de monitoreo en vivo por topic.

El motor solo depende de la interfaz `SampleBroker`: el adaptador de
transporte (Socket.IO, MQTT, ...) publica `TopicSample` en el broker y
este runner los entrega al `MonitorRegistry`.
"""

import logging
from typing import Iterable, Optional

from common.config import Settings, get_settings
from common.db import get_engine

from ..clients.backend_client import BackendClient
from ..dispatch.persistence_dispatcher import AsyncPredictionDispatcher
from ..dispatch.sinks import (
    HttpPredictionSink,
    NullPredictionSink,
    PredictionSink,
    SqlPredictionSink,
)
from ..domain.point import TopicSample
from ..monitor.registry import MonitorRegistry
from ..sample_broker import SampleBroker

logger = logging.getLogger(__name__)


def build_sink(settings: Settings) -> PredictionSink:
    kind = settings.prediction_sink
    if kind == "http":
        return HttpPredictionSink(
            settings.backend_url,
            timeout=settings.backend_timeout_seconds,
            internal_api_key=settings.internal_api_key,
        )
    if kind == "sql":
        return SqlPredictionSink(lambda: get_engine(settings))
    if kind == "none":
        return NullPredictionSink()
    raise ValueError(f"PREDICTION_SINK no soportado: {kind!r}")


def bootstrap_topics(
    registry: MonitorRegistry,
    client: Optional[BackendClient],
    topics: Iterable[str],
    timeframe: str,
) -> None:
    """Suscribe los topics y carga su estado inicial.

    Orden: predicción guardada (umbral) → histórico. Si el backend falla
    el monitor queda en IDLE y empieza directamente con muestras en vivo.
    """
    for topic in topics:
        registry.subscribe(topic, timeframe=timeframe)
        if client is None:
            continue

        saved = client.fetch_saved_prediction(topic)
        if saved is not None:
            registry.restore(topic, saved)

        batch = client.fetch_history(topic, timeframe)
        if batch is not None:
            registry.load_history(topic, batch)


def run_stream(broker: SampleBroker, registry: MonitorRegistry) -> None:
    """Consume el broker y enruta cada muestra a su monitor (bloqueante)."""

    logger.info("[STREAM] Iniciando runner de predicción topics=%s", registry.topics())

    def handler(sample: TopicSample) -> None:
        registry.route_sample(sample.topic, sample.raw)

    broker.subscribe(handler)


def main() -> None:
    """Punto de entrada CLI de ejemplo usando InMemorySampleBroker.

    Nota: asume que el adaptador de transporte comparte el broker en el
    mismo proceso. Para otros brokers solo cambia la construcción aquí.
    """

    from ..in_memory_broker import InMemorySampleBroker

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    settings = get_settings()
    dispatcher = AsyncPredictionDispatcher(
        build_sink(settings),
        max_queue_size=settings.prediction_queue_size,
        num_workers=settings.prediction_num_workers,
    )
    dispatcher.start()

    registry = MonitorRegistry(emit=dispatcher.dispatch)
    client = BackendClient(
        settings.backend_url,
        timeout=settings.backend_timeout_seconds,
        internal_api_key=settings.internal_api_key,
    )
    bootstrap_topics(registry, client, settings.monitor_topics, settings.monitor_timeframe)

    broker = InMemorySampleBroker()
    try:
        run_stream(broker, registry)
    except KeyboardInterrupt:
        logger.info("[STREAM] Interrumpido por el usuario")
    finally:
        broker.stop()
        dispatcher.stop(drain=True)


if __name__ == "__main__":
    main()
