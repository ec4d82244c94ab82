from __future__ import annotations

import logging
import queue
from typing import Callable

from .domain.point import TopicSample
from .sample_broker import SampleBroker

logger = logging.getLogger(__name__)


class InMemorySampleBroker(SampleBroker):
    """Implementación sencilla en memoria para el stream de muestras.

    - Uno o varios productores (adaptadores de transporte) publican.
    - Un único consumidor (el runner) entrega al registro.
    """

    def __init__(self, maxsize: int = 100_000) -> None:
        self._queue: "queue.Queue[TopicSample]" = queue.Queue(maxsize=maxsize)
        self._stopped: bool = False
        self.dropped: int = 0

    def publish(self, sample: TopicSample) -> None:  # type: ignore[override]
        """Encola la muestra; con la cola llena se descarta."""

        try:
            # No bloqueamos para no acoplar el transporte al ritmo del motor.
            self._queue.put(sample, block=False)
        except queue.Full:
            self.dropped += 1
            logger.warning("[BROKER] Cola llena, muestra descartada topic=%s", sample.topic)

    def subscribe(self, handler: Callable[[TopicSample], None]) -> None:  # type: ignore[override]
        """Bucle bloqueante que entrega muestras al handler.

        Sale cuando se llamó a `stop()` y la cola quedó vacía.
        """

        while True:
            try:
                sample = self._queue.get(timeout=0.5)
            except queue.Empty:
                if self._stopped:
                    return
                continue

            try:
                handler(sample)
            except Exception:
                logger.exception("[BROKER] Error procesando muestra topic=%s", sample.topic)
            finally:
                self._queue.task_done()

    def stop(self) -> None:
        """Señala que el consumidor debe salir al vaciar la cola."""

        self._stopped = True
