"""Registro de monitores independientes, uno por topic suscrito.

Solo el mapa topic → monitor se protege con el lock del registro; nunca se
bloquean los buffers internos de un monitor desde aquí.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..config.prediction_config import DEFAULT_PREDICTION_CONFIG, PredictionConfig
from ..domain.events import TopicReadModel
from ..domain.point import HistoricalBatch, SavedPrediction
from ..metrics import ACTIVE_MONITORS, UNKNOWN_TOPIC_SAMPLES
from ..normalization.point_normalizer import finite_number
from .topic_monitor import EventEmitter, TopicMonitor

logger = logging.getLogger(__name__)

MonitorFactory = Callable[..., TopicMonitor]


def _is_unset_threshold(value: Any) -> bool:
    """Vacío o cero, venga como número o como texto ("", "0", "0.0")."""
    if isinstance(value, str):
        value = value.strip()
    return not value or finite_number(value) == 0


@dataclass(frozen=True)
class MonitorHandle:
    topic: str
    monitor_id: int


class MonitorRegistry:
    """Fan-in de muestras externas y fan-out de modelos de lectura por topic.

    Nunca crea monitores implícitamente: enrutar a un topic desconocido
    descarta la muestra.
    """

    def __init__(
        self,
        *,
        emit: Optional[EventEmitter] = None,
        cfg: PredictionConfig | None = None,
        clock: Callable[[], float] = time.time,
        display_tz: Optional[tzinfo] = None,
        monitor_factory: Optional[MonitorFactory] = None,
    ) -> None:
        self._cfg: PredictionConfig = cfg or DEFAULT_PREDICTION_CONFIG
        self._emit = emit
        self._clock = clock
        self._display_tz = display_tz
        self._factory: MonitorFactory = monitor_factory or TopicMonitor

        self._monitors: Dict[str, TopicMonitor] = {}
        self._handles: Dict[str, MonitorHandle] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._monitors)

    def __contains__(self, topic: str) -> bool:
        with self._lock:
            return topic in self._monitors

    def topics(self) -> List[str]:
        with self._lock:
            return list(self._monitors)

    def get(self, topic: str) -> Optional[TopicMonitor]:
        with self._lock:
            return self._monitors.get(topic)

    def subscribe(
        self,
        topic: str,
        *,
        threshold: Optional[float] = None,
        timeframe: Optional[str] = None,
        label: Optional[str] = None,
    ) -> MonitorHandle:
        """Crea el monitor del topic. Re-suscribir devuelve el handle existente."""
        with self._lock:
            existing = self._handles.get(topic)
            if existing is not None:
                return existing

            monitor = self._factory(
                topic,
                threshold=threshold,
                timeframe=timeframe,
                emit=self._emit,
                cfg=self._cfg,
                clock=self._clock,
                display_tz=self._display_tz,
                label=label,
            )
            handle = MonitorHandle(topic=topic, monitor_id=next(self._ids))
            self._monitors[topic] = monitor
            self._handles[topic] = handle
            ACTIVE_MONITORS.set(len(self._monitors))

        logger.info("[REGISTRY] Suscrito topic=%s id=%d", topic, handle.monitor_id)
        return handle

    def unsubscribe(self, handle: Union[MonitorHandle, str]) -> bool:
        """Deja de enrutar muestras al topic y descarta su monitor.

        Un handle obsoleto (de una suscripción anterior) no elimina nada.
        """
        topic = handle.topic if isinstance(handle, MonitorHandle) else handle
        with self._lock:
            current = self._handles.get(topic)
            if current is None:
                return False
            if isinstance(handle, MonitorHandle) and handle != current:
                return False
            del self._handles[topic]
            del self._monitors[topic]
            ACTIVE_MONITORS.set(len(self._monitors))

        logger.info("[REGISTRY] Desuscrito topic=%s", topic)
        return True

    def route_sample(self, topic: str, raw: Any, now: Optional[float] = None) -> bool:
        """Entrega una muestra cruda al monitor del topic. Devuelve si se aceptó."""
        monitor = self.get(topic)
        if monitor is None:
            UNKNOWN_TOPIC_SAMPLES.inc()
            logger.debug("[REGISTRY] Muestra para topic desconocido=%s descartada", topic)
            return False
        return monitor.on_sample(raw, now=now)

    def load_history(self, topic: str, batch: HistoricalBatch, now: Optional[float] = None) -> bool:
        monitor = self.get(topic)
        if monitor is None:
            return False
        monitor.load_history(batch, now=now)
        return True

    def restore(self, topic: str, saved: SavedPrediction, now: Optional[float] = None) -> bool:
        monitor = self.get(topic)
        if monitor is None:
            return False
        monitor.restore(saved, now=now)
        return True

    def set_thresholds(self, thresholds: Mapping[str, Any], now: Optional[float] = None) -> Dict[str, bool]:
        """Actualización en lote. Umbral vacío o cero → umbral por defecto."""
        default = self._cfg.monitor.default_threshold
        results: Dict[str, bool] = {}
        for topic, value in thresholds.items():
            monitor = self.get(topic)
            if monitor is None:
                results[topic] = False
                continue
            if _is_unset_threshold(value):
                value = default
            results[topic] = monitor.set_threshold(value, now=now)
        return results

    def snapshot(self, now: Optional[float] = None) -> Dict[str, TopicReadModel]:
        """Modelos de lectura de todos los monitores (vista multi-topic)."""
        with self._lock:
            monitors = list(self._monitors.items())
        return {topic: monitor.read_model(now) for topic, monitor in monitors}
