"""Monitor por topic: serie viva + serie de pronóstico + umbral.

Orquesta Normalizer → Forecaster → Estimator en cada muestra y expone el
modelo de lectura que dibuja el llamador. Cada monitor tiene un único
dueño lógico a la vez: todas las mutaciones pasan por su lock interno y
no se comparte estado entre topics.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from datetime import tzinfo
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional

from ..config.prediction_config import DEFAULT_PREDICTION_CONFIG, PredictionConfig
from ..config.timeframes import timeframe_to_seconds
from ..domain.events import PredictionEvent, TopicReadModel
from ..domain.point import HistoricalBatch, Point, SavedPrediction
from ..domain.threshold_status import ThresholdStatus
from ..metrics import SAMPLES_PROCESSED
from ..models.threshold_estimator import ThresholdEstimator
from ..models.trend_forecaster import Forecaster, TrendForecaster
from ..normalization.message_decoder import decode_live_message
from ..normalization.point_normalizer import normalize
from ..series_buffer import SeriesBuffer
from .stats import MonitorStats

logger = logging.getLogger(__name__)

EventEmitter = Callable[[PredictionEvent], Any]


class MonitorState(Enum):
    IDLE = "idle"  # sin datos
    LOADED = "loaded"  # histórico cargado
    LIVE = "live"  # recibiendo muestras


class TopicMonitor:
    """Motor de normalización, pronóstico y estimación de umbral de un topic."""

    def __init__(
        self,
        topic: str,
        *,
        threshold: Optional[float] = None,
        timeframe: Optional[str] = None,
        emit: Optional[EventEmitter] = None,
        forecaster: Optional[Forecaster] = None,
        estimator: Optional[ThresholdEstimator] = None,
        cfg: PredictionConfig | None = None,
        clock: Callable[[], float] = time.time,
        display_tz: Optional[tzinfo] = None,
        label: Optional[str] = None,
    ) -> None:
        self._cfg: PredictionConfig = cfg or DEFAULT_PREDICTION_CONFIG
        self.topic = topic
        self.label = label

        self._live = SeriesBuffer()
        self._forecast = SeriesBuffer()
        self._threshold = float(
            threshold if threshold is not None else self._cfg.monitor.default_threshold
        )
        self._status: Optional[ThresholdStatus] = None
        self._state = MonitorState.IDLE

        self._timeframe = timeframe or self._cfg.monitor.default_timeframe
        self._retention_seconds = timeframe_to_seconds(self._timeframe)

        self._emit = emit
        self._forecaster: Forecaster = forecaster or TrendForecaster(self._cfg.forecast)
        self._estimator = estimator or ThresholdEstimator(self._cfg.estimator)
        self._clock = clock
        self._display_tz = display_tz

        self.stats = MonitorStats()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def status(self) -> Optional[ThresholdStatus]:
        return self._status

    @property
    def timeframe(self) -> str:
        return self._timeframe

    @property
    def retention_seconds(self) -> int:
        return self._retention_seconds

    def status_message(self) -> Optional[str]:
        status = self._status
        return status.message(self._display_tz) if status else None

    def live_series(self) -> List[Point]:
        with self._lock:
            return self._live.snapshot()

    def forecast_series(self) -> List[Point]:
        with self._lock:
            return self._forecast.snapshot()

    def threshold_line(self, now: Optional[float] = None) -> List[Point]:
        """Extremos de la línea de umbral sobre el rango de la serie viva.

        Con 0 puntos no hay línea. Con 1 punto (o inicio == fin) el final se
        extiende hasta "ahora" solo si ahora es posterior al inicio.
        """
        with self._lock:
            first, last, count = self._live.first, self._live.last, len(self._live)
            threshold = self._threshold

        if count == 0:
            return []

        start = first.time
        end = last.time
        if count == 1 or start >= end:
            current = math.floor(self._now(now))
            if current > start:
                end = current
            else:
                return []

        if start < end:
            return [Point(start, threshold), Point(end, threshold)]
        return []

    def read_model(self, now: Optional[float] = None) -> TopicReadModel:
        with self._lock:
            return TopicReadModel(
                topic=self.topic,
                label=self.label,
                live_series=self._live.snapshot(),
                forecast_series=self._forecast.snapshot(),
                threshold=self._threshold,
                threshold_line=self.threshold_line(now),
                status=self._status,
            )

    # ------------------------------------------------------------------
    # Transiciones
    # ------------------------------------------------------------------

    def load_history(
        self,
        batch: HistoricalBatch | Iterable[Any],
        predictions: Optional[Iterable[Any]] = None,
        now: Optional[float] = None,
    ) -> None:
        """Reemplaza la serie viva con el histórico y recalcula la base de pronóstico.

        La base de pronóstico es el histórico normalizado seguido de las
        predicciones del servidor (éstas ganan en colisiones de tiempo).
        """
        if isinstance(batch, HistoricalBatch):
            history_raw, predictions_raw = batch.history, batch.predictions
        else:
            history_raw, predictions_raw = batch, predictions or []

        history = normalize(history_raw)
        server_predictions = normalize(predictions_raw)

        with self._lock:
            self._live.replace(history)
            self._forecast.replace([*history, *server_predictions])
            self._state = MonitorState.LOADED
            self._recompute_status(now)

        logger.info(
            "[MONITOR] topic=%s histórico cargado live=%d forecast=%d",
            self.topic, len(history), len(self._forecast),
        )

    def restore(self, saved: SavedPrediction, now: Optional[float] = None) -> None:
        """Restaura umbral y serie de pronóstico guardados por el backend."""
        with self._lock:
            self._threshold = float(saved.threshold or self._cfg.monitor.default_threshold)
            history = normalize(saved.prediction_history)
            if history:
                self._forecast.replace(history)
            self._recompute_status(now)

    def on_sample(self, raw: Any, now: Optional[float] = None) -> bool:
        """Procesa una muestra en vivo. Devuelve True si se aceptó.

        Muestras mal formadas, duplicadas o fuera de orden se ignoran en
        silencio: es lo esperable con reordenamiento de red.
        """
        current = self._now(now)
        point = raw if isinstance(raw, Point) else decode_live_message(raw, current)
        if point is None or not point.is_valid():
            self.stats.malformed += 1
            SAMPLES_PROCESSED.labels(result="malformed").inc()
            logger.debug("[MONITOR] topic=%s muestra mal formada descartada", self.topic)
            return False

        with self._lock:
            if not self._live.append(point):
                self.stats.rejected += 1
                SAMPLES_PROCESSED.labels(result="rejected").inc()
                logger.debug(
                    "[MONITOR] topic=%s muestra fuera de orden t=%s last=%s",
                    self.topic, point.time, self._live.last_time,
                )
                return False

            predicted = self._forecaster.forecast_next(
                self._live.tail(self._cfg.forecast.trend_window),
                point,
                self._forecast.tail(1),
            )
            self._forecast.append(predicted)
            self._recompute_status(current)

            self._live.trim(point.time - self._retention_seconds)
            self._forecast.trim(point.time - self._cfg.monitor.forecast_retention_seconds)
            self._state = MonitorState.LIVE

            self.stats.accepted += 1
            self.stats.last_sample_time = point.time
            event = self._build_event(point.value, predicted.value, point.time)

        SAMPLES_PROCESSED.labels(result="accepted").inc()
        self._dispatch(event)
        return True

    def set_threshold(self, value: Any, now: Optional[float] = None) -> bool:
        """Reemplaza el umbral y recalcula el estado. Ignora valores no numéricos."""
        try:
            threshold = float(value)
        except (TypeError, ValueError):
            threshold = math.nan
        if not math.isfinite(threshold):
            logger.warning("[MONITOR] topic=%s umbral inválido ignorado: %r", self.topic, value)
            return False

        with self._lock:
            self._threshold = threshold
            self._recompute_status(now)
            last = self._live.last
            event = self._build_event(last.value, last.value, last.time) if last else None

        if event is not None:
            self._dispatch(event)
        return True

    def set_retention_window(self, timeframe: str) -> int:
        """Cambia la ventana de retención de la serie viva (se aplica en el próximo trim)."""
        with self._lock:
            self._timeframe = timeframe
            self._retention_seconds = timeframe_to_seconds(timeframe)
            return self._retention_seconds

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def _recompute_status(self, now: Optional[float]) -> None:
        window = max(self._cfg.estimator.regression_window, self._cfg.estimator.min_points)
        status = self._estimator.estimate(
            self._forecast.tail(window), self._threshold, self._now(now)
        )
        # Con datos insuficientes se conserva el último estado conocido
        if status is not None:
            self._status = status

    def _build_event(self, live_value: float, predicted_value: float, timestamp: int) -> PredictionEvent:
        status = self._status
        reached = bool(status and status.is_reached)
        message = status.message(self._display_tz) if status else None
        return PredictionEvent(
            topic=self.topic,
            live_value=live_value,
            predicted_value=predicted_value,
            threshold=self._threshold,
            timestamp=timestamp,
            threshold_reached=reached,
            threshold_reach_time=message if reached else None,
            estimated_reach_time=None if reached else message,
        )

    def _dispatch(self, event: PredictionEvent) -> None:
        if self._emit is None:
            return
        try:
            self._emit(event)
            self.stats.emitted += 1
        except Exception:
            # La persistencia es fire-and-forget: nunca afecta al estado local
            logger.exception("[MONITOR] topic=%s fallo emitiendo evento", self.topic)
