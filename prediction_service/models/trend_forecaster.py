from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from ..config.prediction_config import DEFAULT_PREDICTION_CONFIG, ForecastConfig
from ..domain.point import Point


@dataclass(frozen=True)
class TrendSignal:
    """Agregados de la cola de la serie viva.

    `avg` no interviene en el valor pronosticado; queda disponible como
    señal de suavizado para modelos futuros.
    """

    avg: float
    trend: float  # último - primero dentro de la ventana
    count: int


class Forecaster(Protocol):
    """Interfaz de pronóstico de un paso.

    El motor solo depende de esta interfaz; se puede sustituir el modelo
    sin tocar TopicMonitor.
    """

    def forecast_next(
        self,
        live: Sequence[Point],
        last_raw: Point,
        forecast: Sequence[Point],
    ) -> Point:
        ...


class TrendForecaster:
    """Pronóstico barato y explicable: tendencia móvil + ruido acotado.

    valor = último_crudo + trend * 0.5 + ruido, ruido ~ U[-1, 1]
    tiempo = max(último_pronóstico, último_crudo) + 1
    """

    def __init__(
        self,
        cfg: ForecastConfig | None = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._cfg: ForecastConfig = cfg or DEFAULT_PREDICTION_CONFIG.forecast
        self._rng = rng or random.Random()

    def trend_signal(self, live: Sequence[Point]) -> TrendSignal:
        window = list(live[-self._cfg.trend_window:]) if self._cfg.trend_window > 0 else []
        if not window:
            return TrendSignal(avg=0.0, trend=0.0, count=0)

        values = [p.value for p in window]
        avg = sum(values) / len(values)
        trend = values[-1] - values[0] if len(values) > 1 else 0.0
        return TrendSignal(avg=avg, trend=trend, count=len(values))

    def noise(self) -> float:
        return (self._rng.random() - 0.5) * 2 * self._cfg.noise_amplitude

    def forecast_next(
        self,
        live: Sequence[Point],
        last_raw: Point,
        forecast: Sequence[Point],
    ) -> Point:
        signal = self.trend_signal(live)
        value = last_raw.value + signal.trend * self._cfg.trend_factor + self.noise()

        # La serie de pronóstico puede extenderse ya al futuro (predicciones
        # del servidor); el nuevo punto debe quedar estrictamente después.
        base_time = last_raw.time
        if forecast:
            base_time = max(forecast[-1].time, base_time)

        return Point(time=base_time + self._cfg.time_step_seconds, value=value)
