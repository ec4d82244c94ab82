from __future__ import annotations

import time as _time
from dataclasses import dataclass
from typing import Optional, Sequence

from ..config.prediction_config import DEFAULT_PREDICTION_CONFIG, EstimatorConfig
from ..domain.point import Point
from ..domain.threshold_status import ThresholdStatus


@dataclass(frozen=True)
class LinearFit:
    """Ajuste por mínimos cuadrados y = intercept + slope * t."""

    slope: float
    intercept: float
    n: int


def fit_line(points: Sequence[Point]) -> Optional[LinearFit]:
    """Regresión lineal ordinaria sobre (time, value).

    Se centra X en su media antes de acumular: con epochs del orden de 1e9
    la fórmula de sumas crudas pierde toda la precisión. Devuelve None si
    la varianza de X es cero (todos los tiempos iguales) o hay < 2 puntos.
    """
    n = len(points)
    if n < 2:
        return None

    mean_x = sum(p.time for p in points) / n
    mean_y = sum(p.value for p in points) / n

    sxx = 0.0
    sxy = 0.0
    for p in points:
        dx = p.time - mean_x
        sxx += dx * dx
        sxy += dx * (p.value - mean_y)

    if sxx == 0:
        return None

    slope = sxy / sxx
    return LinearFit(slope=slope, intercept=mean_y - slope * mean_x, n=n)


class ThresholdEstimator:
    """Estima cuándo (o si) la serie de pronóstico cruzará el umbral.

    Es puro dado (forecast, threshold, now): no acumula estado entre
    llamadas. Devuelve None con datos insuficientes para que el llamador
    conserve el último estado conocido.
    """

    def __init__(self, cfg: EstimatorConfig | None = None) -> None:
        self._cfg: EstimatorConfig = cfg or DEFAULT_PREDICTION_CONFIG.estimator

    def estimate(
        self,
        forecast: Sequence[Point],
        threshold: float,
        now: Optional[float] = None,
    ) -> Optional[ThresholdStatus]:
        cfg = self._cfg
        if len(forecast) < cfg.min_points:
            return None

        last = forecast[-1]
        if last.value >= threshold:
            return ThresholdStatus.reached(last.time)

        fit = fit_line(list(forecast[-cfg.regression_window:]))
        if fit is None or fit.slope <= 0:
            return ThresholdStatus.not_trending()

        time_to_reach = (threshold - last.value) / fit.slope
        reach_time = last.time + time_to_reach

        now = _time.time() if now is None else now
        remaining = reach_time - now
        if remaining <= 0:
            # El modelo dice que ya debería haberlo cruzado y no lo hizo
            return ThresholdStatus.not_trending()
        if remaining < cfg.eta_horizon_seconds:
            return ThresholdStatus.within_day(reach_time)
        return ThresholdStatus.beyond_day()
