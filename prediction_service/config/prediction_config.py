from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ForecastConfig:
    """Configuración del pronóstico tendencia + ruido."""

    # Nº de puntos finales de la serie viva usados para la tendencia
    trend_window: int = 5

    # Peso de la tendencia sumada al último valor crudo
    trend_factor: float = 0.5

    # Ruido uniforme simétrico en [-amplitude, +amplitude]
    noise_amplitude: float = 1.0

    # Separación mínima (s) entre puntos consecutivos de pronóstico
    time_step_seconds: int = 1


@dataclass(frozen=True)
class EstimatorConfig:
    """Configuración de la estimación de cruce de umbral."""

    min_points: int = 2
    regression_window: int = 10

    # ETAs más lejanas que esto se reportan como "más de 24 horas"
    eta_horizon_seconds: int = 86400


@dataclass(frozen=True)
class MonitorConfig:
    default_threshold: float = 99.0
    default_timeframe: str = "2H"

    # El pronóstico se extiende al futuro; su retención no depende del timeframe
    forecast_retention_seconds: int = 7200


@dataclass(frozen=True)
class PredictionConfig:
    forecast: ForecastConfig = ForecastConfig()
    estimator: EstimatorConfig = EstimatorConfig()
    monitor: MonitorConfig = MonitorConfig()


# Config global por defecto utilizable en runners/servicios
DEFAULT_PREDICTION_CONFIG = PredictionConfig()
