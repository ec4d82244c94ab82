from .prediction_config import (
    DEFAULT_PREDICTION_CONFIG,
    EstimatorConfig,
    ForecastConfig,
    MonitorConfig,
    PredictionConfig,
)
from .timeframes import history_limit_for, normalize_timeframe, timeframe_to_seconds

__all__ = [
    "DEFAULT_PREDICTION_CONFIG",
    "EstimatorConfig",
    "ForecastConfig",
    "MonitorConfig",
    "PredictionConfig",
    "history_limit_for",
    "normalize_timeframe",
    "timeframe_to_seconds",
]
