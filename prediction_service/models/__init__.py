from .threshold_estimator import LinearFit, ThresholdEstimator, fit_line
from .trend_forecaster import Forecaster, TrendForecaster, TrendSignal

__all__ = [
    "Forecaster",
    "LinearFit",
    "ThresholdEstimator",
    "TrendForecaster",
    "TrendSignal",
    "fit_line",
]
