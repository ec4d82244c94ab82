"""Domain layer - Modelos y contratos."""

from .events import PredictionEvent, TopicReadModel
from .point import HistoricalBatch, Point, SavedPrediction, Series, TopicSample
from .threshold_status import StatusKind, ThresholdStatus

__all__ = [
    "HistoricalBatch",
    "Point",
    "PredictionEvent",
    "SavedPrediction",
    "Series",
    "StatusKind",
    "ThresholdStatus",
    "TopicReadModel",
    "TopicSample",
]
