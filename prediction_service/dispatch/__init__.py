from .persistence_dispatcher import AsyncPredictionDispatcher
from .sinks import HttpPredictionSink, NullPredictionSink, PredictionSink, SqlPredictionSink

__all__ = [
    "AsyncPredictionDispatcher",
    "HttpPredictionSink",
    "NullPredictionSink",
    "PredictionSink",
    "SqlPredictionSink",
]
