"""Contratos de salida del motor: evento de persistencia y modelo de lectura."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import tzinfo
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .point import Point
from .threshold_status import ThresholdStatus


class PredictionEvent(BaseModel):
    """Evento "persistir muestra + predicción derivada".

    Se serializa en camelCase, igual que lo espera el backend:
    {topic, liveValue, predictedValue, threshold, timestamp,
     thresholdReached, thresholdReachTime, estimatedReachTime}
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    topic: str
    live_value: float = Field(..., alias="liveValue")
    predicted_value: float = Field(..., alias="predictedValue")
    threshold: float
    timestamp: int
    threshold_reached: bool = Field(default=False, alias="thresholdReached")
    threshold_reach_time: Optional[str] = Field(default=None, alias="thresholdReachTime")
    estimated_reach_time: Optional[str] = Field(default=None, alias="estimatedReachTime")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class TopicReadModel:
    """Lo que el colaborador de renderizado dibuja para un topic."""

    topic: str
    live_series: List[Point]
    forecast_series: List[Point]
    threshold: float
    threshold_line: List[Point] = field(default_factory=list)
    status: Optional[ThresholdStatus] = None
    label: Optional[str] = None

    def to_dict(self, tz: Optional[tzinfo] = None) -> dict:
        return {
            "topic": self.topic,
            "label": self.label,
            "liveSeries": [p.to_dict() for p in self.live_series],
            "forecastSeries": [p.to_dict() for p in self.forecast_series],
            "threshold": self.threshold,
            "thresholdLineEndpoints": [p.to_dict() for p in self.threshold_line],
            "status": self.status.to_dict(tz) if self.status else None,
        }
