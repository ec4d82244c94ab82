"""Modelo de dominio para puntos de series temporales."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence


@dataclass(frozen=True)
class Point:
    """Punto normalizado de una serie.

    - time: segundos enteros desde epoch (finito, >= 0)
    - value: float finito
    """

    time: int
    value: float

    def is_valid(self) -> bool:
        return (
            isinstance(self.time, int)
            and self.time >= 0
            and math.isfinite(self.value)
        )

    def to_dict(self) -> dict:
        return {"time": self.time, "value": self.value}


# Secuencia estrictamente creciente por time, sin tiempos repetidos.
Series = List[Point]


def last_time(series: Sequence[Point]) -> Optional[int]:
    return series[-1].time if series else None


@dataclass(frozen=True)
class TopicSample:
    """Muestra cruda entregada por el transporte para un topic.

    `raw` es el evento tal cual llegó; se decodifica dentro del monitor.
    """

    topic: str
    raw: Any


@dataclass(frozen=True)
class HistoricalBatch:
    """Lote inicial devuelto por el colaborador de consultas."""

    history: List[Any] = field(default_factory=list)
    predictions: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class SavedPrediction:
    """Último estado de predicción guardado para un topic."""

    threshold: Optional[float] = None
    prediction_history: List[Any] = field(default_factory=list)
