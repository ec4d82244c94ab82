"""Estado de alcance de umbral derivado de la serie de pronóstico."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Optional


class StatusKind(Enum):
    REACHED = "reached"
    WITHIN_DAY = "within_day"
    BEYOND_DAY = "beyond_day"
    NOT_TRENDING = "not_trending"


NOT_EXPECTED_TEXT = "Not expected to reach threshold"
BEYOND_DAY_TEXT = "Estimated to reach in more than 24 hours"


def format_clock(epoch_seconds: float, tz: Optional[tzinfo] = None) -> str:
    """HH:MM:SS en hora de pared (tz local si no se indica).

    Fuera del rango de `datetime` (p. ej. epoch en milisegundos tratado
    como segundos) se devuelve el epoch crudo en lugar de fallar.
    """
    try:
        return datetime.fromtimestamp(epoch_seconds, tz=tz).strftime("%H:%M:%S")
    except (OverflowError, ValueError, OSError):
        return str(int(epoch_seconds))


@dataclass(frozen=True)
class ThresholdStatus:
    """Valor etiquetado: Reached(at) o NotReached(WithinDay(eta) | BeyondDay | NotTrending).

    `at` es el tiempo del punto que alcanzó el umbral (REACHED) o la ETA
    estimada (WITHIN_DAY). En el resto de casos es None.
    """

    kind: StatusKind
    at: Optional[float] = None

    @classmethod
    def reached(cls, at: int) -> ThresholdStatus:
        return cls(StatusKind.REACHED, at)

    @classmethod
    def within_day(cls, eta: float) -> ThresholdStatus:
        return cls(StatusKind.WITHIN_DAY, eta)

    @classmethod
    def beyond_day(cls) -> ThresholdStatus:
        return cls(StatusKind.BEYOND_DAY)

    @classmethod
    def not_trending(cls) -> ThresholdStatus:
        return cls(StatusKind.NOT_TRENDING)

    @property
    def is_reached(self) -> bool:
        return self.kind is StatusKind.REACHED

    def message(self, tz: Optional[tzinfo] = None) -> str:
        if self.kind is StatusKind.REACHED:
            return f"Reached at {format_clock(self.at, tz)}"
        if self.kind is StatusKind.WITHIN_DAY:
            return f"Estimated to reach at {format_clock(self.at, tz)}"
        if self.kind is StatusKind.BEYOND_DAY:
            return BEYOND_DAY_TEXT
        return NOT_EXPECTED_TEXT

    def to_dict(self, tz: Optional[tzinfo] = None) -> dict:
        return {
            "kind": self.kind.value,
            "at": self.at,
            "message": self.message(tz),
        }
