"""Estadísticas por monitor."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class MonitorStats:
    """Contadores de muestras de un topic."""

    accepted: int = 0
    rejected: int = 0  # duplicadas o fuera de orden
    malformed: int = 0
    emitted: int = 0
    last_sample_time: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return (
            f"Stats: accepted={self.accepted} rejected={self.rejected} "
            f"malformed={self.malformed} emitted={self.emitted}"
        )

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "rejected": self.rejected,
            "malformed": self.malformed,
            "emitted": self.emitted,
            "last_sample_time": self.last_sample_time,
            "started_at": self.started_at.isoformat(),
        }
