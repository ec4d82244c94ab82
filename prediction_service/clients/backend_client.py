"""Cliente HTTP del colaborador de consultas (histórico y predicción guardada)."""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional
from urllib.parse import quote

import requests

from ..config.timeframes import TIMEFRAME_SECONDS, history_limit_for, normalize_timeframe
from ..domain.point import HistoricalBatch, Point, SavedPrediction
from ..normalization.message_decoder import (
    parse_historical_batch,
    parse_realtime_range,
    parse_saved_prediction,
)

logger = logging.getLogger(__name__)

# Timeframe cuyo histórico sale de lecturas crudas por segundo
RAW_RANGE_TIMEFRAME = "2H"


def _iso_utc(epoch_seconds: float) -> str:
    dt = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BackendClient:
    """Consultas de solo lectura al backend.

    Los fallos se loguean y devuelven None: el monitor sigue en su estado
    actual y continúa procesando muestras en vivo.
    """

    def __init__(
        self,
        backend_url: str,
        *,
        timeout: float = 5.0,
        internal_api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._base = backend_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._headers = {"X-Internal-Key": internal_api_key} if internal_api_key else {}
        self._clock = clock

    def fetch_history(self, topic: str, timeframe: str) -> Optional[HistoricalBatch]:
        """Lote inicial del topic.

        Para 2H el histórico vivo sale de las lecturas crudas de las últimas
        dos horas; si no hay ninguna se usa el histórico agregado de la API
        de predicción, que además aporta la base de predicciones.
        """
        raw_history: List[Point] = []
        if timeframe == RAW_RANGE_TIMEFRAME:
            raw_history = self.fetch_recent_range(topic) or []

        url = f"{self._base}/mqtt/prediction/{quote(topic, safe='')}"
        params = {
            "timeframe": normalize_timeframe(timeframe),
            "limit": history_limit_for(timeframe),
        }
        payload = self._request_json("GET", url, params=params)
        if payload is None:
            return HistoricalBatch(history=raw_history) if raw_history else None

        batch = parse_historical_batch(payload)
        if raw_history:
            batch = replace(batch, history=raw_history)
        logger.info(
            "[BACKEND] Histórico topic=%s tf=%s history=%d predictions=%d raw=%s",
            topic, timeframe, len(batch.history), len(batch.predictions), bool(raw_history),
        )
        return batch

    def fetch_recent_range(
        self, topic: str, seconds: Optional[int] = None
    ) -> Optional[List[Point]]:
        """Lecturas por segundo (promediadas) del rango [ahora - seconds, ahora]."""
        window = seconds or TIMEFRAME_SECONDS[RAW_RANGE_TIMEFRAME]
        to_ts = self._clock()
        body = {
            "topic": topic,
            "from": _iso_utc(to_ts - window),
            "to": _iso_utc(to_ts),
            "granularity": "seconds",
            "sortOrder": "asc",
            "limit": history_limit_for(RAW_RANGE_TIMEFRAME),
            "aggregationMethod": "average",
        }
        payload = self._request_json(
            "POST", f"{self._base}/mqtt/realtime-data/custom-range", json=body
        )
        if payload is None:
            return None
        return parse_realtime_range(payload)

    def fetch_saved_prediction(self, topic: str) -> Optional[SavedPrediction]:
        url = f"{self._base}/prediction/get-prediction/{quote(topic, safe='')}"
        payload = self._request_json("GET", url)
        if payload is None:
            return None
        return parse_saved_prediction(payload)

    def _request_json(self, method: str, url: str, **kwargs: Any):
        try:
            response = self._session.request(
                method, url, headers=self._headers, timeout=self._timeout, **kwargs
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("[BACKEND] Error consultando %s %s: %s", method, url, e)
            return None
