"""Destinos de persistencia para eventos de predicción."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

import requests
from sqlalchemy.engine import Engine

from ..domain.events import PredictionEvent
from ..repository.prediction_repository import insert_topic_prediction

logger = logging.getLogger(__name__)


class PredictionSink(Protocol):
    """Interfaz del colaborador externo de persistencia."""

    def save(self, event: PredictionEvent) -> None:
        ...


class NullPredictionSink:
    def save(self, event: PredictionEvent) -> None:
        logger.debug("[SINK] Evento descartado (sink nulo) topic=%s", event.topic)


class HttpPredictionSink:
    """POST al backend: ``/prediction/save-prediction``.

    Lanza excepción ante error HTTP; el dispatcher la registra.
    """

    def __init__(
        self,
        backend_url: str,
        *,
        timeout: float = 5.0,
        internal_api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._url = f"{backend_url.rstrip('/')}/prediction/save-prediction"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._headers = {"Content-Type": "application/json"}
        if internal_api_key:
            self._headers["X-Internal-Key"] = internal_api_key

    def save(self, event: PredictionEvent) -> None:
        response = self._session.post(
            self._url,
            json=event.to_payload(),
            headers=self._headers,
            timeout=self._timeout,
        )
        response.raise_for_status()
        logger.debug("[SINK] Predicción guardada topic=%s ts=%s", event.topic, event.timestamp)


class SqlPredictionSink:
    """Inserta cada evento en ``dbo.topic_predictions``."""

    def __init__(self, engine_factory: Callable[[], Engine]) -> None:
        self._engine_factory = engine_factory
        self._engine: Optional[Engine] = None

    def save(self, event: PredictionEvent) -> None:
        if self._engine is None:
            self._engine = self._engine_factory()
        with self._engine.begin() as conn:  # type: ignore[call-arg]
            insert_topic_prediction(conn, event)
