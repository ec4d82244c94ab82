"""Decodificación de eventos del transporte y lotes del colaborador de consultas.

Formato de evento en vivo (Socket.IO ``liveMessage``):

    {"success": true, "message": {"message": "123.45", "timestamp": "2025-..."}}

El valor puede venir anidado hasta dos niveles bajo ``message``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from ..domain.point import HistoricalBatch, Point, SavedPrediction
from .point_normalizer import coerce_point, finite_number, to_unix_seconds

logger = logging.getLogger(__name__)


def _get(obj: Any, key: str) -> Any:
    return obj.get(key) if isinstance(obj, Mapping) else None


def _is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _unwrap_value(data: Mapping) -> Any:
    outer = data.get("message")
    inner = _get(outer, "message")
    innermost = _get(inner, "message")
    for candidate in (innermost, inner, outer):
        if candidate is not None and not isinstance(candidate, Mapping):
            return candidate
    return data.get("value")


def decode_live_message(data: Any, now: float) -> Optional[Point]:
    """Punto de una muestra en vivo, o None si está mal formada.

    - ``success`` presente y falso → se descarta
    - sin timestamp → se usa ``now``
    """
    if not isinstance(data, Mapping):
        return None
    if "success" in data and not data.get("success"):
        return None

    value = finite_number(_unwrap_value(data))
    if value is None:
        return None

    raw_ts = _get(data.get("message"), "timestamp")
    if _is_blank(raw_ts):
        raw_ts = data.get("timestamp", data.get("time"))
    time = to_unix_seconds(now if _is_blank(raw_ts) else raw_ts)
    if time is None:
        return None

    return Point(time=time, value=value)


def _as_list(raw: Any) -> list:
    return list(raw) if isinstance(raw, list) else []


def parse_historical_batch(payload: Any) -> HistoricalBatch:
    """Lote inicial a partir de la respuesta de ``/mqtt/prediction/{topic}``.

    La respuesta puede venir envuelta en ``data``. La línea base del
    servidor (``predictionGraphData``) va antes de las predicciones futuras
    (``predictions``) para que éstas ganen en colisiones de tiempo.
    """
    if isinstance(payload, Mapping) and isinstance(payload.get("data"), Mapping):
        payload = payload["data"]
    if not isinstance(payload, Mapping):
        return HistoricalBatch()

    history = payload.get("historyGraphData")
    if not isinstance(history, list):
        history = payload.get("historical", payload.get("history"))

    baseline = _as_list(payload.get("predictionGraphData"))
    predictions = _as_list(payload.get("predictions"))

    return HistoricalBatch(history=_as_list(history), predictions=baseline + predictions)


def parse_saved_prediction(payload: Any) -> Optional[SavedPrediction]:
    """Registro guardado de ``/prediction/get-prediction/{topic}``."""
    if isinstance(payload, Mapping) and "success" in payload:
        if not payload.get("success"):
            return None
        payload = payload.get("data")
    if not isinstance(payload, Mapping):
        return None

    history = [
        {"time": p.get("timestamp"), "value": p.get("predictedValue")}
        for p in _as_list(payload.get("predictionHistory"))
        if isinstance(p, Mapping)
    ]
    return SavedPrediction(
        threshold=finite_number(payload.get("threshold")),
        prediction_history=history,
    )


def parse_realtime_range(payload: Any) -> List[Point]:
    """Lecturas crudas de ``/mqtt/realtime-data/custom-range``.

    Respuesta: ``{"success": true, "messages": [{"timestamp": ..., "message": ...}]}``.
    Las lecturas que no se pueden interpretar se descartan.
    """
    if not isinstance(payload, Mapping) or not payload.get("success"):
        return []
    points = (coerce_point(m) for m in _as_list(payload.get("messages")))
    return [p for p in points if p is not None]
