"""Normalización tolerante de puntos (time, value) heterogéneos.

La telemetría mal formada es esperable: cualquier punto cuyo tiempo o
valor no pueda convertirse a un número finito se descarta en silencio.
Nunca se lanza excepción por datos de entrada.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from ..domain.point import Point, Series

# Nombres alternativos aceptados para cada campo, en orden de preferencia
TIME_FIELDS = ("time", "timestamp")
VALUE_FIELDS = ("value", "message")


def finite_number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        f = float(raw)
        return f if math.isfinite(f) else None
    if isinstance(raw, str):
        try:
            f = float(raw.strip())
        except ValueError:
            return None
        return f if math.isfinite(f) else None
    return None


def _parse_date_string(raw: str) -> Optional[float]:
    text = raw.strip()
    if not text:
        return None
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        # Sin zona explícita se interpreta como UTC
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def _utc_midnight(year: Any, month: Any, day: Any) -> Optional[float]:
    try:
        d = date(int(year), int(month), int(day))
    except (TypeError, ValueError, OverflowError):
        return None
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp()


def _to_epoch_seconds(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None

    numeric = finite_number(raw)
    if numeric is not None:
        return numeric

    if isinstance(raw, str):
        return _parse_date_string(raw)

    if isinstance(raw, datetime):
        dt = raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
        return dt.timestamp()

    if isinstance(raw, Mapping):
        for name in TIME_FIELDS:
            if name in raw:
                return _to_epoch_seconds(raw[name])
        if all(k in raw for k in ("year", "month", "day")):
            return _utc_midnight(raw["year"], raw["month"], raw["day"])

    return None


def to_unix_seconds(raw: Any) -> Optional[int]:
    """Convierte una marca de tiempo heterogénea a segundos enteros.

    Orden de intento:
    1. número finito (o string numérico) → se trunca hacia cero
    2. string de fecha ISO-8601 → epoch
    3. registro {year, month, day} → medianoche UTC de ese día

    Devuelve None si no es convertible o si el resultado es negativo.
    """
    seconds = _to_epoch_seconds(raw)
    if seconds is None or not math.isfinite(seconds):
        return None
    result = math.trunc(seconds)
    if result < 0:
        return None
    return result


def _first_present(record: Mapping, names: Iterable[str]) -> Any:
    for name in names:
        value = record.get(name)
        if value is not None:
            return value
    return None


def coerce_point(record: Any) -> Optional[Point]:
    """Punto válido o None si el registro no se puede interpretar."""
    if isinstance(record, Point):
        return record if record.is_valid() else None
    if not isinstance(record, Mapping):
        return None

    time = to_unix_seconds(_first_present(record, TIME_FIELDS))
    if time is None:
        return None
    value = finite_number(_first_present(record, VALUE_FIELDS))
    if value is None:
        return None
    return Point(time=time, value=value)


def normalize(raw_points: Optional[Iterable[Any]]) -> Series:
    """Serie estrictamente creciente y sin tiempos duplicados.

    Ante dos puntos con el mismo tiempo gana el posterior en el orden de
    entrada: un valor "final" re-emitido reemplaza al primero.
    """
    if raw_points is None or isinstance(raw_points, (str, bytes, Mapping)):
        return []

    by_time: dict[int, Point] = {}
    for record in raw_points:
        point = coerce_point(record)
        if point is None:
            continue
        # Sobrescribir conserva la última aparición
        by_time[point.time] = point

    return [by_time[t] for t in sorted(by_time)]


class PointNormalizer:
    """Envoltorio con estado nulo; útil para inyectar en TopicMonitor."""

    def normalize(self, raw_points: Optional[Iterable[Any]]) -> Series:
        return normalize(raw_points)

    def coerce(self, record: Any) -> Optional[Point]:
        return coerce_point(record)
