"""Timeframes seleccionables y su ventana de retención en segundos."""

from __future__ import annotations

import re

DEFAULT_WINDOW_SECONDS = 7200

HOUR = 3600
DAY = 24 * HOUR

TIMEFRAME_SECONDS = {
    "2H": 2 * HOUR,
    "8H": 8 * HOUR,
    "1D": DAY,
    "1W": 7 * DAY,
    "1M": 30 * DAY,
}

# Límite de puntos que se pide al colaborador de consultas por timeframe
_HISTORY_LIMITS = {
    "1M": 10000,
    "1W": 8000,
    "1D": 5000,
    "2H": 10000,
    "8H": 10000,
}
DEFAULT_HISTORY_LIMIT = 2000

_GENERIC_RE = re.compile(r"^\s*(\d+)\s*([hHdDwWmM])\s*$")
_UNIT_SECONDS = {"h": HOUR, "d": DAY, "w": 7 * DAY, "m": 30 * DAY}


def _canonical(tf: str) -> str:
    return tf.strip().upper()


def timeframe_to_seconds(tf: str | None) -> int:
    """Ventana de retención para un timeframe.

    Acepta las etiquetas fijas (2H, 8H, 1D, 1W, 1M) sin distinguir
    mayúsculas y la forma genérica "<n><unidad>". Cualquier otra cosa
    cae en la ventana por defecto de 2 horas.
    """
    if not tf:
        return DEFAULT_WINDOW_SECONDS

    known = TIMEFRAME_SECONDS.get(_canonical(tf))
    if known is not None:
        return known

    match = _GENERIC_RE.match(tf)
    if not match:
        return DEFAULT_WINDOW_SECONDS
    amount = int(match.group(1))
    if amount <= 0:
        return DEFAULT_WINDOW_SECONDS
    return amount * _UNIT_SECONDS[match.group(2).lower()]


def normalize_timeframe(tf: str) -> str:
    """Etiqueta tal como la espera la API de consultas."""
    if tf == "2H":
        return "2h"
    if tf == "8H":
        return "8h"
    return tf


def history_limit_for(tf: str) -> int:
    return _HISTORY_LIMITS.get(_canonical(tf), DEFAULT_HISTORY_LIMIT)
