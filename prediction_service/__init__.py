"""Motor de predicción en vivo por topic.

Estructura:
- domain/         → Point, Series, ThresholdStatus, contratos de salida
- normalization/  → Normalización de puntos y decodificación de mensajes
- models/         → Pronóstico tendencia+ruido y estimación de umbral
- config/         → Constantes del algoritmo y timeframes
- monitor/        → TopicMonitor (máquina de estados) y MonitorRegistry
- dispatch/       → Persistencia fire-and-forget y sinks
- repository/     → Inserciones SQL
- clients/        → Cliente HTTP del colaborador de consultas
- runners/        → Punto de entrada del stream
"""

from .monitor import MonitorRegistry, MonitorState, TopicMonitor
from .series_buffer import SeriesBuffer

__all__ = ["MonitorRegistry", "MonitorState", "SeriesBuffer", "TopicMonitor"]
