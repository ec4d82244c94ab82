from __future__ import annotations

from collections import deque
from itertools import islice
from typing import Deque, Iterable, Iterator, List, Optional

from .domain.point import Point, Series
from .normalization.point_normalizer import normalize


class SeriesBuffer:
    """Contenedor ordenado y acotado en el tiempo de puntos normalizados.

    - Invariante: tiempos estrictamente crecientes, sin duplicados.
    - `append` rechaza cualquier punto con time <= último time.
    - `trim` solo elimina por la cabeza; nunca hace falta borrar del medio.
    - `merge` re-normaliza todo (solo en carga inicial).
    """

    def __init__(self, points: Optional[Iterable[Point]] = None) -> None:
        self._points: Deque[Point] = deque(normalize(points) if points else ())

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __bool__(self) -> bool:
        return bool(self._points)

    @property
    def first(self) -> Optional[Point]:
        return self._points[0] if self._points else None

    @property
    def last(self) -> Optional[Point]:
        return self._points[-1] if self._points else None

    @property
    def last_time(self) -> Optional[int]:
        return self._points[-1].time if self._points else None

    def append(self, point: Point) -> bool:
        """Añade al final si es estrictamente más nuevo. Devuelve si se aceptó."""
        if self._points and point.time <= self._points[-1].time:
            return False
        self._points.append(point)
        return True

    def merge(self, batch: Iterable) -> Series:
        """Combina el contenido actual con un lote y re-normaliza.

        Dos series parciales de orígenes distintos no garantizan
        monotonicidad de extremo a extremo; el lote gana en colisiones.
        """
        merged = normalize([*self._points, *batch])
        self._points = deque(merged)
        return list(merged)

    def replace(self, batch: Iterable) -> Series:
        self._points.clear()
        return self.merge(batch)

    def trim(self, cutoff_time: float) -> int:
        """Elimina los puntos iniciales con time < cutoff. Devuelve cuántos."""
        removed = 0
        while self._points and self._points[0].time < cutoff_time:
            self._points.popleft()
            removed += 1
        return removed

    def tail(self, n: int) -> List[Point]:
        """Últimos `n` puntos en orden ascendente."""
        if n <= 0:
            return []
        return list(islice(reversed(self._points), n))[::-1]

    def snapshot(self) -> Series:
        return list(self._points)

    def clear(self) -> None:
        self._points.clear()
