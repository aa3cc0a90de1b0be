# core/coordinate_manager.py
import logging
from typing import Callable, Optional

from core.errors import InsufficientVertices, NoActiveDrawing, WrongModeAppend
from core.models import (
    MIN_VERTICES,
    Coordinate,
    DrawingMode,
    PointGeometry,
    PolygonGeometry,
    RouteGeometry,
    VertexSequence,
)

logger = logging.getLogger(__name__)


class GeometryAccumulator:
    """
    Guarda los vértices en curso de cada modo de dibujo.
    El modo activo se consulta en cada llamada a través de active_mode,
    nunca se guarda una copia.
    """

    def __init__(self, active_mode: Callable[[], DrawingMode],
                 initial_location: Optional[Coordinate] = None):
        self._active_mode = active_mode
        # Ubicación: un único punto, el último clic gana
        self._location: Optional[Coordinate] = initial_location
        # Polígono y ruta: listas en orden de clic
        self._vertices: dict[DrawingMode, list[Coordinate]] = {
            DrawingMode.POLYGON: [],
            DrawingMode.ROUTE: [],
        }

    def append(self, mode: DrawingMode, coord: Coordinate):
        active = self._active_mode()
        if mode != active or mode == DrawingMode.IDLE:
            raise WrongModeAppend(mode, active)
        coord = Coordinate(float(coord[0]), float(coord[1]))
        if mode == DrawingMode.LOCATION:
            self._location = coord
        else:
            self._vertices[mode].append(coord)
        logger.debug("Vértice %s agregado en modo %s (total %d)",
                     coord, mode.value, self.count(mode))

    def current(self, mode: DrawingMode):
        if mode == DrawingMode.LOCATION:
            return PointGeometry(self._location)
        if mode == DrawingMode.POLYGON:
            return PolygonGeometry(VertexSequence(self._vertices[mode]))
        if mode == DrawingMode.ROUTE:
            return RouteGeometry(VertexSequence(self._vertices[mode]))
        raise ValueError(f"El modo '{mode.value}' no tiene geometría.")

    def count(self, mode: DrawingMode) -> int:
        if mode == DrawingMode.LOCATION:
            return 0 if self._location is None else 1
        return len(self._vertices.get(mode, ()))

    def is_savable(self, mode: DrawingMode) -> bool:
        if mode not in MIN_VERTICES:
            return False
        return self.count(mode) >= MIN_VERTICES[mode]

    def require_savable(self, mode: DrawingMode):
        if mode not in MIN_VERTICES:
            raise NoActiveDrawing()
        if not self.is_savable(mode):
            raise InsufficientVertices(mode, self.count(mode), MIN_VERTICES[mode])

    def clear(self, mode: DrawingMode):
        if mode == DrawingMode.LOCATION:
            self._location = None
        elif mode in self._vertices:
            # clear() y no reasignar: las vistas existentes siguen apuntando aquí
            self._vertices[mode].clear()

    def clear_all(self):
        for mode in MIN_VERTICES:
            self.clear(mode)
