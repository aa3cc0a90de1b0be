# core/models.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional


class Coordinate(NamedTuple):
    latitude: float
    longitude: float


# Coordenada inicial del mapa (Tokio)
DEFAULT_LOCATION = Coordinate(35.6895, 139.6917)


@dataclass(frozen=True)
class PositionSample:
    """
    Muestra del sensor de posición. timestamp en milisegundos desde epoch.
    """
    coordinate: Coordinate
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    heading: Optional[float] = None
    speed: Optional[float] = None
    timestamp: Optional[int] = None


class DrawingMode(Enum):
    IDLE = "idle"
    LOCATION = "location"
    POLYGON = "polygon"
    ROUTE = "route"


class GeometryType:
    # Nombre usado en el archivo exportado
    LOCATION = "location"
    POLYGON = "polygon"
    ROUTE = "route"


# Mínimo de vértices para que una geometría esté completa
MIN_VERTICES = {
    DrawingMode.LOCATION: 1,
    DrawingMode.POLYGON: 3,
    DrawingMode.ROUTE: 2,
}


class VertexSequence(Sequence):
    """
    Vista de solo lectura sobre la lista de vértices del acumulador.
    Refleja cada append sin necesidad de pedir una nueva geometría.
    """

    def __init__(self, vertices: list[Coordinate]):
        self._vertices = vertices

    def __getitem__(self, index):
        return self._vertices[index]

    def __len__(self):
        return len(self._vertices)

    def __repr__(self):
        return f"VertexSequence({self._vertices!r})"

    def snapshot(self) -> tuple[Coordinate, ...]:
        return tuple(self._vertices)


@dataclass(frozen=True)
class PointGeometry:
    coordinate: Optional[Coordinate]
    kind = GeometryType.LOCATION
    mode = DrawingMode.LOCATION

    @property
    def vertices(self) -> tuple[Coordinate, ...]:
        return (self.coordinate,) if self.coordinate is not None else ()

    @property
    def is_complete(self) -> bool:
        return self.coordinate is not None


@dataclass(frozen=True)
class PolygonGeometry:
    vertices: VertexSequence
    kind = GeometryType.POLYGON
    mode = DrawingMode.POLYGON

    @property
    def is_complete(self) -> bool:
        return len(self.vertices) >= MIN_VERTICES[DrawingMode.POLYGON]


@dataclass(frozen=True)
class RouteGeometry:
    vertices: VertexSequence
    kind = GeometryType.ROUTE
    mode = DrawingMode.ROUTE

    @property
    def is_complete(self) -> bool:
        return len(self.vertices) >= MIN_VERTICES[DrawingMode.ROUTE]


Geometry = PointGeometry | PolygonGeometry | RouteGeometry


@dataclass(frozen=True)
class Metadata:
    region: str
    description: str
