# core/projection.py
from pyproj import Transformer

from core.models import Coordinate

# Circunferencia ecuatorial en metros (EPSG:3857)
EARTH_CIRCUMFERENCE = 40075016.686
TILE_SIZE = 256


class MercatorProjection:
    """
    WGS84 (EPSG:4326) <-> Web Mercator (EPSG:3857).
    Las coordenadas de escena son metros Mercator con el eje Y invertido
    (en Qt la Y crece hacia abajo).
    """

    def __init__(self):
        self._forward = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
        self._inverse = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)

    def to_scene(self, coord: Coordinate) -> tuple[float, float]:
        x, y = self._forward.transform(coord[1], coord[0])
        return x, -y

    def to_coordinate(self, x: float, y: float) -> Coordinate:
        lon, lat = self._inverse.transform(x, -y)
        return Coordinate(lat, lon)

    @staticmethod
    def pixels_per_metre(zoom: int) -> float:
        return TILE_SIZE * (2 ** zoom) / EARTH_CIRCUMFERENCE
