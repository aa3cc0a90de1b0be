# core/geometry.py
from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QBrush, QColor, QPainterPath, QPen, QPolygonF

from core.models import GeometryType

MARKER = "marker"
LIVE_MARKER = "live"


class GeometryBuilder:
    """
    Construye los objetos de dibujo de Qt para los overlays del mapa
    a partir de puntos ya proyectados a coordenadas de escena.
    """

    @staticmethod
    def route_path(points: list[tuple[float, float]]):
        """
        Devuelve un QPainterPath abierto que une los puntos en orden,
        o None si no hay puntos.
        """
        if not points:
            return None
        path = QPainterPath(QPointF(points[0][0], points[0][1]))
        for x, y in points[1:]:
            path.lineTo(QPointF(x, y))
        return path

    @staticmethod
    def polygon_outline(points: list[tuple[float, float]]):
        # QGraphicsPolygonItem cierra el contorno al dibujar;
        # los vértices no se modifican
        return QPolygonF([QPointF(x, y) for x, y in points])

    @staticmethod
    def pen_for(kind: str):
        if kind == GeometryType.ROUTE:
            pen = QPen(Qt.blue, 3)
        elif kind == GeometryType.POLYGON:
            pen = QPen(Qt.darkGreen, 2)
            pen.setStyle(Qt.SolidLine)
        else:
            pen = QPen(Qt.darkRed, 1)
        # Ancho en píxeles, independiente del zoom
        pen.setCosmetic(True)
        return pen

    @staticmethod
    def brush_for(kind: str):
        if kind == GeometryType.POLYGON:
            return QBrush(QColor(0, 128, 0, 60))
        if kind == MARKER:
            return QBrush(Qt.red)
        if kind == LIVE_MARKER:
            return QBrush(QColor(30, 144, 255))
        return QBrush(Qt.NoBrush)
