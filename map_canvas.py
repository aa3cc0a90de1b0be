import itertools
import logging

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QTransform
from PySide6.QtWidgets import (
    QApplication,
    QGraphicsEllipseItem,
    QGraphicsItem,
    QGraphicsPathItem,
    QGraphicsPolygonItem,
    QGraphicsScene,
    QGraphicsSimpleTextItem,
    QGraphicsView,
)

from core.geometry import LIVE_MARKER, MARKER, GeometryBuilder
from core.models import Coordinate, GeometryType
from core.projection import MercatorProjection

logger = logging.getLogger(__name__)

# Mitad del ancho del mundo en metros Mercator
WORLD_HALF = 20037508.342789244
MARKER_RADIUS = 6


class MapCanvas(QGraphicsView):
    """
    Superficie del mapa: un QGraphicsView en Web Mercator.
    Dibuja marcadores, polígonos y polilíneas y emite un clic por cada
    pulsación que no sea un arrastre.
    """
    clicked = Signal(float, float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.projection = MercatorProjection()
        self._scene = QGraphicsScene(self)
        self._scene.setSceneRect(-WORLD_HALF, -WORLD_HALF, 2 * WORLD_HALF, 2 * WORLD_HALF)
        self.setScene(self._scene)
        self.setMinimumSize(400, 300)
        self.setStyleSheet("background-color:white; border:1px solid #ccc; padding:0px;")
        self.setDragMode(QGraphicsView.ScrollHandDrag)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self._overlays = {}  # handle -> (kind, item)
        self._ids = itertools.count(1)
        self._press_pos = None

    # --- Eventos ---
    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._press_pos = event.position().toPoint()
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event):
        super().mouseReleaseEvent(event)
        if event.button() != Qt.LeftButton or self._press_pos is None:
            return
        release_pos = event.position().toPoint()
        moved = (release_pos - self._press_pos).manhattanLength()
        self._press_pos = None
        # Un arrastre mueve el mapa, no agrega vértices
        if moved >= QApplication.startDragDistance():
            return
        scene_pt = self.mapToScene(release_pos)
        coord = self.projection.to_coordinate(scene_pt.x(), scene_pt.y())
        self.clicked.emit(coord.latitude, coord.longitude)

    def wheelEvent(self, event):
        factor = 2.0 if event.angleDelta().y() > 0 else 0.5
        self.scale(factor, factor)

    # --- Superficie del mapa ---
    def _points(self, coords):
        return [self.projection.to_scene(c) for c in coords]

    def _register(self, kind, item):
        handle = next(self._ids)
        self._scene.addItem(item)
        self._overlays[handle] = (kind, item)
        return handle

    def add_marker(self, coords, label=None, live=False):
        kind = LIVE_MARKER if live else MARKER
        item = QGraphicsEllipseItem(-MARKER_RADIUS, -MARKER_RADIUS, 2 * MARKER_RADIUS, 2 * MARKER_RADIUS)
        item.setPen(GeometryBuilder.pen_for(kind))
        item.setBrush(GeometryBuilder.brush_for(kind))
        # Tamaño fijo en pantalla
        item.setFlag(QGraphicsItem.ItemIgnoresTransformations)
        item.setZValue(2 if live else 1)
        if label:
            text = QGraphicsSimpleTextItem(label, item)
            text.setPos(MARKER_RADIUS + 2, -2 * MARKER_RADIUS - 4)
        x, y = self._points(coords[-1:])[0]
        item.setPos(x, y)
        return self._register(kind, item)

    def add_polygon(self, coords):
        item = QGraphicsPolygonItem(GeometryBuilder.polygon_outline(self._points(coords)))
        item.setPen(GeometryBuilder.pen_for(GeometryType.POLYGON))
        item.setBrush(GeometryBuilder.brush_for(GeometryType.POLYGON))
        return self._register(GeometryType.POLYGON, item)

    def add_polyline(self, coords):
        item = QGraphicsPathItem(GeometryBuilder.route_path(self._points(coords)))
        item.setPen(GeometryBuilder.pen_for(GeometryType.ROUTE))
        return self._register(GeometryType.ROUTE, item)

    def update_overlay(self, handle, coords):
        kind, item = self._overlays[handle]
        points = self._points(coords)
        if kind == GeometryType.POLYGON:
            item.setPolygon(GeometryBuilder.polygon_outline(points))
        elif kind == GeometryType.ROUTE:
            item.setPath(GeometryBuilder.route_path(points))
        else:
            item.setPos(*points[-1])

    def remove_overlay(self, handle):
        entry = self._overlays.pop(handle, None)
        if entry is None:
            logger.debug("Overlay %s ya eliminado", handle)
            return
        self._scene.removeItem(entry[1])

    def set_view(self, center, zoom):
        s = self.projection.pixels_per_metre(zoom)
        self.setTransform(QTransform.fromScale(s, s))
        x, y = self.projection.to_scene(center)
        self.centerOn(x, y)

    def subscribe_click(self, callback):
        def on_clicked(lat, lon):
            callback(Coordinate(lat, lon))
        self.clicked.connect(on_clicked)
        return on_clicked

    def unsubscribe_click(self, token):
        self.clicked.disconnect(token)
