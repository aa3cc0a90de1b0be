# core/map_bridge.py
import logging
from typing import Any, Callable, Optional, Protocol

from core.errors import SensorError
from core.mode_controller import ModeController
from core.models import Coordinate, DrawingMode, Metadata, PositionSample
from exporters.csv_exporter import CSVExporter, ExportResult

logger = logging.getLogger(__name__)

LIVE_LABEL = "¡Aquí!"

_DRAWING_MODES = (DrawingMode.LOCATION, DrawingMode.POLYGON, DrawingMode.ROUTE)


class MapSurface(Protocol):
    def add_marker(self, coords: list[Coordinate], label: Optional[str] = None,
                   live: bool = False) -> Any: ...
    def add_polygon(self, coords: list[Coordinate]) -> Any: ...
    def add_polyline(self, coords: list[Coordinate]) -> Any: ...
    def update_overlay(self, handle: Any, coords: list[Coordinate]): ...
    def remove_overlay(self, handle: Any): ...
    def set_view(self, center: Coordinate, zoom: int): ...
    def subscribe_click(self, callback: Callable[[Coordinate], Any]) -> Any: ...
    def unsubscribe_click(self, token: Any): ...


class MapInteractionBridge:
    """
    Único componente que toca los overlays del mapa.

    Traduce los clics del mapa y las muestras del sensor en llamadas al
    ModeController / GeometryAccumulator y vuelve a dibujar el overlay del
    modo activo. Mantiene un único overlay por forma: se crea en el primer
    uso y después solo se actualizan sus vértices.

    Los manejadores leen el estado del controlador en el momento del evento;
    nada se captura al suscribirse.
    """

    def __init__(self, controller: ModeController, surface: MapSurface,
                 feed=None, zoom: int = 15,
                 notify: Optional[Callable[[str], None]] = None):
        self.controller = controller
        self.surface = surface
        self.feed = feed
        self.zoom = zoom
        self._notify = notify
        self._overlays: dict[DrawingMode, Any] = {}
        self._live_marker = None
        self._last_sample: Optional[PositionSample] = None
        self._subscription = None
        self._click_token = surface.subscribe_click(self.handle_click)
        # Marcador inicial (ubicación por defecto)
        self.redraw(DrawingMode.LOCATION)

    # --- Seguimiento de posición ---
    @property
    def is_tracking(self) -> bool:
        return self._subscription is not None

    @property
    def last_sample(self) -> Optional[PositionSample]:
        return self._last_sample

    def start_tracking(self):
        if self.feed is None or self._subscription is not None:
            return
        self._subscription = self.feed.start(self.handle_sample, self.handle_sensor_error)
        if self._subscription is None:
            # Sin fuente: el error ya se notificó y el próximo intento vuelve a probar
            return
        logger.info("Seguimiento de posición iniciado")

    def stop_tracking(self):
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            self.feed.stop(subscription)
            logger.info("Seguimiento de posición detenido")
        if self._live_marker is not None:
            self.surface.remove_overlay(self._live_marker)
            self._live_marker = None

    def handle_sample(self, sample: PositionSample):
        self._last_sample = sample
        coord = sample.coordinate
        if self._live_marker is None:
            self._live_marker = self.surface.add_marker([coord], label=LIVE_LABEL, live=True)
        else:
            self.surface.update_overlay(self._live_marker, [coord])
        # No mover la vista mientras el usuario dibuja
        if self.controller.active_mode() == DrawingMode.IDLE:
            self.surface.set_view(coord, self.zoom)

    def handle_sensor_error(self, error: SensorError):
        logger.warning("Error del sensor de posición (%s): %s", error.kind, error.reason)
        if self._notify is not None:
            self._notify(f"Ubicación no disponible: {error.reason}")

    def show_current_location(self) -> bool:
        if self._last_sample is None:
            return False
        self.surface.set_view(self._last_sample.coordinate, self.zoom)
        return True

    # --- Dibujo ---
    def handle_click(self, coord: Coordinate) -> bool:
        # El modo se lee al despachar el clic, no al suscribirse
        mode = self.controller.active_mode()
        if mode == DrawingMode.IDLE:
            return False
        self.controller.geometry.append(mode, coord)
        self.redraw(mode)
        return True

    def redraw(self, mode: DrawingMode):
        coords = list(self.controller.geometry.current(mode).vertices)
        handle = self._overlays.get(mode)
        if not coords:
            if handle is not None:
                self.surface.remove_overlay(self._overlays.pop(mode))
            return
        if handle is not None:
            self.surface.update_overlay(handle, coords)
        elif mode == DrawingMode.LOCATION:
            self._overlays[mode] = self.surface.add_marker(coords[-1:])
        elif mode == DrawingMode.POLYGON:
            self._overlays[mode] = self.surface.add_polygon(coords)
        elif mode == DrawingMode.ROUTE:
            self._overlays[mode] = self.surface.add_polyline(coords)

    def clear_overlays(self):
        # El marcador de posición en vivo no se toca
        for mode in _DRAWING_MODES:
            handle = self._overlays.pop(mode, None)
            if handle is not None:
                self.surface.remove_overlay(handle)

    def start_drawing(self, mode: DrawingMode):
        self.clear_overlays()
        self.controller.enter(mode)

    def reset(self):
        self.clear_overlays()
        self.controller.reset_to_idle()

    def save(self, metadata: Metadata, writer: Callable[[ExportResult], Any]) -> ExportResult:
        """
        Valida, serializa y entrega el resultado a writer.
        InsufficientVertices / NoActiveDrawing: no se limpia nada.
        ExportFailure (lanzada por writer): la geometría se conserva para reintentar.
        """
        mode = self.controller.active_mode()
        self.controller.geometry.require_savable(mode)
        result = CSVExporter.serialize(self.controller.geometry.current(mode), metadata)
        writer(result)
        self.reset()
        return result

    def close(self):
        self.stop_tracking()
        if self._click_token is not None:
            self.surface.unsubscribe_click(self._click_token)
            self._click_token = None
