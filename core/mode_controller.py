# core/mode_controller.py
import logging
from typing import Optional

from core.coordinate_manager import GeometryAccumulator
from core.models import DEFAULT_LOCATION, Coordinate, DrawingMode

logger = logging.getLogger(__name__)


class ModeController:
    """
    Máquina de estados con un único modo activo:
    IDLE, LOCATION, POLYGON o ROUTE.

    Arranca en IDLE con una ubicación por defecto ya cargada para que el
    mapa muestre un marcador antes de cualquier interacción.
    """

    def __init__(self, default_location: Optional[Coordinate] = DEFAULT_LOCATION):
        self._mode = DrawingMode.IDLE
        self.geometry = GeometryAccumulator(self.active_mode, initial_location=default_location)

    def active_mode(self) -> DrawingMode:
        return self._mode

    def reset_all(self):
        self.geometry.clear_all()

    def enter(self, mode: DrawingMode):
        # Siempre se limpia antes de cambiar: nada pasa de un modo a otro
        self.reset_all()
        previous, self._mode = self._mode, mode
        logger.info("Modo %s -> %s", previous.value, mode.value)

    def reset_to_idle(self):
        self.enter(DrawingMode.IDLE)
