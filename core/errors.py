"""Jerarquía de excepciones de la aplicación."""

from __future__ import annotations

from core.models import DrawingMode


class GeoCaptureError(Exception):
    """Base de todos los errores propios."""


class SensorError(GeoCaptureError):
    """
    Error del sensor de posición. No es fatal: el sensor puede seguir
    reintentando y el dibujo en curso no se ve afectado.
    """

    DENIED = "denied"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"

    def __init__(self, kind: str, reason: str):
        self.kind = kind
        self.reason = reason
        super().__init__(reason)


_GEOMETRY_NAMES = {
    DrawingMode.LOCATION: "Una ubicación",
    DrawingMode.POLYGON: "Un polígono",
    DrawingMode.ROUTE: "Una ruta",
}


class InsufficientVertices(GeoCaptureError, ValueError):
    """Se intentó guardar con menos puntos de los que exige el modo."""

    def __init__(self, mode: DrawingMode, have: int, need: int):
        self.mode = mode
        self.have = have
        self.need = need
        unit = "punto" if need == 1 else "puntos"
        super().__init__(
            f"{_GEOMETRY_NAMES.get(mode, 'La geometría')} necesita al menos "
            f"{need} {unit} (hay {have})."
        )


class NoActiveDrawing(GeoCaptureError, ValueError):
    def __init__(self):
        super().__init__("Seleccione un modo de dibujo (Ubicación, Polígono o Ruta) antes de guardar.")


class WrongModeAppend(GeoCaptureError, RuntimeError):
    """
    Se intentó agregar un vértice a un modo que no es el activo.
    Indica un manejador de eventos obsoleto; es un defecto, no un error de usuario.
    """

    def __init__(self, requested: DrawingMode, active: DrawingMode):
        self.requested = requested
        self.active = active
        super().__init__(
            f"append para el modo '{requested.value}' con el modo '{active.value}' activo"
        )


class ExportFailure(GeoCaptureError, RuntimeError):
    """La exportación falló; la geometría acumulada se conserva."""
