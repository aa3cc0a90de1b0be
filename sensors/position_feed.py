# sensors/position_feed.py
import itertools
import logging
import math
import time
from dataclasses import replace
from typing import Callable, Optional

from PySide6.QtPositioning import QGeoPositionInfo, QGeoPositionInfoSource

from core.errors import SensorError
from core.models import Coordinate, PositionSample
from core.settings import FeedSettings

logger = logging.getLogger(__name__)

SampleCallback = Callable[[PositionSample], None]
ErrorCallback = Callable[[SensorError], None]

_ERROR_MAP = {
    QGeoPositionInfoSource.Error.AccessError:
        (SensorError.DENIED, "Permiso de ubicación denegado."),
    QGeoPositionInfoSource.Error.ClosedError:
        (SensorError.UNAVAILABLE, "Posición no disponible: la fuente de posicionamiento se cerró."),
    QGeoPositionInfoSource.Error.UpdateTimeoutError:
        (SensorError.TIMEOUT, "Tiempo de espera agotado al obtener la posición."),
    QGeoPositionInfoSource.Error.UnknownSourceError:
        (SensorError.UNKNOWN, "Error desconocido de la fuente de posicionamiento."),
}


def _optional(value) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    return None if math.isnan(value) else value


def sample_from_position_info(info: QGeoPositionInfo) -> PositionSample:
    """Convierte un QGeoPositionInfo en PositionSample (atributos ausentes -> None)."""
    coord = info.coordinate()

    def attribute(attr):
        return _optional(info.attribute(attr)) if info.hasAttribute(attr) else None

    stamp = info.timestamp()
    return PositionSample(
        coordinate=Coordinate(coord.latitude(), coord.longitude()),
        altitude=_optional(coord.altitude()),
        accuracy=attribute(QGeoPositionInfo.Attribute.HorizontalAccuracy),
        heading=attribute(QGeoPositionInfo.Attribute.Direction),
        speed=attribute(QGeoPositionInfo.Attribute.GroundSpeed),
        timestamp=stamp.toMSecsSinceEpoch() if stamp.isValid() else None,
    )


def _default_source():
    return QGeoPositionInfoSource.createDefaultSource(None)


def _now_ms() -> int:
    return int(time.time() * 1000)


class PositionFeed:
    """
    Envuelve una fuente de posición continua (QGeoPositionInfoSource).

    La fuente se inicia con la primera suscripción y se detiene al quitar
    la última. Las muestras se entregan en orden estricto de timestamp; las
    muestras más viejas que max_sample_age_ms se descartan. Los errores no
    detienen el feed: los reintentos son cosa de la fuente.
    """

    def __init__(self, settings: FeedSettings = FeedSettings(),
                 source_factory: Optional[Callable] = None,
                 clock: Optional[Callable[[], int]] = None):
        self.settings = settings
        self._source_factory = source_factory or _default_source
        self._clock = clock or _now_ms
        self._source = None
        self._subscribers: dict[int, tuple[SampleCallback, ErrorCallback]] = {}
        self._ids = itertools.count(1)
        self._last_timestamp: Optional[int] = None
        self.last_sample: Optional[PositionSample] = None

    @property
    def is_running(self) -> bool:
        return self._source is not None

    def start(self, on_sample: SampleCallback, on_error: ErrorCallback) -> Optional[int]:
        """
        Registra un suscriptor y arranca la fuente con el primero.
        Sin fuente de posicionamiento devuelve None y no queda nada registrado,
        de modo que una llamada posterior vuelve a intentarlo.
        """
        handle = next(self._ids)
        self._subscribers[handle] = (on_sample, on_error)
        if len(self._subscribers) == 1 and not self._start_source():
            del self._subscribers[handle]
            on_error(SensorError(
                SensorError.UNAVAILABLE, "No hay ninguna fuente de posicionamiento disponible."))
            return None
        return handle

    def stop(self, handle: Optional[int]):
        # Idempotente: un handle desconocido o ya detenido no hace nada
        if self._subscribers.pop(handle, None) is None:
            return
        if not self._subscribers:
            self._stop_source()

    def _start_source(self) -> bool:
        source = self._source_factory()
        if source is None:
            logger.warning("No hay ninguna fuente de posicionamiento disponible")
            return False
        methods = (QGeoPositionInfoSource.PositioningMethod.SatellitePositioningMethods
                   if self.settings.high_accuracy
                   else QGeoPositionInfoSource.PositioningMethod.AllPositioningMethods)
        source.setPreferredPositioningMethods(methods)
        source.positionUpdated.connect(self._on_position_updated)
        source.errorOccurred.connect(self._on_error_occurred)
        self._source = source
        source.startUpdates()
        # Límite para la primera posición; al vencer la fuente emite UpdateTimeoutError
        source.requestUpdate(self.settings.timeout_ms)
        logger.info("Fuente de posición iniciada (alta precisión=%s, timeout=%d ms, antigüedad máx=%d ms)",
                    self.settings.high_accuracy, self.settings.timeout_ms, self.settings.max_sample_age_ms)
        return True

    def _stop_source(self):
        source, self._source = self._source, None
        self._last_timestamp = None
        if source is None:
            return
        source.stopUpdates()
        source.positionUpdated.disconnect(self._on_position_updated)
        source.errorOccurred.disconnect(self._on_error_occurred)
        logger.info("Fuente de posición detenida")

    def _on_position_updated(self, info: QGeoPositionInfo):
        self.deliver(sample_from_position_info(info))

    def _on_error_occurred(self, error):
        if error == QGeoPositionInfoSource.Error.NoError:
            return
        kind, reason = _ERROR_MAP.get(error, (SensorError.UNKNOWN, f"Error de posicionamiento: {error}"))
        self.deliver_error(SensorError(kind, reason))

    def deliver(self, sample: PositionSample) -> bool:
        now = self._clock()
        if sample.timestamp is None:
            sample = replace(sample, timestamp=now)
        max_age = self.settings.max_sample_age_ms
        # max_sample_age_ms == 0: sin límite de antigüedad
        if max_age > 0 and now - sample.timestamp > max_age:
            logger.debug("Muestra descartada por antigua (%d ms)", now - sample.timestamp)
            return False
        if self._last_timestamp is not None and sample.timestamp <= self._last_timestamp:
            logger.debug("Muestra fuera de orden descartada (%d <= %d)", sample.timestamp, self._last_timestamp)
            return False
        self._last_timestamp = sample.timestamp
        self.last_sample = sample
        for on_sample, _ in list(self._subscribers.values()):
            on_sample(sample)
        return True

    def deliver_error(self, error: SensorError):
        logger.warning("Error de posición: %s", error.reason)
        for _, on_error in list(self._subscribers.values()):
            on_error(error)
