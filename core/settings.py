# core/settings.py
from dataclasses import dataclass, field, replace

from core.models import DEFAULT_LOCATION, Coordinate


@dataclass(frozen=True)
class FeedSettings:
    high_accuracy: bool = True
    timeout_ms: int = 20000
    max_sample_age_ms: int = 2000


@dataclass(frozen=True)
class AppSettings:
    feed: FeedSettings = field(default_factory=FeedSettings)
    zoom: int = 15
    default_location: Coordinate = DEFAULT_LOCATION
    export_dir: str = ""

    def with_values(self, values: dict) -> "AppSettings":
        """
        Devuelve una copia con los valores del diálogo de configuración.
        Los textos vacíos conservan el valor actual.
        Lanza ValueError con un mensaje legible si algún valor no es válido.
        """
        timeout_ms = _parse_ms(values.get("timeout_ms", ""), "Tiempo de espera", self.feed.timeout_ms)
        max_age_ms = _parse_ms(values.get("max_sample_age_ms", ""), "Antigüedad máxima", self.feed.max_sample_age_ms)
        feed = FeedSettings(
            high_accuracy=bool(values.get("high_accuracy", self.feed.high_accuracy)),
            timeout_ms=timeout_ms,
            max_sample_age_ms=max_age_ms,
        )
        export_dir = str(values.get("export_dir", "")).strip() or self.export_dir
        return replace(self, feed=feed, export_dir=export_dir)


def _parse_ms(text, label: str, current: int) -> int:
    text = str(text).strip()
    if not text:
        return current
    try:
        value = int(text)
    except ValueError:
        raise ValueError(f"{label}: '{text}' no es un número entero de milisegundos.")
    if value < 0:
        raise ValueError(f"{label}: el valor no puede ser negativo ({value}).")
    return value
