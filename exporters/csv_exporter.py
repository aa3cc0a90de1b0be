# exporters/csv_exporter.py
import logging
import os
from decimal import Decimal
from typing import NamedTuple

from core.errors import ExportFailure, InsufficientVertices
from core.models import MIN_VERTICES, GeometryType, Metadata

logger = logging.getLogger(__name__)

MIME_TYPE = "text/csv"


class ExportResult(NamedTuple):
    wkt: str
    csv_line: str
    filename: str

    @property
    def content(self) -> bytes:
        return (self.csv_line + "\n").encode("utf-8")


def _format_number(value: float) -> str:
    # 139.0 -> "139", 139.1 -> "139.1", 5e-05 -> "0.00005" (sin notación científica)
    value = float(value)
    if value.is_integer():
        return str(int(value))
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _format_coords(vertices) -> str:
    return ", ".join(
        f"{_format_number(lon)} {_format_number(lat)}" for lat, lon in vertices
    )


class CSVExporter:
    @staticmethod
    def to_wkt(geometry) -> str:
        """
        Codifica la geometría en WKT con el orden (lon lat).
        El anillo del polígono NO se cierra: se respetan los vértices tal
        como se hicieron clic.
        Lanza InsufficientVertices si la geometría no está completa.
        """
        vertices = list(geometry.vertices)
        if not geometry.is_complete:
            raise InsufficientVertices(geometry.mode, len(vertices), MIN_VERTICES[geometry.mode])

        if geometry.kind == GeometryType.LOCATION:
            return f"POINT ({_format_coords(vertices)})"
        if geometry.kind == GeometryType.POLYGON:
            return f"POLYGON (({_format_coords(vertices)}))"
        if geometry.kind == GeometryType.ROUTE:
            return f"LINESTRING ({_format_coords(vertices)})"
        raise ValueError(f"Tipo de geometría '{geometry.kind}' no soportado por WKT.")

    @staticmethod
    def serialize(geometry, metadata: Metadata) -> ExportResult:
        wkt = CSVExporter.to_wkt(geometry)
        # region y descripción van sin escapar
        csv_line = f'"{wkt}",{metadata.region},{metadata.description}'
        filename = f"{geometry.kind}_{metadata.region}.csv"
        return ExportResult(wkt, csv_line, filename)

    @staticmethod
    def export(result: ExportResult, directory: str) -> str:
        if not directory:
            raise ExportFailure("No se seleccionó una carpeta de destino.")
        full_path = os.path.join(directory, result.filename)
        try:
            with open(full_path, "wb") as f:
                f.write(result.content)
        except OSError as e:
            raise ExportFailure(f"Error al crear el archivo CSV '{full_path}': {e}")
        logger.info("Exportado %s (%s, %d bytes)", full_path, MIME_TYPE, len(result.content))
        return full_path
