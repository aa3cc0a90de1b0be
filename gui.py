import logging
import sys

from PySide6.QtGui import QAction, QCloseEvent, QResizeEvent
from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QToolBar,
    QStyle,
    QMessageBox,
    QVBoxLayout,
    QHBoxLayout,
    QFormLayout,
    QLineEdit,
    QPushButton,
    QLabel,
    QFileDialog,
)

from config_dialog import ConfigDialog
from core.errors import ExportFailure, InsufficientVertices, NoActiveDrawing
from core.map_bridge import MapInteractionBridge
from core.mode_controller import ModeController
from core.models import DrawingMode, Metadata
from core.settings import AppSettings
from exporters.csv_exporter import CSVExporter
from map_canvas import MapCanvas
from sensors.position_feed import PositionFeed

logger = logging.getLogger(__name__)

MODE_LABELS = {
    DrawingMode.IDLE: "Sin dibujo",
    DrawingMode.LOCATION: "Ubicación",
    DrawingMode.POLYGON: "Polígono",
    DrawingMode.ROUTE: "Ruta",
}


class MainWindow(QMainWindow):
    def __init__(self, settings: AppSettings = AppSettings()):
        super().__init__()
        self.setWindowTitle("SIG: Ubicación actual y dibujo")
        self.settings = settings
        self.controller = ModeController(settings.default_location)
        self.feed = PositionFeed(settings.feed)
        self._build_ui()
        self._create_toolbar()
        self.bridge = MapInteractionBridge(
            self.controller, self.canvas, self.feed,
            zoom=settings.zoom, notify=self._show_canvas_error,
        )
        # Conectado después del bridge: se ejecuta tras agregar el vértice
        self.canvas.clicked.connect(self._on_canvas_clicked)
        self.canvas.set_view(settings.default_location, settings.zoom)
        self.bridge.start_tracking()
        self._update_status()

    # --- Métodos para overlays en Canvas ---
    def _show_canvas_error(self, message: str):
        self.canvas_error_label.setText(message)
        self.canvas_error_label.adjustSize()
        self.canvas_error_label.show()
        self._position_canvas_widgets()

    def _clear_canvas_error(self):
        self.canvas_error_label.hide()
        self.canvas_error_label.setText("")

    def _position_canvas_widgets(self):
        if self.canvas_error_label.isVisible():
            self.canvas_error_label.move(
                self.canvas.width() // 2 - self.canvas_error_label.width() // 2,
                self.canvas.height() - self.canvas_error_label.height() - 10
            )
            self.canvas_error_label.raise_()

    def resizeEvent(self, event: QResizeEvent):
        super().resizeEvent(event)
        self._position_canvas_widgets()

    def closeEvent(self, event: QCloseEvent):
        # Garantiza que la suscripción al sensor no quede viva
        self.bridge.close()
        super().closeEvent(event)

    # --- Métodos de UI ---
    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)

        control_panel_widget = QWidget()
        control = QVBoxLayout(control_panel_widget)

        control.addWidget(QLabel("Dibujar:"))
        modes = QHBoxLayout()
        for mode in (DrawingMode.LOCATION, DrawingMode.POLYGON, DrawingMode.ROUTE):
            btn = QPushButton(MODE_LABELS[mode])
            btn.clicked.connect(lambda _checked=False, m=mode: self._on_start_drawing(m))
            modes.addWidget(btn)
        control.addLayout(modes)

        bl = QHBoxLayout()
        btn_reset = QPushButton("Reiniciar"); btn_reset.clicked.connect(self._on_reset); bl.addWidget(btn_reset)
        bl.addStretch()
        control.addLayout(bl)

        self.lbl_status = QLabel()
        control.addWidget(self.lbl_status)

        form = QFormLayout()
        self.le_region = QLineEdit(); self.le_region.setPlaceholderText("Ej. tokyo")
        form.addRow("Región:", self.le_region)
        self.le_description = QLineEdit()
        form.addRow("Descripción:", self.le_description)
        control.addLayout(form)

        sl = QHBoxLayout(); sl.addStretch()
        btn_save = QPushButton("Guardar CSV"); btn_save.clicked.connect(self._on_save); sl.addWidget(btn_save)
        control.addLayout(sl)
        control.addStretch()

        self.canvas = MapCanvas()

        self.canvas_error_label = QLabel(self.canvas)
        self.canvas_error_label.setStyleSheet("color: red; background-color: rgba(255, 255, 255, 210); padding: 5px; border: 1px solid red; border-radius: 3px;")
        self.canvas_error_label.hide()

        main_layout.addWidget(control_panel_widget, 1)
        main_layout.addWidget(self.canvas, 2)

    def _create_toolbar(self):
        tb = QToolBar("Principal"); self.addToolBar(tb)
        actions_data = [
            (QStyle.SP_DialogSaveButton, "Guardar CSV", self._on_save),
            None,
            (QStyle.SP_ArrowUp, "Mostrar ubicación actual", self._on_show_location),
            (QStyle.SP_MediaStop, "Detener seguimiento", self._on_stop_tracking),
            (QStyle.SP_MediaPlay, "Iniciar seguimiento", self._on_start_tracking),
            None,
            (QStyle.SP_FileDialogDetailedView, "Configuraciones", self._on_settings),
        ]
        for item_data in actions_data:
            if item_data is None: tb.addSeparator(); continue
            action = QAction(self.style().standardIcon(item_data[0]), item_data[1], self)
            action.triggered.connect(item_data[2])
            tb.addAction(action)

    def _update_status(self):
        mode = self.controller.active_mode()
        text = f"Modo: {MODE_LABELS[mode]}"
        if mode != DrawingMode.IDLE:
            text += f" ({self.controller.geometry.count(mode)} puntos)"
        if not self.bridge.is_tracking:
            text += " | Seguimiento detenido"
        self.lbl_status.setText(text)

    # --- Slots ---
    def _on_canvas_clicked(self, _lat, _lon):
        self._update_status()

    def _on_start_drawing(self, mode: DrawingMode):
        self.bridge.start_drawing(mode)
        self._update_status()

    def _on_reset(self):
        self.bridge.reset()
        self._update_status()

    def _on_show_location(self):
        if not self.bridge.show_current_location():
            QMessageBox.information(self, "Ubicación actual", "Todavía no se recibió ninguna posición del sensor.")

    def _on_stop_tracking(self):
        self.bridge.stop_tracking()
        self._update_status()

    def _on_start_tracking(self):
        self._clear_canvas_error()
        self.bridge.start_tracking()
        self._update_status()

    def _on_settings(self):
        dialog = ConfigDialog(self.settings, self)
        if not dialog.exec():
            return
        try:
            self.settings = self.settings.with_values(dialog.get_values())
        except ValueError as e:
            QMessageBox.warning(self, "Configuración inválida", str(e)); return
        # Los ajustes del sensor se aplican al reiniciar el seguimiento
        was_tracking = self.bridge.is_tracking
        self.bridge.stop_tracking()
        self.feed.settings = self.settings.feed
        if was_tracking: self.bridge.start_tracking()
        self._update_status()

    def _on_save(self):
        mode = self.controller.active_mode()
        try:
            self.controller.geometry.require_savable(mode)
        except (InsufficientVertices, NoActiveDrawing) as e:
            QMessageBox.warning(self, "No se puede guardar", str(e)); return

        dirp = self.settings.export_dir or QFileDialog.getExistingDirectory(self, "Seleccionar carpeta de exportación")
        if not dirp: return
        metadata = Metadata(self.le_region.text().strip(), self.le_description.text().strip())
        saved = []
        try:
            result = self.bridge.save(metadata, lambda r: saved.append(CSVExporter.export(r, dirp)))
        except (InsufficientVertices, NoActiveDrawing) as e:
            QMessageBox.warning(self, "No se puede guardar", str(e)); return
        except ExportFailure as e:
            QMessageBox.critical(self, "Error de Exportación", f"{e}\nLa geometría se conserva para reintentar."); return
        logger.info("Geometría guardada: %s", result.wkt)
        self.le_region.clear(); self.le_description.clear()
        self._update_status()
        QMessageBox.information(self, "Éxito", f"Archivo guardado en:\n{saved[0]}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    win = MainWindow()
    win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
