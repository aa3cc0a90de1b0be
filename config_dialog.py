from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout,
    QLineEdit, QCheckBox,
    QDialogButtonBox
)
from PySide6.QtCore import Qt

from core.settings import AppSettings


class ConfigDialog(QDialog):
    def __init__(self, settings: AppSettings, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Configuraciones")
        self._settings = settings
        self._build_ui()

    def _build_ui(self):
        # Layout principal
        layout = QVBoxLayout(self)

        # Formulario de ajustes del sensor y exportación
        form = QFormLayout()
        self.accuracy_checkbox = QCheckBox()
        self.accuracy_checkbox.setChecked(self._settings.feed.high_accuracy)
        form.addRow("Alta precisión:", self.accuracy_checkbox)

        self.timeout_edit = QLineEdit(str(self._settings.feed.timeout_ms))
        self.timeout_edit.setPlaceholderText("Ej. 20000")
        form.addRow("Tiempo de espera (ms):", self.timeout_edit)

        self.max_age_edit = QLineEdit(str(self._settings.feed.max_sample_age_ms))
        self.max_age_edit.setPlaceholderText("Ej. 2000 (0 = sin límite)")
        form.addRow("Antigüedad máxima (ms):", self.max_age_edit)

        # Carpeta por defecto
        self.default_dir_edit = QLineEdit(self._settings.export_dir)
        self.default_dir_edit.setPlaceholderText("Ruta por defecto")
        form.addRow("Carpeta de exportación:", self.default_dir_edit)

        layout.addLayout(form)

        # Botones Aceptar / Cancelar
        buttons = QDialogButtonBox(
            QDialogButtonBox.Ok | QDialogButtonBox.Cancel,
            Qt.Horizontal, self
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def get_values(self):
        """
        Devuelve un dict con los valores ingresados,
        tras un exec() exitoso. Se validan en AppSettings.with_values.
        """
        return {
            "high_accuracy":     self.accuracy_checkbox.isChecked(),
            "timeout_ms":        self.timeout_edit.text().strip(),
            "max_sample_age_ms": self.max_age_edit.text().strip(),
            "export_dir":        self.default_dir_edit.text().strip()
        }
