from PySide6.QtCore import QSignalBlocker, Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSlider,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from quadfit.core.settings_controller import MAX_SUBDIVISIONS
from quadfit.core.warp import FAST_PATH_SUBDIVISIONS, CompositeMode, WarpConfig

MIN_OPACITY_PERCENT = 20


class FitPanel(QWidget):
    """Controls for opacity, blend mode, warp quality and handle visibility."""

    def __init__(self, controller, parent=None):
        super().__init__(parent)
        self.controller = controller

        layout = QVBoxLayout(self)
        form = QFormLayout()
        layout.addLayout(form)

        opacity_row = QHBoxLayout()
        self.opacity_slider = QSlider(Qt.Horizontal, self)
        self.opacity_slider.setRange(MIN_OPACITY_PERCENT, 100)
        self.opacity_label = QLabel(self)
        self.opacity_label.setMinimumWidth(40)
        opacity_row.addWidget(self.opacity_slider)
        opacity_row.addWidget(self.opacity_label)
        form.addRow("Opacity", opacity_row)

        self.mode_combo = QComboBox(self)
        for mode in CompositeMode:
            self.mode_combo.addItem(mode.label, mode.value)
        form.addRow("Blend", self.mode_combo)

        self.subdivisions_spin = QSpinBox(self)
        self.subdivisions_spin.setRange(FAST_PATH_SUBDIVISIONS, MAX_SUBDIVISIONS)
        self.subdivisions_spin.setToolTip(
            "Grid density of the warp. 1 is fastest, higher values follow the corners more smoothly."
        )
        form.addRow("Warp quality", self.subdivisions_spin)

        self.handles_checkbox = QCheckBox("Show handles", self)
        layout.addWidget(self.handles_checkbox)

        self.reset_button = QPushButton("Reset", self)
        layout.addWidget(self.reset_button, alignment=Qt.AlignRight)
        layout.addStretch(1)

        self.sync_from_config(controller.config)

        self.opacity_slider.valueChanged.connect(self._on_opacity_changed)
        self.mode_combo.currentIndexChanged.connect(self._on_mode_changed)
        self.subdivisions_spin.valueChanged.connect(self.controller.set_subdivisions)
        self.handles_checkbox.toggled.connect(self.controller.set_show_handles)
        self.reset_button.clicked.connect(self.controller.reset)
        self.controller.config_changed.connect(self.sync_from_config)

    def sync_from_config(self, config: WarpConfig):
        percent = int(round(config.opacity * 100))
        with QSignalBlocker(self.opacity_slider):
            self.opacity_slider.setValue(percent)
        self.opacity_label.setText(f"{percent}%")
        with QSignalBlocker(self.mode_combo):
            self.mode_combo.setCurrentIndex(self.mode_combo.findData(config.composite_mode.value))
        with QSignalBlocker(self.subdivisions_spin):
            self.subdivisions_spin.setValue(config.subdivisions)
        with QSignalBlocker(self.handles_checkbox):
            self.handles_checkbox.setChecked(config.show_handles)

    def _on_opacity_changed(self, value):
        self.opacity_label.setText(f"{value}%")
        self.controller.set_opacity(value / 100.0)

    def _on_mode_changed(self, index):
        mode = self.mode_combo.itemData(index)
        if mode is not None:
            self.controller.set_composite_mode(mode)
