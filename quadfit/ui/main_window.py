from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QDockWidget,
    QFileDialog,
    QMainWindow,
    QMessageBox,
)

from quadfit.ui.fit_canvas import FitCanvas
from quadfit.ui.fit_panel import FitPanel

IMAGE_FILTER = "Image Files (*.png *.jpg *.jpeg *.bmp *.webp)"


class MainWindow(QMainWindow):
    def __init__(self, app):
        super().__init__()
        self.app = app
        self.setWindowTitle("Quad Fit")
        self.resize(1100, 800)

        self.canvas = FitCanvas(self.app.editor)
        self.setCentralWidget(self.canvas)

        self.fit_panel = FitPanel(self.app.editor)
        self.fit_dock = QDockWidget("Fit", self)
        self.fit_dock.setWidget(self.fit_panel)
        self.addDockWidget(Qt.RightDockWidgetArea, self.fit_dock)

        self.app.model_image_changed.connect(self.canvas.set_model_image)
        self.app.garment_image_changed.connect(self.canvas.set_garment_image)
        self.app.load_failed.connect(self.show_load_error)

        self._build_menu()
        self.statusBar().showMessage(
            "Open a model photo and a garment, then drag the corners to fit."
        )

    def _build_menu(self):
        file_menu = self.menuBar().addMenu("&File")

        self.open_model_action = QAction("Open &Model Image...", self)
        self.open_model_action.setShortcut(QKeySequence.Open)
        self.open_model_action.triggered.connect(self.open_model_image_dialog)
        file_menu.addAction(self.open_model_action)

        self.open_garment_action = QAction("Open &Garment Image...", self)
        self.open_garment_action.setShortcut("Ctrl+G")
        self.open_garment_action.triggered.connect(self.open_garment_image_dialog)
        file_menu.addAction(self.open_garment_action)

        file_menu.addSeparator()

        self.copy_action = QAction("&Copy Composite", self)
        self.copy_action.setShortcut(QKeySequence.Copy)
        self.copy_action.triggered.connect(self.copy_composite)
        file_menu.addAction(self.copy_action)

        self.reset_action = QAction("&Reset Fit", self)
        self.reset_action.setShortcut("Ctrl+R")
        self.reset_action.triggered.connect(self.app.editor.reset)
        file_menu.addAction(self.reset_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

    def open_model_image_dialog(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open Model Image", self.app.last_directory, IMAGE_FILTER
        )
        if file_path:
            self.app.open_model_image(file_path)

    def open_garment_image_dialog(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open Garment Image", self.app.last_directory, IMAGE_FILTER
        )
        if file_path:
            self.app.open_garment_image(file_path)

    def copy_composite(self):
        image = self.canvas.composite_image()
        if image.isNull():
            return
        QApplication.clipboard().setImage(image)
        self.statusBar().showMessage("Composite copied to clipboard", 3000)

    def show_load_error(self, message):
        error_box = QMessageBox(self)
        error_box.setIcon(QMessageBox.Critical)
        error_box.setText("Error opening image")
        error_box.setInformativeText(message)
        error_box.setStandardButtons(QMessageBox.Ok)
        error_box.exec()

    def closeEvent(self, event):
        self.app.save_settings()
        event.accept()
