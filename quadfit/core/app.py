import logging
import os

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QImage

from quadfit.core.editor import QuadEditorController
from quadfit.core.image_io import ImageLoadError, load_image
from quadfit.core.settings_controller import SettingsController

logger = logging.getLogger(__name__)


class App(QObject):
    """Application orchestrator tying settings, images and the editor together."""

    model_image_changed = Signal(QImage)
    garment_image_changed = Signal(QImage)
    load_failed = Signal(str)

    def __init__(self, settings_controller=None):
        super().__init__()
        self.settings_controller = settings_controller or SettingsController()
        default_config = self.settings_controller.warp_config()
        self.editor = QuadEditorController(default_config=default_config)
        self.model_image = QImage()
        self.garment_image = QImage()

    @property
    def last_directory(self):
        return self.settings_controller.last_directory

    @last_directory.setter
    def last_directory(self, value):
        self.settings_controller.last_directory = value

    def open_model_image(self, file_path) -> bool:
        image = self._load(file_path)
        if image is None:
            return False
        self.model_image = image
        self.model_image_changed.emit(image)
        return True

    def open_garment_image(self, file_path) -> bool:
        image = self._load(file_path)
        if image is None:
            return False
        self.garment_image = image
        self.garment_image_changed.emit(image)
        return True

    def _load(self, file_path):
        try:
            image = load_image(file_path)
        except ImageLoadError as e:
            logger.error("%s", e)
            self.load_failed.emit(str(e))
            return None
        self.last_directory = os.path.dirname(os.path.abspath(file_path))
        return image

    def save_settings(self) -> bool:
        self.settings_controller.update_warp_config(self.editor.config)
        return self.settings_controller.save_settings()
