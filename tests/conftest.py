import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtGui import QColor, QImage, QPainter
from PySide6.QtWidgets import QApplication


@pytest.fixture
def qapp():
    """
    Creates the QApplication once and reuses it for every test function.
    """
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app


def make_quadrant_image(width=200, height=300):
    """Opaque image with a distinct colour in each quadrant."""
    image = QImage(width, height, QImage.Format_ARGB32)
    image.fill(QColor(255, 0, 0))
    painter = QPainter(image)
    painter.fillRect(width // 2, 0, width - width // 2, height // 2, QColor(0, 255, 0))
    painter.fillRect(width // 2, height // 2, width - width // 2, height - height // 2, QColor(0, 0, 255))
    painter.fillRect(0, height // 2, width // 2, height - height // 2, QColor(255, 255, 0))
    painter.end()
    return image


@pytest.fixture
def quadrant_image(qapp):
    return make_quadrant_image()


@pytest.fixture
def settings_path(tmp_path):
    return str(tmp_path / "settings.ini")
