import logging

from PIL import Image, ImageOps, ImageQt, UnidentifiedImageError
from PySide6.QtGui import QImage

logger = logging.getLogger(__name__)


class ImageLoadError(OSError):
    """Raised when an image file cannot be decoded."""


def pil_to_qimage(image: Image.Image) -> QImage:
    qimage = ImageQt.toqimage(image.convert("RGBA"))
    # ``toqimage`` shares the PIL buffer; copy so the QImage owns its pixels.
    return qimage.convertToFormat(QImage.Format_ARGB32).copy()


def load_image(filename) -> QImage:
    """Decode *filename* into an ARGB32 ``QImage`` honouring EXIF rotation."""

    try:
        with Image.open(filename) as img:
            img = ImageOps.exif_transpose(img)
            qimage = pil_to_qimage(img)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ImageLoadError(f"Could not load image {filename}: {e}") from e

    if qimage.isNull():
        raise ImageLoadError(f"Could not load image {filename}: empty image")
    logger.info("Loaded %s (%dx%d)", filename, qimage.width(), qimage.height())
    return qimage
