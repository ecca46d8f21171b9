import logging
import os
import sys

from PySide6.QtWidgets import QApplication

from quadfit.core.app import App
from quadfit.ui.main_window import MainWindow


def main(argv=None):
    argv = list(sys.argv if argv is None else argv)
    logging.basicConfig(
        level=os.environ.get("QUADFIT_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    q_app = QApplication(argv)
    app = App()
    window = MainWindow(app)
    window.show()

    # Optional positional arguments: model image, then garment image.
    paths = argv[1:3]
    if len(paths) > 0:
        app.open_model_image(paths[0])
    if len(paths) > 1:
        app.open_garment_image(paths[1])

    return q_app.exec()


if __name__ == "__main__":
    sys.exit(main())
