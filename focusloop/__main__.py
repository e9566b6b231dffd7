"""Allow running FocusLoop as a module: python -m focusloop."""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .app import FocusLoopApp


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("FOCUSLOOP_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    logging.getLogger(__name__).info("FocusLoop ready!")

    app = QApplication(sys.argv)
    app.setApplicationName("FocusLoop")
    app.setOrganizationName("FocusLoop")

    window = FocusLoopApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
