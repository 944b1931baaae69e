"""
Vehicle Link QKD - Entry Point
==============================
Run this file to launch the desktop application:

    python main_app.py

Environment variables are described in config.py.
"""
import logging
import os
import sys

# Ensure the project root is on the Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from PyQt6.QtWidgets import QApplication

import config
from ui.main_window import MainWindow


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    app = QApplication(sys.argv)
    app.setApplicationName("Vehicle Link QKD")

    window = MainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
