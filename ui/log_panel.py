"""
LogPanel
========
Read-only console showing the session's event log, newest line last.
"""
from PyQt6.QtWidgets import QGroupBox, QPlainTextEdit, QVBoxLayout


class LogPanel(QGroupBox):

    _MAX_BLOCKS = 2000

    def __init__(self, parent=None):
        super().__init__("Mission Log", parent)
        layout = QVBoxLayout(self)
        self._text = QPlainTextEdit()
        self._text.setReadOnly(True)
        self._text.setMaximumBlockCount(self._MAX_BLOCKS)
        layout.addWidget(self._text)

    def append(self, line: str) -> None:
        self._text.appendPlainText(f"> {line}")
        bar = self._text.verticalScrollBar()
        bar.setValue(bar.maximum())

    def clear(self) -> None:
        self._text.clear()
