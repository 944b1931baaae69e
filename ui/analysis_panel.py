"""
AnalysisPanel
=============
Asks the narrative service to explain the session's latest event.

The HTTP call runs on a QThread so the window (and the session) keep
running while the model answers.  The client already turns every failure
into a readable message, so the panel only ever displays text.
"""
from typing import Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal
from PyQt6.QtWidgets import QGroupBox, QPushButton, QTextEdit, QVBoxLayout

from controller.session_state import LastEvent, SessionState
from services.narrative import NarrativeClient


class _AnalysisWorker(QObject):
    finished = pyqtSignal(str)

    def __init__(self, client: NarrativeClient, last_event: Optional[LastEvent]):
        super().__init__()
        self._client = client
        self._last_event = last_event

    def run(self) -> None:
        self.finished.emit(self._client.explain(self._last_event))


class AnalysisPanel(QGroupBox):

    def __init__(self, client: Optional[NarrativeClient] = None, parent=None):
        super().__init__("Intel Analysis", parent)
        self._client = client or NarrativeClient()
        self._last_event: Optional[LastEvent] = None
        self._busy_session = False
        self._thread: Optional[QThread] = None
        self._worker: Optional[_AnalysisWorker] = None

        layout = QVBoxLayout(self)
        self._output = QTextEdit()
        self._output.setReadOnly(True)
        self._output.setPlainText("Click below for analysis.")
        layout.addWidget(self._output)

        self._btn = QPushButton("Analyze Operation")
        self._btn.clicked.connect(self._on_analyze)
        layout.addWidget(self._btn)
        self._refresh_button()

    # ------------------------------------------------------------------ #
    #  Session-facing slot                                                 #
    # ------------------------------------------------------------------ #
    def apply_state(self, state: SessionState) -> None:
        self._last_event = state.last_event
        self._busy_session = state.is_simulating
        self._refresh_button()

    # ------------------------------------------------------------------ #
    #  Internals                                                           #
    # ------------------------------------------------------------------ #
    def _analyzing(self) -> bool:
        return self._thread is not None

    def _refresh_button(self) -> None:
        self._btn.setEnabled(
            self._last_event is not None and not self._busy_session and not self._analyzing()
        )
        self._btn.setText("Analyzing..." if self._analyzing() else "Analyze Operation")

    def _on_analyze(self) -> None:
        if self._last_event is None or self._analyzing():
            return
        self._output.setPlainText("Analyzing...")

        self._thread = QThread(self)
        self._worker = _AnalysisWorker(self._client, self._last_event)
        self._worker.moveToThread(self._thread)
        self._thread.started.connect(self._worker.run)
        self._worker.finished.connect(self._on_finished)
        self._worker.finished.connect(self._thread.quit)
        self._thread.finished.connect(self._on_thread_done)
        self._thread.start()
        self._refresh_button()

    def _on_finished(self, text: str) -> None:
        self._output.setPlainText(text)

    def _on_thread_done(self) -> None:
        self._worker.deleteLater()
        self._thread.deleteLater()
        self._worker = None
        self._thread = None
        self._refresh_button()
