DARK_STYLESHEET = """
/* ── Global ─────────────────────────────────────────────── */
QWidget {
    background-color: #050508;
    color: #e8eaf6;
    font-family: "Segoe UI", "Helvetica Neue", Arial, sans-serif;
    font-size: 13px;
}

QMainWindow {
    background-color: #050508;
    border: none;
}

QWidget#qt_scrollarea_viewport, QAbstractScrollArea {
    border: none;
}

/* ── Side panels ─────────────────────────────────────────── */
QFrame#controlPanel, QFrame#statusPanel {
    background-color: transparent;
    border: none;
}

/* ── Card look shared by every group box ─────────────────── */
QGroupBox {
    background-color: rgba(14, 14, 26, 190);
    border: 1px solid rgba(80, 100, 230, 45);
    border-radius: 10px;
    margin-top: 14px;
    padding: 8px;
    font-weight: bold;
    font-size: 12px;
    color: #7986cb;
}
QGroupBox::title {
    subcontrol-origin: margin;
    left: 10px;
    top: -2px;
    padding: 0 4px;
}

/* ── Buttons ─────────────────────────────────────────────── */
QPushButton {
    background-color: rgba(30, 40, 110, 200);
    color: #e8eaf6;
    border: 1px solid rgba(100, 140, 255, 90);
    border-radius: 7px;
    padding: 8px 12px;
    font-weight: bold;
}
QPushButton:hover {
    background-color: rgba(50, 70, 170, 220);
}
QPushButton:disabled {
    background-color: rgba(25, 25, 45, 160);
    color: rgba(160, 170, 210, 110);
    border: 1px solid rgba(80, 90, 140, 60);
}
QPushButton#btnSecure {
    background-color: rgba(6, 120, 140, 210);
    border: 1px solid #06b6d4;
}
QPushButton#btnUnsafe {
    background-color: rgba(150, 60, 0, 210);
    border: 1px solid #ff6600;
}
QPushButton#btnRenew {
    background-color: rgba(20, 110, 40, 210);
    border: 1px solid #00c853;
}
QPushButton#btnReset {
    background-color: rgba(60, 60, 80, 200);
}

/* ── Log / analysis text ─────────────────────────────────── */
QPlainTextEdit, QTextEdit {
    background-color: rgba(8, 8, 18, 220);
    color: #b3e5fc;
    border: 1px solid rgba(80, 100, 230, 45);
    border-radius: 6px;
    font-family: "Consolas", "Menlo", monospace;
    font-size: 11px;
}

/* ── Labels ──────────────────────────────────────────────── */
QLabel#labelMetric {
    font-size: 22px;
    font-weight: bold;
    color: #00b894;
    background: transparent;
}
QLabel#labelCaption {
    color: #90caf9;
    font-size: 11px;
    background: transparent;
}

/* ── Status bar ──────────────────────────────────────────── */
QStatusBar {
    background-color: rgba(10, 10, 25, 230);
    color: #7986cb;
    border-top: 1px solid rgba(80, 100, 220, 60);
    font-size: 11px;
}

/* ── Scrollbars ──────────────────────────────────────────── */
QScrollBar:vertical {
    background: transparent;
    width: 8px;
}
QScrollBar::handle:vertical {
    background: rgba(100, 120, 230, 90);
    border-radius: 4px;
    min-height: 24px;
}
QScrollBar::add-line:vertical, QScrollBar::sub-line:vertical {
    height: 0;
}
"""
