"""
Dark stylesheet for the timer widget and history panel.
Zinc-on-black palette to match the compact overlay look.
"""

DARK_STYLESHEET = """
/* ── Base ────────────────────────────────────────────────────────── */
QWidget {
    background-color: #18181b;
    color: #f4f4f5;
    font-family: "Segoe UI", "Inter", sans-serif;
    font-size: 13px;
}

/* ── Buttons ─────────────────────────────────────────────────────── */
QPushButton {
    background-color: #27272a;
    color: #f4f4f5;
    border: none;
    border-radius: 14px;
    min-width: 28px;
    min-height: 28px;
    padding: 0 8px;
    font-weight: 600;
}

QPushButton:hover {
    background-color: #3f3f46;
}

QPushButton:pressed {
    background-color: #52525b;
}

QPushButton:disabled {
    color: #52525b;
}

/* ── Input fields ────────────────────────────────────────────────── */
QLineEdit, QDateEdit {
    background-color: #27272a;
    color: #f4f4f5;
    border: none;
    border-radius: 6px;
    padding: 6px 10px;
    selection-background-color: #52525b;
}

QLineEdit::placeholder {
    color: #71717a;
}

/* ── Labels ──────────────────────────────────────────────────────── */
QLabel {
    background: transparent;
}

QLabel#timer {
    font-size: 20px;
    font-family: "Consolas", "Courier New", monospace;
    color: #ffffff;
}

QLabel#phase_label {
    font-size: 11px;
    color: #a1a1aa;
}

QLabel#history_status {
    color: #a1a1aa;
}

QLabel#history_error {
    color: #f87171;
}

QLabel#badge_complete {
    color: #34d399;
    background-color: #3f3f46;
    border-radius: 8px;
    padding: 1px 6px;
    font-size: 11px;
}

QLabel#badge_partial {
    color: #fbbf24;
    background-color: #3f3f46;
    border-radius: 8px;
    padding: 1px 6px;
    font-size: 11px;
}

QLabel#session_meta {
    color: #a1a1aa;
    font-size: 11px;
}

/* ── Progress ────────────────────────────────────────────────────── */
QProgressBar {
    background-color: #27272a;
    border: none;
    border-radius: 2px;
    max-height: 4px;
}

QProgressBar::chunk {
    background-color: #ffffff;
    border-radius: 2px;
}

/* ── Session rows ────────────────────────────────────────────────── */
QFrame#session_row {
    background-color: #27272a;
    border-radius: 6px;
}

QScrollArea {
    border: none;
    background-color: transparent;
}

QScrollBar:vertical {
    background-color: #18181b;
    width: 8px;
    border-radius: 4px;
}

QScrollBar::handle:vertical {
    background-color: #52525b;
    border-radius: 4px;
    min-height: 20px;
}
"""
