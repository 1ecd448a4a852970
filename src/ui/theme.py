# ui/theme.py
from __future__ import annotations

DARK = """
QWidget { background-color: #020617; color: #e5e7eb; }
QLineEdit {
    background: #0b1222; border: 1px solid #1f2937; border-radius: 10px; padding: 4px 8px;
}
QLineEdit:focus { border-color: #38bdf8; }
QTableView { alternate-background-color: #030712; }
QHeaderView::section {
    background-color: #020617; color: #9ca3af; padding: 4px 6px; border: none;
    border-bottom: 1px solid #111827; font-size: 11px;
}
QLabel { color: #9ca3af; }
QLabel#NowPlaying { color: #e5e7eb; }
QToolButton:hover { background: #0b1222; }
QProgressBar { background: #0b1222; border: 1px solid #1f2937; border-radius: 999px; height: 8px; }
QProgressBar::chunk { border-radius: 999px; background: #38bdf8; }
"""

LIGHT = """
QWidget { background-color: #f8fafc; color: #0f172a; }
QLineEdit {
    background: #ffffff; border: 1px solid #cbd5e1; border-radius: 10px; padding: 4px 8px;
}
QLineEdit:focus { border-color: #0284c7; }
QTableView { alternate-background-color: #f1f5f9; }
QHeaderView::section {
    background-color: #f8fafc; color: #475569; padding: 4px 6px; border: none;
    border-bottom: 1px solid #e2e8f0; font-size: 11px;
}
QLabel { color: #475569; }
QLabel#NowPlaying { color: #0f172a; }
QToolButton:hover { background: #e2e8f0; }
QProgressBar { background: #e2e8f0; border: 1px solid #cbd5e1; border-radius: 999px; height: 8px; }
QProgressBar::chunk { border-radius: 999px; background: #0284c7; }
"""


def stylesheet_for(theme: str) -> str:
    return LIGHT if theme == "light" else DARK


def other_theme(theme: str) -> str:
    return "dark" if theme == "light" else "light"
