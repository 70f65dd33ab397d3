"""Severity and loan-tone labeling helpers for the views.

Call context:
    ``biblio.web_ui.components`` and ``biblio.web_ui.main`` map viewmodel
    tokens into NiceGUI colors, icons and labels through these tables.
"""

from __future__ import annotations

from typing import Optional

CONFIRM_STYLE = {
    "info": ("primary", "info"),
    "warning": ("warning", "warning"),
    "danger": ("negative", "delete"),
}

NOTIFY_STYLE = {
    "success": ("positive", "check_circle"),
    "error": ("negative", "error"),
    "info": ("info", "info"),
}

LOAN_TONE_STYLE = {
    "ok": ("grey-7", "On time"),
    "late": ("warning", "Late"),
    "overdue": ("negative", "Overdue"),
}


def confirm_color(severity: Optional[str]) -> str:
    return CONFIRM_STYLE.get(severity or "info", CONFIRM_STYLE["info"])[0]


def confirm_icon(severity: Optional[str]) -> str:
    return CONFIRM_STYLE.get(severity or "info", CONFIRM_STYLE["info"])[1]


def notify_color(severity: Optional[str]) -> str:
    return NOTIFY_STYLE.get(severity or "info", NOTIFY_STYLE["info"])[0]


def notify_icon(severity: Optional[str]) -> str:
    return NOTIFY_STYLE.get(severity or "info", NOTIFY_STYLE["info"])[1]


def loan_tone_color(tone: Optional[str]) -> str:
    return LOAN_TONE_STYLE.get(tone or "ok", LOAN_TONE_STYLE["ok"])[0]


def loan_tone_label(tone: Optional[str]) -> str:
    return LOAN_TONE_STYLE.get(tone or "ok", LOAN_TONE_STYLE["ok"])[1]


__all__ = [
    "confirm_color",
    "confirm_icon",
    "loan_tone_color",
    "loan_tone_label",
    "notify_color",
    "notify_icon",
]
