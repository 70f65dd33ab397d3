"""Display thresholds for active loans.

These thresholds only drive how rows are highlighted. Delinquency itself is
decided by the backend (``/usuarios/morosos/*``).
"""

from __future__ import annotations

from typing import Literal

LoanTone = Literal["ok", "late", "overdue"]

LATE_AFTER_DAYS = 21
OVERDUE_AFTER_DAYS = 35
DUE_SOON_WINDOW_DAYS = 3


def loan_tone(days_on_loan: int) -> LoanTone:
    """Classify a loan by how many days it has been out."""
    if days_on_loan > OVERDUE_AFTER_DAYS:
        return "overdue"
    if days_on_loan > LATE_AFTER_DAYS:
        return "late"
    return "ok"


def due_in_label(days_left: int) -> str:
    if days_left <= 0:
        return "Due today"
    return f"Due in {days_left} day(s)"


__all__ = [
    "DUE_SOON_WINDOW_DAYS",
    "LATE_AFTER_DAYS",
    "LoanTone",
    "OVERDUE_AFTER_DAYS",
    "due_in_label",
    "loan_tone",
]
