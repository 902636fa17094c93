"""Colors and small formatting helpers for the summary table."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from rich.text import Text

# ── Color Palette (GitHub Dark) ─────────────────────────────────────────

SURFACE = "#161b22"
MUTED = "#8b949e"

CYAN = "#58a6ff"
GREEN = "#39d353"
PURPLE = "#bc8cff"
YELLOW = "#e3b341"
RED = "#f85149"
ORANGE = "#f0883e"

OUTCOME_COLORS: dict[str, str] = {
    "created": GREEN,
    "refreshed": CYAN,
    "unchanged": MUTED,
    "skipped-dirty": YELLOW,
    "skipped-no-origin": ORANGE,
    "failed": RED,
}


def format_age(then: Optional[datetime], now: datetime) -> str:
    """Compact age like ``3d``, ``5h``, ``12m``, or ``—`` if unknown."""
    if then is None:
        return "—"
    delta = now - then
    if delta < timedelta(0):
        return "now"
    if delta.days >= 365:
        return f"{delta.days // 365}y"
    if delta.days >= 1:
        return f"{delta.days}d"
    hours = delta.seconds // 3600
    if hours:
        return f"{hours}h"
    return f"{delta.seconds // 60}m"


def age_text(then: Optional[datetime], now: datetime) -> Text:
    """Age colored green (< 30 days), yellow (< 1 year) or red."""
    label = format_age(then, now)
    if then is None:
        return Text(label, style=MUTED)
    days = (now - then).days
    if days < 30:
        color = GREEN
    elif days < 365:
        color = YELLOW
    else:
        color = RED
    return Text(label, style=f"bold {color}")


def outcome_text(outcome: str) -> Text:
    return Text(outcome, style=OUTCOME_COLORS.get(outcome, MUTED))
