"""Due-date detection for Spanish date phrases.

Relative phrases ("hoy", "mañana", "este viernes", "fin de mes") are
resolved against today's date in the user's timezone; explicit dates accept
"15/01", "15-01-26" and "15 de enero".
"""

import calendar
import logging
from datetime import date, datetime, timedelta

import pytz

from tareas.config import settings
from tareas.services.detection import DetectionResult
from tareas.services.lexicon import DATE_RULES, MONTH_ABBREVIATIONS, MONTH_NAMES

logger = logging.getLogger(__name__)

DATE_CONFIDENCE = 0.85


def today_in(timezone: str) -> date:
    """Current date in the given IANA timezone."""
    return datetime.now(pytz.timezone(timezone)).date()


def _next_weekday(today: date, weekday: int) -> date:
    days_ahead = weekday - today.weekday()
    if days_ahead <= 0:
        days_ahead += 7
    return today + timedelta(days=days_ahead)


def _end_of_month(today: date) -> date:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=last_day)


def _numeric_date(groups: tuple[str | None, ...], today: date) -> date | None:
    day, month, year = groups
    resolved_year = int(year) if year else today.year
    if resolved_year < 100:
        resolved_year += 2000
    try:
        return date(resolved_year, int(month), int(day))
    except ValueError:
        logger.debug(f"Ignoring impossible date {day}/{month}/{resolved_year}")
        return None


def _month_name_date(groups: tuple[str | None, ...], today: date) -> date | None:
    day, month_name = groups
    month = MONTH_NAMES.index(month_name.lower()) + 1
    try:
        candidate = date(today.year, month, int(day))
    except ValueError:
        logger.debug(f"Ignoring impossible date {day} {month_name}")
        return None
    if candidate < today:
        try:
            candidate = candidate.replace(year=candidate.year + 1)
        except ValueError:
            # 29 de febrero rolled into a non-leap year
            return None
    return candidate


def detect_due_date(text: str, today: date | None = None) -> DetectionResult[date | None]:
    """Return the date of the first matching rule in table order.

    Args:
        text: Raw task text
        today: Reference date; defaults to the current date in the
            configured user timezone

    Returns:
        DetectionResult with the date, or None at confidence 0
    """
    if today is None:
        today = today_in(settings.user_timezone)

    for pattern, kind, amount in DATE_RULES:
        match = pattern.search(text)
        if not match:
            continue

        resolved: date | None = None
        if kind == "offset":
            resolved = today + timedelta(days=amount)
        elif kind == "weekday":
            resolved = _next_weekday(today, amount)
        elif kind == "end_of_month":
            resolved = _end_of_month(today)
        elif kind == "numeric":
            resolved = _numeric_date(match.groups(), today)
        elif kind == "month_name":
            resolved = _month_name_date(match.groups(), today)

        if resolved is not None:
            return DetectionResult(resolved, DATE_CONFIDENCE)

    return DetectionResult(None, 0.0)


def format_date_label(value: date, today: date) -> str:
    """Short Spanish label for a due date: "Hoy", "Mañana" or "15 ene"."""
    if value == today:
        return "Hoy"
    if value == today + timedelta(days=1):
        return "Mañana"
    return f"{value.day} {MONTH_ABBREVIATIONS[value.month - 1]}"
