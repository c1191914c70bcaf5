"""Localized weekday and month labels."""

from __future__ import annotations

# Index 0 = Sunday, matching calendar.day_of_week.
WEEKDAY_ABBREVIATIONS: dict[str, list[str]] = {
    "en": ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
    "es": ["Dom", "Lun", "Mar", "Mié", "Jue", "Vie", "Sáb"],
}

MONTH_NAMES: dict[str, list[str]] = {
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
    "es": [
        "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
        "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
    ],
}

DEFAULT_LOCALE = "en"


def weekday_labels(locale: str = DEFAULT_LOCALE) -> list[str]:
    return WEEKDAY_ABBREVIATIONS.get(locale, WEEKDAY_ABBREVIATIONS[DEFAULT_LOCALE])


def weekday_label(weekday: int, locale: str = DEFAULT_LOCALE) -> str:
    """Abbreviation for weekday 0..6 (0=Sunday); empty for out-of-range values."""

    labels = weekday_labels(locale)
    return labels[weekday] if 0 <= weekday < len(labels) else ""


def month_label(year: int, month: int, locale: str = DEFAULT_LOCALE) -> str:
    names = MONTH_NAMES.get(locale, MONTH_NAMES[DEFAULT_LOCALE])
    if not 1 <= month <= 12:
        return str(year)
    return f"{names[month - 1]} {year}"
