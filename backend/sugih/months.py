from datetime import date, datetime

from sugih.errors import ValidationError


def parse_month(value):
    """
    Accept a month key as a date, "YYYY-MM-01" or "YYYY-MM" and return the first day.
    Dates that are not the first of a month are rejected rather than truncated.
    """
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        if value.day != 1:
            raise ValidationError("Month must be the first day of the month.", {"month": ["Use YYYY-MM-01."]})
        return value

    raw = (value or "").strip() if isinstance(value, str) else ""
    if not raw:
        raise ValidationError("Month is required.", {"month": ["This field is required."]})
    for fmt in ("%Y-%m-%d", "%Y-%m"):
        try:
            parsed = datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
        return parse_month(parsed)
    raise ValidationError("Month must be in YYYY-MM-01 format.", {"month": ["Use YYYY-MM-01."]})


def next_month(month_start):
    if month_start.month == 12:
        return date(month_start.year + 1, 1, 1)
    return date(month_start.year, month_start.month + 1, 1)


def month_range(month_start):
    """Half-open [start, end) range covering the month."""
    return month_start, next_month(month_start)


def month_label(month_start):
    return month_start.strftime("%B %Y")
