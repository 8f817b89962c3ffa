"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Accepts absolute dates ("2024-01-15", "15 Jan 2024") and relative words:
    "today", "yesterday", "tomorrow", "in 3 days", "3 days ago", and
    "last/this/next" followed by week, month, year or a weekday.

    Args:
        date_str: Date string
        today: Reference date for relative words, defaults to the current date

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    relative_days = {"today": 0, "yesterday": -1, "tomorrow": 1}
    if text in relative_days:
        return today + timedelta(days=relative_days[text])

    words = text.split()
    if len(words) == 3 and words[0] == "in" and words[1].isdigit() and words[2] in ("day", "days"):
        return today + timedelta(days=int(words[1]))
    if len(words) == 3 and words[2] == "ago" and words[0].isdigit() and words[1] in ("day", "days"):
        return today - timedelta(days=int(words[0]))

    if len(words) == 2 and words[0] in ("last", "this", "next"):
        step = {"last": -1, "this": 0, "next": 1}[words[0]]
        period = words[1]
        if period == "week":
            # Monday of the week
            return today - timedelta(days=today.weekday()) + timedelta(weeks=step)
        if period == "month":
            return today.replace(day=1) + relativedelta(months=step)
        if period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=step)
        if period in WEEKDAYS and step != 0:
            target = WEEKDAYS.index(period)
            if step < 0:
                return today - timedelta(days=(today.weekday() - target) % 7 or 7)
            return today + timedelta(days=(target - today.weekday()) % 7 or 7)

    try:
        return date_parser.parse(text).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_month(month_str: str, today: Optional[date] = None) -> date:
    """Parse a month such as "2024-03", "March 2024" or "this month".

    Returns:
        First day of the month

    Raises:
        ValueError: If the month cannot be parsed
    """
    text = month_str.strip()
    if len(text) == 7 and text[4] == "-":
        text = f"{text}-01"
    return parse_date(text, today=today).replace(day=1)


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: this-week, this-month, this-year, last-week, last-month or last-year
        today: Reference date, defaults to the current date

    Returns:
        Tuple of (start_date, end_date). Current periods end today.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-week":
        return today - timedelta(days=today.weekday()), today
    if period == "this-month":
        return today.replace(day=1), today
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "last-week":
        start = today - timedelta(days=today.weekday() + 7)
        return start, start + timedelta(days=6)
    if period == "last-month":
        end = today.replace(day=1) - timedelta(days=1)
        return end.replace(day=1), end
    if period == "last-year":
        end = today.replace(month=1, day=1) - timedelta(days=1)
        return end.replace(month=1, day=1), end

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-week, this-month, this-year, "
        "last-week, last-month, last-year"
    )
