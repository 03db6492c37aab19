"""Date manipulation utilities"""

from datetime import date, timedelta


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative if end is before start)"""
    return (end - start).days


def add_days(from_date: date, days: int) -> date:
    """Add calendar days to a date (no business-day or holiday adjustment)"""
    return from_date + timedelta(days=days)


def today() -> date:
    """Default clock for services; inject another callable in tests"""
    return date.today()
