"""Shared validation utilities"""

from datetime import date, datetime
from typing import Union

# Upper bound of the Integer primary key columns
MAX_RECORD_ID = 2**31 - 1


def is_blank(value) -> bool:
    """True for None, empty strings and whitespace-only strings"""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def parse_record_id(value: Union[int, str]) -> int:
    """
    Normalize a record ID given as int or numeric string.

    Raises:
        ValueError: If the value is not a positive integer within the column range
    """
    if isinstance(value, bool):
        raise ValueError("Invalid ID")
    if isinstance(value, int):
        record_id = value
    else:
        try:
            record_id = int(str(value).strip())
        except ValueError as e:
            raise ValueError("Invalid ID") from e
    if record_id <= 0 or record_id > MAX_RECORD_ID:
        raise ValueError("Invalid ID")
    return record_id


def parse_calendar_date(value: Union[date, datetime, str]) -> date:
    """
    Truncate a date-like value to a calendar day.

    Accepts date, datetime, "YYYY-MM-DD" and ISO datetimes (with optional
    trailing "Z"). The time of day and any timezone are discarded.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError("Invalid date")

    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError as e:
        raise ValueError(f"Invalid date format: {value}") from e
