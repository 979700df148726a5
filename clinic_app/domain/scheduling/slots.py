"""Clinic-wide slot grid.

One fixed grid of half-hour slots shared by every doctor and every day.
There are no per-doctor working hours.
"""

TIME_SLOTS = (
    "09:00",
    "09:30",
    "10:00",
    "10:30",
    "11:00",
    "11:30",
    "12:00",
    "12:30",
    "13:00",
    "13:30",
    "14:00",
    "14:30",
    "15:00",
    "15:30",
    "16:00",
    "16:30",
)

_SLOT_SET = frozenset(TIME_SLOTS)


def all_slots() -> list[str]:
    """Return the bookable slots in display order"""
    return list(TIME_SLOTS)


def is_valid_slot(label) -> bool:
    """Exact label membership; no normalization of '9:00' or '09:00:00'"""
    return isinstance(label, str) and label in _SLOT_SET
