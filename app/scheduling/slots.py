"""Time-of-day helpers and the bookable slot generator."""

MINUTES_PER_DAY = 24 * 60


def parse_time(value: str) -> int:
    """
    Convert an ``HH:MM`` string to minutes since midnight.

    ``24:00`` is accepted so that a clinic day can end at midnight.

    Args:
        value: Time of day in 24-hour notation

    Returns:
        Minutes since midnight

    Raises:
        ValueError: If the value is not a valid ``HH:MM`` time
    """
    if not isinstance(value, str) or len(value) != 5 or value[2] != ":":
        raise ValueError(f"Invalid time '{value}', expected HH:MM")

    hours_part, minutes_part = value[:2], value[3:]
    if not (hours_part.isdigit() and minutes_part.isdigit()):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")

    hours, minutes = int(hours_part), int(minutes_part)
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")

    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Convert minutes since midnight back to ``HH:MM``."""
    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise ValueError(f"Minute offset {minutes} is outside a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(value: str, minutes: int) -> str:
    """Return the ``HH:MM`` time ``minutes`` after ``value``."""
    return format_time(parse_time(value) + minutes)


def generate_slots(work_start: str, work_end: str, slot_minutes: int = 30) -> list[str]:
    """
    Produce the bookable slots of a clinic day.

    Slots start at ``work_start`` and step by ``slot_minutes``. Only slots
    that fit entirely before ``work_end`` are produced, so a trailing partial
    slot is dropped.

    Args:
        work_start: First slot, ``HH:MM``
        work_end: End of the working window (exclusive), ``HH:MM``
        slot_minutes: Slot granularity in minutes

    Returns:
        Ordered list of ``HH:MM`` slot start times

    Raises:
        ValueError: If a time is malformed or ``slot_minutes`` is not positive
    """
    if slot_minutes <= 0:
        raise ValueError("slot_minutes must be positive")

    start = parse_time(work_start)
    end = parse_time(work_end)

    return [format_time(minute) for minute in range(start, end - slot_minutes + 1, slot_minutes)]
