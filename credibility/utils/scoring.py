import math
from datetime import timezone


def round_half_up(value):
    """Round to the nearest integer, .5 always away from zero (52.5 -> 53)."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def clamp_score(value, minimum=0.0, maximum=100.0):
    """Clamp into [minimum, maximum]. Non-finite values collapse to minimum."""
    if value is None or math.isnan(value):
        return minimum
    return max(minimum, min(maximum, value))


def ensure_utc(dt):
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def days_between(earlier, later):
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds() / 86400
