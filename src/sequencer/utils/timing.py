from datetime import datetime
from datetime import timedelta


def format_timedelta(delta: timedelta) -> str:
    """Render a duration as e.g. `1 h 2 m 3.45 s`, omitting leading zero units."""
    minutes, seconds = divmod(delta.total_seconds(), 60)
    hours, minutes = divmod(int(minutes), 60)

    if hours:
        return f"{hours} h {minutes} m {seconds:.2f} s"
    if minutes:
        return f"{minutes} m {seconds:.2f} s"
    return f"{seconds:.2f} s"


def format_duration(start: datetime | None, end: datetime | None) -> str:
    """Formats the time between two (optional) timestamps of an invocation."""
    if start is None or end is None:
        return "N/A"
    return format_timedelta(end - start)
