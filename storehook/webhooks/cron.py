"""Cron expressions for scheduled hook runs."""

from enum import Enum

from storehook.config import Settings

EVERY_MINUTE = "* * * * *"


class Schedule(str, Enum):
    """How often scheduled hooks run."""

    NONE = "none"
    MINUTE = "every_minute"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def cron_expr(schedule: Schedule | str, start_time: str) -> str:
    """Build a five-field cron expression.

    Args:
        schedule: Run frequency.
        start_time: ``"HH,MM"`` start hour and minute. A missing or blank
            part counts as 0.

    Returns:
        Expression as ``"minute hour day-of-month month day-of-week"``,
        e.g. ``cron_expr(Schedule.WEEKLY, "9,30")`` -> ``"30 9 * * 0"``.
    """
    schedule = Schedule(schedule)
    if schedule is Schedule.MINUTE:
        return EVERY_MINUTE

    hour, minute = (start_time.split(",") + ["0"])[:2]
    fields = [
        str(int(minute.strip() or 0)),
        str(int(hour.strip() or 0)),
        "1" if schedule is Schedule.MONTHLY else "*",
        "*",
        "0" if schedule is Schedule.WEEKLY else "*",
    ]
    return " ".join(fields)


def cron_schedule_expr(settings: Settings) -> str | None:
    """Cron expression for the configured schedule, or None when disabled."""
    schedule = Schedule(settings.CRON_SCHEDULE)
    if schedule is Schedule.NONE:
        return None
    return cron_expr(schedule, settings.CRON_START_TIME)
