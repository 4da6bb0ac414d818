"""Schedule expression validation.

Runs before anything is queued: a rejected schedule never produces an IPC
file. ``once`` values are local wall-clock times without a UTC marker; they
are checked for shape only and never converted, because the host scheduler
applies its own timezone.
"""

from __future__ import annotations

from datetime import datetime

from croniter import croniter

SCHEDULE_TYPES = ("cron", "interval", "once")
CONTEXT_MODES = ("group", "isolated")


class ScheduleValidationError(ValueError):
    """A schedule_type/schedule_value pair the host scheduler could not run."""


def validate_cron(value: str) -> None:
    if len(value.split()) not in (5, 6) or not croniter.is_valid(value):
        raise ScheduleValidationError(_cron_message(value))


def validate_interval(value: str) -> None:
    # Plain ASCII digits only: the host parses with a lenient integer parser
    if not (value.isascii() and value.isdigit()) or int(value) <= 0:
        raise ScheduleValidationError(_interval_message(value))


def validate_once(value: str) -> None:
    try:
        datetime.fromisoformat(value)
    except (ValueError, TypeError) as exc:
        raise ScheduleValidationError(
            f'Invalid timestamp: "{value}". Use ISO 8601 format like "2026-02-01T15:30:00".'
        ) from exc


_VALIDATORS = {
    "cron": validate_cron,
    "interval": validate_interval,
    "once": validate_once,
}


def validate_schedule(schedule_type: str, schedule_value: str) -> str:
    """Return the normalized *schedule_value*, or raise ScheduleValidationError
    if it is not a valid *schedule_type*."""
    validator = _VALIDATORS.get(schedule_type)
    if validator is None:
        raise ScheduleValidationError(
            f'Invalid schedule_type: "{schedule_type}". Must be one of {", ".join(SCHEDULE_TYPES)}.'
        )
    if not isinstance(schedule_value, str):
        schedule_value = str(schedule_value)
    value = schedule_value.strip()
    validator(value)
    return value


def validate_context_mode(context_mode: str) -> None:
    if context_mode not in CONTEXT_MODES:
        raise ScheduleValidationError(
            f'Invalid context_mode: "{context_mode}". Must be one of {", ".join(CONTEXT_MODES)}.'
        )


def _cron_message(value: str) -> str:
    return (
        f'Invalid cron: "{value}". Use format like '
        '"0 9 * * *" (daily 9am) or "*/5 * * * *" (every 5 min).'
    )


def _interval_message(value: str) -> str:
    return (
        f'Invalid interval: "{value}". Must be positive milliseconds (e.g., "300000" for 5 min).'
    )
