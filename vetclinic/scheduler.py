"""
Reminder scheduling helpers shared by the arq worker and the CLI.

``REMINDER_CRON`` uses the usual five cron fields
(minute hour day-of-month month day-of-week) and is turned into the keyword
arguments ``arq.cron.cron`` expects.
"""
import datetime
import logging

logger = logging.getLogger(__name__)

CRON_FIELDS = (
    ('minute', 0, 59),
    ('hour', 0, 23),
    ('day', 1, 31),
    ('month', 1, 12),
    ('weekday', 0, 7),
)


def _parse_field(value, low, high):
    if value == '*':
        return None
    values = set()
    for part in value.split(','):
        step = 1
        if '/' in part:
            part, step_text = part.split('/', 1)
            step = int(step_text)
            if step < 1:
                raise ValueError(f"Invalid cron step: {step_text}")
        if part == '*':
            start, end = low, high
        elif '-' in part:
            start_text, end_text = part.split('-', 1)
            start, end = int(start_text), int(end_text)
        else:
            start = end = int(part)
            if step > 1:
                end = high
        if start < low or end > high or start > end:
            raise ValueError(f"Cron value {part} out of range {low}-{high}")
        values.update(range(start, end + 1, step))
    return values


def parse_cron_expression(expression):
    """Translate a five-field cron expression into ``arq.cron.cron`` kwargs.

    Day-of-week follows cron (0 or 7 = Sunday) and is converted to arq's
    Monday-based numbering. Fields given as ``*`` are left out.
    """
    parts = expression.split()
    if len(parts) != len(CRON_FIELDS):
        raise ValueError(f"Cron expression must have 5 fields, got {len(parts)}: {expression!r}")
    kwargs = {}
    for text, (name, low, high) in zip(parts, CRON_FIELDS):
        try:
            values = _parse_field(text, low, high)
        except ValueError as e:
            raise ValueError(f"Invalid {name} field {text!r}: {e}")
        if values is None:
            continue
        if name == 'weekday':
            values = {(v - 1) % 7 for v in values}
        kwargs[name] = values
    return kwargs


def run_scheduled_reminders(app, today=None):
    """One scheduler tick: process reminders for ``today`` unless disabled."""
    with app.app_context():
        if not app.config.get('REMINDER_ENABLED', True):
            logger.info("Email reminders are disabled; skipping scheduled run")
            return None
        from .services import reminder_service
        target = today or datetime.date.today()
        logger.info(f"Starting scheduled reminder processing for {target}")
        summary = reminder_service.process_reminders_for_date(target)
        logger.info(f"Scheduled reminder processing completed: {summary}")
        return summary
