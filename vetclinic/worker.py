"""
ARQ background worker running the appointment reminder cron job.

Start with ``arq vetclinic.worker.WorkerSettings``.
"""
import logging
import os
from urllib.parse import urlparse

from arq.connections import RedisSettings
from arq.cron import cron

from .config import Config
from .scheduler import parse_cron_expression, run_scheduled_reminders

logger = logging.getLogger(__name__)


def get_redis_settings() -> RedisSettings:
    """Redis settings for the worker, from REDIS_URL or the individual variables"""
    redis_url = Config.REDIS_URL
    if redis_url:
        parsed = urlparse(redis_url)
        return RedisSettings(
            host=parsed.hostname or "localhost",
            port=parsed.port or 6379,
            password=parsed.password,
            ssl=parsed.scheme == "rediss",
            conn_timeout=15,
            conn_retry_delay=1,
        )
    return RedisSettings(
        host=os.getenv("REDIS_HOST", "localhost"),
        port=int(os.getenv("REDIS_PORT", "6379")),
        password=os.getenv("REDIS_PASSWORD"),
        conn_timeout=15,
        conn_retry_delay=1,
    )


async def startup(ctx):
    from . import create_app
    ctx['app'] = create_app()
    logger.info("Reminder worker started")


async def shutdown(ctx):
    app = ctx.get('app')
    if app is not None:
        app.extensions['email_dispatcher'].shutdown(wait=True)
    logger.info("Reminder worker stopped")


async def send_reminders_task(ctx):
    """Cron job: queue reminder emails for today's scheduled appointments."""
    try:
        summary = run_scheduled_reminders(ctx['app'])
    except Exception as e:
        logger.error(f"❌ Scheduled reminder processing failed: {e}")
        raise
    if summary is None:
        return {"status": "disabled"}
    ctx['app'].extensions['email_dispatcher'].wait()
    return {"status": "completed", **summary}


class WorkerSettings:
    """ARQ worker settings"""

    functions = [send_reminders_task]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = get_redis_settings()

    max_jobs = int(os.getenv("ARQ_MAX_JOBS", "5"))
    job_timeout = int(os.getenv("ARQ_JOB_TIMEOUT", "600"))
    keep_result = int(os.getenv("ARQ_KEEP_RESULT", "3600"))

    cron_jobs = [
        cron(send_reminders_task, **parse_cron_expression(Config.REMINDER_CRON)),
    ]

    logger.info(f"🔧 ARQ worker configured with reminder schedule '{Config.REMINDER_CRON}'")
