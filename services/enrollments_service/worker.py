"""ARQ worker for enrollments service background tasks.

Run with: arq services.enrollments_service.worker.WorkerSettings
"""

from arq import cron
from dotenv import load_dotenv

load_dotenv()

from libs.common.arq_config import QUEUE_NAME, get_redis_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def task_send_dropoff_nudges(ctx: dict):
    """Nudge participants whose enrollments have gone inactive."""
    from libs.db.session import session_scope
    from services.enrollments_service.services.nudges import send_dropoff_nudges

    logger.info("Running: send_dropoff_nudges")
    async with session_scope() as db:
        sent = await send_dropoff_nudges(db)
    return sent


class WorkerSettings:
    """ARQ worker settings with cron job schedules."""

    redis_settings = get_redis_settings()
    queue_name = QUEUE_NAME

    functions = [task_send_dropoff_nudges]

    cron_jobs = [
        # Hourly
        cron(task_send_dropoff_nudges, minute=5, run_at_startup=False),
    ]
