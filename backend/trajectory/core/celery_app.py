from celery import Celery
from celery.schedules import crontab

from .config import get_settings
from .logging import configure_logging

settings = get_settings()
configure_logging()

celery_app = Celery(
    "trajectory",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    imports=("trajectory.services.retention",),
    beat_schedule={
        # Daily cleanup of the case-study log based on CASE_STUDY_RETENTION_DAYS
        "cleanup-expired-case-studies": {
            "task": "trajectory.services.retention.cleanup_expired_case_studies",
            "schedule": crontab(hour=3, minute=0),
        },
    },
)
