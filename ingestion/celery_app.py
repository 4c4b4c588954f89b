"""Celery application bootstrap for the sync and scoring cycles."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict

from celery import Celery
from celery.schedules import schedule as celery_schedule

from .settings import Settings, get_settings
from .utils.logging import configure_logging

_CELERY_APP: Celery | None = None

SYNC_NEWS_TASK = "ingestion.tasks.sync_news.sync_sports_news"
CALCULATE_EARNINGS_TASK = "scoring.tasks.calculate.calculate_earnings"


def create_celery_app(settings: Settings | None = None) -> Celery:
    """설정을 기반으로 Celery 인스턴스를 생성한다."""
    config = settings or get_settings()
    configure_logging(config.log_level, json_enabled=config.log_json)

    app = Celery(
        "sportspulse",
        broker=config.broker_url,
        backend=config.broker_url,
        include=[_task_module(SYNC_NEWS_TASK), _task_module(CALCULATE_EARNINGS_TASK)],
    )
    app.conf.update(
        task_default_queue="pipeline.default",
        task_default_exchange="pipeline",
        task_default_routing_key="pipeline.default",
        task_soft_time_limit=config.celery_task_soft_time_limit,
        worker_concurrency=config.celery_worker_concurrency,
        beat_schedule=_build_beat_schedule(config),
        timezone="UTC",
        enable_utc=True,
        worker_send_task_events=True,
        task_send_sent_event=True,
    )

    _install_signal_handlers(app)
    return app


def _task_module(task_name: str) -> str:
    return task_name.rsplit(".", 1)[0]


def get_celery_app() -> Celery:
    """싱글톤 Celery 인스턴스를 반환한다."""
    global _CELERY_APP
    if _CELERY_APP is None:
        _CELERY_APP = create_celery_app()
    return _CELERY_APP


def _build_beat_schedule(settings: Settings) -> Dict[str, Dict[str, Any]]:
    return {
        "sync.sports_news": {
            "task": SYNC_NEWS_TASK,
            "schedule": celery_schedule(timedelta(minutes=settings.news_sync_interval_minutes)),
            "args": (),
            "options": {"queue": "pipeline.sync"},
        },
        "scoring.calculate_earnings": {
            "task": CALCULATE_EARNINGS_TASK,
            "schedule": celery_schedule(timedelta(minutes=settings.scoring_interval_minutes)),
            "args": (),
            "options": {"queue": "pipeline.scoring"},
        },
    }


def _install_signal_handlers(app: Celery) -> None:
    from celery import signals

    logger = logging.getLogger("pipeline.worker")

    @signals.worker_shutdown.connect  # type: ignore[attr-defined]
    def _on_worker_shutdown(sender=None, **kwargs):  # noqa: ANN001
        logger.info("worker.shutdown", extra={"sender": str(sender)})
