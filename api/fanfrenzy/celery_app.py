"""Celery application for background content work."""

from __future__ import annotations

from celery import Celery

from .config import get_settings

settings = get_settings()

celery_app = Celery(
    "fanfrenzy",
    broker=settings.celery_broker,
    backend=settings.celery_backend,
    include=["fanfrenzy.tasks.content_generation"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_default_queue=settings.celery_default_queue,
    task_time_limit=1800,
    task_soft_time_limit=1700,
    result_expires=86400,
)
