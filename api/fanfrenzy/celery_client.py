"""Celery client used by the API to dispatch tasks without importing them."""

from __future__ import annotations

from functools import lru_cache

from celery import Celery

from .config import get_settings


@lru_cache(maxsize=1)
def get_celery_app() -> Celery:
    settings = get_settings()
    app = Celery(
        "fanfrenzy-api",
        broker=settings.celery_broker,
        backend=settings.celery_backend,
    )
    app.conf.task_default_queue = settings.celery_default_queue
    app.conf.task_routes = {
        "warm_team_content": {"queue": settings.celery_default_queue, "routing_key": settings.celery_default_queue},
    }
    app.conf.task_always_eager = False
    app.conf.task_eager_propagates = True
    return app
