"""Periodic background sync for an article store."""

from __future__ import annotations

import atexit
import logging

from apscheduler.schedulers.background import BackgroundScheduler

from .store import ArticleStore


logger = logging.getLogger(__name__)

SYNC_JOB_ID = "sync_articles"

_schedulers: dict[ArticleStore, BackgroundScheduler] = {}


def start_scheduler(store: ArticleStore) -> BackgroundScheduler:
    existing = _schedulers.get(store)
    if existing is not None and existing.running:
        return existing

    interval = store.settings.sync_interval_minutes
    scheduler = BackgroundScheduler(daemon=True)
    scheduler.add_job(
        store.background_sync,
        "interval",
        minutes=interval,
        id=SYNC_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.start()
    atexit.register(_shutdown_quietly, scheduler)
    _schedulers[store] = scheduler
    logger.info("Article sync scheduled every %s minutes", interval)
    return scheduler


def stop_scheduler(store: ArticleStore | None = None) -> None:
    """Stop the scheduler of ``store``, or every running scheduler when omitted."""
    stores = list(_schedulers) if store is None else [store]
    for owner in stores:
        scheduler = _schedulers.pop(owner, None)
        if scheduler is not None:
            _shutdown_quietly(scheduler)


def _shutdown_quietly(scheduler: BackgroundScheduler) -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)


__all__ = ["SYNC_JOB_ID", "start_scheduler", "stop_scheduler"]
