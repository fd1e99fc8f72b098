# mypy: ignore-errors
"""Tests for the background publish sweep."""

import asyncio
from datetime import timedelta

from sqlalchemy.orm import sessionmaker

from denominator_stage.db.time import utcnow
from denominator_stage.models import Post
from denominator_stage.services.publish_scheduler import PublishSweepWorker, run_publish_sweep


def _scheduled_post(db_session, post_id: str, minutes: int) -> None:
    db_session.add(
        Post(
            id=post_id,
            title=post_id,
            excerpt="e",
            content="c",
            status="published",
            publish_at=utcnow() + timedelta(minutes=minutes),
        )
    )
    db_session.commit()


def test_run_publish_sweep_uses_its_own_session(engine, db_session, invalidator) -> None:
    """Due posts are published; future ones are left scheduled."""
    _scheduled_post(db_session, "due", -5)
    _scheduled_post(db_session, "future", 60)
    factory = sessionmaker(bind=engine)

    published = run_publish_sweep(factory, invalidator)

    assert published == ["due"]
    assert run_publish_sweep(factory, invalidator) == []
    db_session.expire_all()
    assert db_session.get(Post, "due").published_at is not None
    assert db_session.get(Post, "future").published_at is None


def test_worker_sweeps_until_stopped(engine, db_session) -> None:
    """The worker runs a sweep on start and stops cleanly."""
    _scheduled_post(db_session, "due", -1)
    db_session.close()
    worker = PublishSweepWorker(interval_seconds=0.1, session_factory=sessionmaker(bind=engine))

    async def scenario() -> None:
        await worker.start()
        await asyncio.sleep(0.25)
        await worker.stop()

    asyncio.run(scenario())

    db_session.expire_all()
    assert db_session.get(Post, "due").published_at is not None


def test_worker_keeps_running_after_unexpected_error(engine, db_session, caplog) -> None:
    """A failing tick is logged and the next tick still publishes due posts."""
    _scheduled_post(db_session, "due", -1)
    db_session.close()
    factory = sessionmaker(bind=engine)
    attempts = []

    def flaky_factory():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("connection pool exhausted")
        return factory()

    worker = PublishSweepWorker(interval_seconds=0.1, session_factory=flaky_factory)

    async def scenario() -> bool:
        await worker.start()
        await asyncio.sleep(0.35)
        alive = not worker._task.done()
        await worker.stop()
        return alive

    with caplog.at_level("ERROR", logger="denominator_stage.services.publish_scheduler"):
        alive = asyncio.run(scenario())

    assert alive
    assert len(attempts) >= 2
    assert "connection pool exhausted" in caplog.text
    db_session.expire_all()
    assert db_session.get(Post, "due").published_at is not None
