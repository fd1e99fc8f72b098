# mypy: ignore-errors
"""Tests for channel chat."""

from datetime import timedelta

import pytest

from denominator_stage.core.errors import ForbiddenError, NotFoundError, ValidationError
from denominator_stage.db.time import as_utc, utcnow
from denominator_stage.services.chat import ChatService
from denominator_stage.services.identity import RequestIdentity


class StepClock:
    """Clock that advances one second per call."""

    def __init__(self) -> None:
        self.now = utcnow().replace(microsecond=0)

    def __call__(self):
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture()
def chat(db_session):
    return ChatService(db_session, clock=StepClock())


def _send(chat, content="hello there", channel="lobby", client_id="client_a"):
    return chat.send(channel=channel, nickname="Sam", content=content, client_id=client_id)


def test_send_stores_message(chat) -> None:
    """Approved messages are stored with their channel and client id."""
    message = _send(chat)

    assert message.id is not None
    assert message.channel == "lobby"
    assert message.client_id == "client_a"
    assert message.is_deleted is False


def test_send_validation(chat) -> None:
    """Nickname bounds, channel and moderation are enforced."""
    with pytest.raises(ValidationError, match="Nickname"):
        chat.send(channel="lobby", nickname="S", content="hi", client_id="c")
    with pytest.raises(ValidationError, match="Nickname"):
        chat.send(channel="lobby", nickname="S" * 31, content="hi", client_id="c")
    with pytest.raises(ValidationError, match="Channel"):
        chat.send(channel=" ", nickname="Sam", content="hi", client_id="c")
    with pytest.raises(ValidationError, match="Excessive caps detected"):
        chat.send(channel="lobby", nickname="Sam", content="A" * 20, client_id="c")


def test_send_rejects_unknown_post(chat) -> None:
    """Linking a message to a missing post is NotFound."""
    with pytest.raises(NotFoundError):
        chat.send(channel="post:x", nickname="Sam", content="hi", client_id="c", post_id="x")


def test_history_is_chronological_and_partitioned(chat) -> None:
    """History returns only the channel's messages, oldest first."""
    first = _send(chat, "one")
    _send(chat, "elsewhere", channel="other")
    second = _send(chat, "two")

    history = chat.history("lobby")

    assert [m.id for m in history.messages] == [first.id, second.id]
    assert history.count == 2
    assert history.has_more is False


def test_history_cursors(chat) -> None:
    """before pages backwards and after fetches newer messages."""
    messages = [_send(chat, f"message {i}") for i in range(5)]

    latest = chat.history("lobby", limit=2)
    assert [m.content for m in latest.messages] == ["message 3", "message 4"]
    assert latest.has_more is True

    older = chat.history("lobby", limit=2, before=as_utc(latest.messages[0].created_at))
    assert [m.content for m in older.messages] == ["message 1", "message 2"]

    newer = chat.history("lobby", after=as_utc(messages[2].created_at))
    assert [m.content for m in newer.messages] == ["message 3", "message 4"]
    assert newer.has_more is False


def test_history_limit_is_capped(chat) -> None:
    """Limits above 100 are clamped."""
    _send(chat)

    assert len(chat.history("lobby", limit=500).messages) == 1


def test_soft_delete_authorization(chat) -> None:
    """Only the sender's client or an admin may delete a message."""
    message = _send(chat)

    with pytest.raises(ForbiddenError):
        chat.delete(message.id, RequestIdentity(client_id="client_b"))

    chat.delete(message.id, RequestIdentity(client_id="client_a"))

    assert chat.history("lobby").messages == []
    with pytest.raises(NotFoundError):
        chat.delete(message.id, RequestIdentity(is_admin=True))


def test_presence_upsert_and_window(db_session) -> None:
    """Heartbeats upsert one row per username; stale users drop out of the list."""
    clock = StepClock()
    presence = ChatService(db_session, clock=clock)

    first = presence.update_presence(" sam ")
    assert first.username == "sam"
    assert first.status == "online"
    presence.update_presence("alex", "away")

    clock.now = clock.now + timedelta(minutes=4)
    again = presence.update_presence("sam", "busy")

    assert again.status == "busy"
    assert as_utc(again.last_seen) == clock.now
    assert [u.username for u in presence.online_users()] == ["alex", "sam"]

    clock.now = clock.now + timedelta(minutes=2)
    assert [u.username for u in presence.online_users()] == ["sam"]


def test_presence_requires_username(chat) -> None:
    with pytest.raises(ValidationError, match="Username is required"):
        chat.update_presence("  ")
    with pytest.raises(ValidationError, match="Username too long"):
        chat.update_presence("s" * 31)
