# mypy: ignore-errors
"""Tests for the mailing list endpoint."""

from fastapi import status
from sqlalchemy import func, select

from denominator_stage.core.settings import settings
from denominator_stage.models import MailingListSubscriber

URL = "/api/v1/mailing-list/subscribe"


def test_subscribe_twice_keeps_one_record(client, db_session) -> None:
    """Casing differences resolve to the same subscriber."""
    first = client.post(URL, json={"contact": "Foo@Example.com"})
    second = client.post(URL, json={"email": "foo@example.com"})

    assert first.status_code == status.HTTP_200_OK
    assert second.json() == {
        "message": "Successfully subscribed to the mailing list",
        "subscribed": True,
        "contact_kind": "email",
    }
    count = db_session.scalar(select(func.count()).select_from(MailingListSubscriber))
    assert count == 1


def test_unsubscribe(client) -> None:
    """subscribed=false flips the flag."""
    client.post(URL, json={"contact": "reader@example.com"})
    response = client.post(URL, json={"contact": "reader@example.com", "subscribed": False})

    assert response.json()["subscribed"] is False


def test_subscribed_must_be_boolean(client) -> None:
    """Strings are not coerced into the subscribed flag."""
    response = client.post(URL, json={"contact": "reader@example.com", "subscribed": "yes"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_invalid_contact(client) -> None:
    """Neither an email nor a phone number is a 400."""
    response = client.post(URL, json={"contact": "hello"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_phone_subscription(client) -> None:
    """Phone numbers are accepted and classified."""
    response = client.post(URL, json={"contact": "+1 (555) 123-4567"})
    assert response.json()["contact_kind"] == "phone"


def test_subscribe_rate_limited_by_address(client) -> None:
    """Ten attempts per address per window; other addresses are unaffected."""
    headers = {"X-Forwarded-For": "203.0.113.5, 10.0.0.1"}
    for i in range(10):
        assert client.post(URL, json={"contact": f"r{i}@example.com"}, headers=headers).status_code == 200

    limited = client.post(URL, json={"contact": "late@example.com"}, headers=headers)
    other = client.post(
        URL, json={"contact": "late@example.com"}, headers={"X-Real-IP": "198.51.100.7"}
    )

    assert limited.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert other.status_code == status.HTTP_200_OK


def test_phone_subscription_disabled_is_not_implemented(client, monkeypatch) -> None:
    """Disabled phone support answers 501, distinct from request validation."""
    monkeypatch.setattr(settings, "phone_subscriptions_enabled", False)

    response = client.post(URL, json={"contact": "+44 20 7946 0958"})

    assert response.status_code == status.HTTP_501_NOT_IMPLEMENTED
    assert "Phone subscriptions" in response.json()["detail"]
