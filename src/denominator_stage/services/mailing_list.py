"""Mailing list subscriptions keyed by normalized contact."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from denominator_stage.core.errors import FeatureUnavailableError, ValidationError, storage_errors
from denominator_stage.core.settings import settings
from denominator_stage.db.time import utcnow
from denominator_stage.models.subscriber import (
    CONTACT_KIND_EMAIL,
    CONTACT_KIND_PHONE,
    MailingListSubscriber,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[0-9]{7,15}$")
_PHONE_FORMATTING = re.compile(r"[\s\-()]")


@dataclass(frozen=True)
class Contact:
    """A classified contact and the key it is stored under."""

    kind: str
    raw: str
    normalized: str


def classify_contact(value: str | None) -> Contact:
    """Classify ``value`` as an email or phone number.

    Email wins when both readings are possible.

    Raises:
        ValidationError: If the value is neither.
    """
    raw = (value or "").strip()
    if not raw:
        raise ValidationError("Email or phone number is required")
    if EMAIL_PATTERN.match(raw):
        return Contact(CONTACT_KIND_EMAIL, raw, raw.lower())
    digits = _PHONE_FORMATTING.sub("", raw)
    if digits.startswith("+"):
        digits = digits[1:]
    if PHONE_PATTERN.match(digits):
        return Contact(CONTACT_KIND_PHONE, raw, digits)
    raise ValidationError("Please enter a valid email address or phone number")


class MailingListService:
    def __init__(
        self,
        db: Session,
        *,
        phone_enabled: bool | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.phone_enabled = (
            settings.phone_subscriptions_enabled if phone_enabled is None else phone_enabled
        )
        self._clock = clock

    def subscribe(self, contact: str | None, subscribed: bool = True) -> MailingListSubscriber:
        """Insert or update the subscriber for ``contact``.

        Submitting the same contact again, in any casing or formatting, updates
        the existing row's ``subscribed`` flag and timestamp.

        Raises:
            ValidationError: If the contact is not an email or phone number.
            FeatureUnavailableError: If phone subscriptions are disabled.
            StorageFailure: If the upsert fails.
        """
        parsed = classify_contact(contact)
        if parsed.kind == CONTACT_KIND_PHONE and not self.phone_enabled:
            raise FeatureUnavailableError(
                "Phone subscriptions are not available yet. Please use an email address."
            )

        now = self._clock()
        insert = pg_insert if self.db.get_bind().dialect.name == "postgresql" else sqlite_insert
        stmt = insert(MailingListSubscriber).values(
            normalized_contact=parsed.normalized,
            contact=parsed.raw,
            contact_kind=parsed.kind,
            subscribed=subscribed,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[MailingListSubscriber.normalized_contact],
            set_={
                "contact": stmt.excluded.contact,
                "subscribed": stmt.excluded.subscribed,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        with storage_errors("save subscription", self.db):
            self.db.execute(stmt)
            self.db.commit()
            subscriber = self.db.scalars(
                select(MailingListSubscriber).where(
                    MailingListSubscriber.normalized_contact == parsed.normalized
                )
            ).one()
        logger.info(
            "Mailing list %s %s (%s)",
            "subscribe" if subscribed else "unsubscribe",
            subscriber.id,
            parsed.kind,
        )
        return subscriber
