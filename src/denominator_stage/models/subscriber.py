# src/denominator_stage/models/subscriber.py
"""Mailing list subscriber records."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from denominator_stage.db.session import Base
from denominator_stage.db.time import utcnow

CONTACT_KIND_EMAIL = "email"
CONTACT_KIND_PHONE = "phone"


class MailingListSubscriber(Base):
    """Subscriber keyed by the normalized form of their contact."""

    __tablename__ = "mailing_list"
    __table_args__ = (
        CheckConstraint("contact_kind IN ('email', 'phone')", name="ck_mailing_list_kind"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Lowercased email or digits-only phone.
    normalized_contact: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    contact: Mapped[str] = mapped_column(Text, nullable=False)
    contact_kind: Mapped[str] = mapped_column(String(8), nullable=False)
    subscribed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
