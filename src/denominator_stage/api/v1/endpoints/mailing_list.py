# src/denominator_stage/api/v1/endpoints/mailing_list.py
"""Mailing list endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from denominator_stage.schemas.mailing_list import SubscribeRequest, SubscribeResponse
from denominator_stage.services.mailing_list import MailingListService

from ..dependencies import ClientAddressDep, RateLimitersDep, SessionDep

router = APIRouter(prefix="/mailing-list", tags=["mailing-list"])


@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(
    body: SubscribeRequest,
    db: SessionDep,
    limiters: RateLimitersDep,
    address: ClientAddressDep,
) -> SubscribeResponse:
    """Subscribe a contact, or unsubscribe it with ``subscribed: false``."""
    limiters.check("subscribe", address)
    subscriber = MailingListService(db).subscribe(body.resolved_contact, body.subscribed)
    message = (
        "Successfully subscribed to the mailing list"
        if subscriber.subscribed
        else "Successfully unsubscribed from the mailing list"
    )
    return SubscribeResponse(
        message=message,
        subscribed=subscriber.subscribed,
        contact_kind=subscriber.contact_kind,
    )
