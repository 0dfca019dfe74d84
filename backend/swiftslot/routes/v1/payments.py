# backend/swiftslot/routes/v1/payments.py
"""
Payment routes - API v1

Endpoints:
    POST /initialize - Create or return the payment for a pending booking
    POST /webhook - Payment provider notification
    GET /{reference} - Payment status
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Path

from ...api.dependencies import get_payment_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...schemas.payment import (
    PaymentInitRequest,
    PaymentInitResponse,
    PaymentStatusResponse,
    WebhookAckResponse,
    WebhookPayload,
)
from ...services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments-v1"])


@router.post("/initialize", response_model=PaymentInitResponse)
async def initialize_payment(
    payload: PaymentInitRequest,
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentInitResponse:
    """Initialize a payment; repeated calls return the same reference."""
    try:
        return await asyncio.to_thread(payment_service.initialize_payment, payload.booking_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/webhook", response_model=WebhookAckResponse, response_model_exclude_none=True)
async def payment_webhook(
    payload: WebhookPayload,
    payment_service: PaymentService = Depends(get_payment_service),
) -> WebhookAckResponse:
    """
    Receive a payment provider notification.

    Only ``charge.success`` changes state; other events are acknowledged
    and ignored. Duplicate deliveries return the first response.
    """
    logger.info("Payment webhook received: event=%s", payload.event)
    try:
        return await asyncio.to_thread(
            payment_service.handle_notification,
            payload.event,
            payload.data.model_dump(),
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{reference}", response_model=PaymentStatusResponse)
async def get_payment_status(
    reference: str = Path(..., min_length=1, max_length=64),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentStatusResponse:
    """Get payment status with a booking summary."""
    try:
        return await asyncio.to_thread(payment_service.get_payment_status, reference)
    except DomainException as e:
        handle_domain_exception(e)
