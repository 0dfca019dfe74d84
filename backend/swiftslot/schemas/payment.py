"""Payment request and response schemas for the mock payment provider."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import Money, StandardizedModel, StrictRequestModel, UTCInstant


class PaymentInitRequest(StrictRequestModel):
    booking_id: str = Field(..., min_length=1, max_length=26)


class PaymentInitResponse(StandardizedModel):
    reference: str
    status: str
    amount: Money
    currency: str


class WebhookData(BaseModel):
    """Provider payload body; only the reference is read."""

    model_config = ConfigDict(extra="allow")

    reference: Optional[str] = None


class WebhookPayload(BaseModel):
    """Notification posted by the payment provider."""

    model_config = ConfigDict(extra="allow")

    event: str = Field(..., min_length=1)
    data: WebhookData = Field(default_factory=WebhookData)


class WebhookAckResponse(StandardizedModel):
    """
    Acknowledgement for a provider notification.

    Ignored events carry ``status="ignored"`` and no payment fields.
    """

    status: str
    message: Optional[str] = None
    reference: Optional[str] = None
    payment_status: Optional[str] = None
    booking_status: Optional[str] = None
    booking_id: Optional[str] = None
    processed_at: Optional[UTCInstant] = None
    was_already_processed: Optional[bool] = None


class PaymentBookingSummary(StandardizedModel):
    id: str
    status: str
    start_time_utc: UTCInstant
    end_time_utc: UTCInstant


class PaymentStatusResponse(StandardizedModel):
    reference: str
    status: str
    amount: Money
    currency: str
    booking_id: str
    booking: PaymentBookingSummary
    created_at: UTCInstant
    event_log: Dict[str, Any] = Field(default_factory=dict)
