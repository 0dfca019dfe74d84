"""
Payment provider notifications, parsed into a closed set of variants.

Only ``charge.success`` has an effect; every other event type is acknowledged
and ignored.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from ..core.constants import CHARGE_SUCCESS_EVENT
from ..core.exceptions import ValidationException


@dataclass(frozen=True)
class ChargeSucceeded:
    reference: str
    payload: Dict[str, Any] = field(default_factory=dict)

    event_type: str = CHARGE_SUCCESS_EVENT


@dataclass(frozen=True)
class IgnoredEvent:
    event_type: str


PaymentEvent = Union[ChargeSucceeded, IgnoredEvent]


def parse_payment_event(event_type: str, data: Optional[Dict[str, Any]]) -> PaymentEvent:
    """
    Classify a raw provider notification.

    Raises:
        ValidationException: if the event type is missing, or a success event has no reference
    """
    if not event_type:
        raise ValidationException("Invalid webhook payload", code="INVALID_WEBHOOK_PAYLOAD")
    if event_type != CHARGE_SUCCESS_EVENT:
        return IgnoredEvent(event_type=event_type)

    payload = dict(data or {})
    reference = payload.get("reference")
    if not isinstance(reference, str) or not reference.strip():
        raise ValidationException(
            "Invalid webhook payload: missing payment reference",
            code="INVALID_WEBHOOK_PAYLOAD",
        )
    return ChargeSucceeded(reference=reference.strip(), payload=payload)
