import pytest

from swiftslot.core.exceptions import ValidationException
from swiftslot.services.payment_events import ChargeSucceeded, IgnoredEvent, parse_payment_event


def test_charge_success_is_parsed():
    event = parse_payment_event("charge.success", {"reference": " pay_abc ", "amount": 50})

    assert isinstance(event, ChargeSucceeded)
    assert event.reference == "pay_abc"
    assert event.payload["amount"] == 50


def test_other_events_are_ignored():
    event = parse_payment_event("charge.failed", {"reference": "pay_abc"})
    assert event == IgnoredEvent(event_type="charge.failed")


@pytest.mark.parametrize("data", [None, {}, {"reference": ""}, {"reference": 12}])
def test_success_without_reference_is_invalid(data):
    with pytest.raises(ValidationException):
        parse_payment_event("charge.success", data)


def test_missing_event_type_is_invalid():
    with pytest.raises(ValidationException):
        parse_payment_event("", {"reference": "pay_abc"})
