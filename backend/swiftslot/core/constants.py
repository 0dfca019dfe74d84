"""Application-wide constants for SwiftSlot."""

BRAND_NAME = "SwiftSlot"

# Every vendor calendar shares this timezone unless configured otherwise
DEFAULT_BUSINESS_TIMEZONE = "Africa/Lagos"

# Slot length is fixed; bookings are whole multiples of it
SLOT_MINUTES = 30

ANONYMOUS_BUYER_ID = "anonymous"

# Idempotency ledger scopes
IDEMPOTENCY_SCOPE_BOOKING = "booking"
IDEMPOTENCY_SCOPE_WEBHOOK = "webhook"

# Payment provider event names
CHARGE_SUCCESS_EVENT = "charge.success"

IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"
MAX_IDEMPOTENCY_KEY_LENGTH = 255
