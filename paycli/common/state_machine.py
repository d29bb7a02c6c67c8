"""Payment states and the transitions the command handlers may apply."""

from enum import Enum

from paycli.common.errors import InvalidTransitionError


class PaymentState(str, Enum):
    """Closed set of lifecycle stages for one payment."""

    INITIATED = "INITIATED"
    AUTHORIZED = "AUTHORIZED"
    PRE_SETTLEMENT_REVIEW = "PRE_SETTLEMENT_REVIEW"
    CAPTURED = "CAPTURED"
    SETTLED = "SETTLED"
    VOIDED = "VOIDED"
    REFUNDED = "REFUNDED"
    FAILED = "FAILED"


# Edges into FAILED are only taken by a conflicting CREATE.
ALLOWED_TRANSITIONS: dict[PaymentState, frozenset[PaymentState]] = {
    PaymentState.INITIATED: frozenset(
        {
            PaymentState.AUTHORIZED,
            PaymentState.PRE_SETTLEMENT_REVIEW,
            PaymentState.VOIDED,
            PaymentState.FAILED,
        }
    ),
    PaymentState.AUTHORIZED: frozenset({PaymentState.CAPTURED, PaymentState.VOIDED, PaymentState.FAILED}),
    PaymentState.PRE_SETTLEMENT_REVIEW: frozenset(
        {PaymentState.CAPTURED, PaymentState.VOIDED, PaymentState.FAILED}
    ),
    PaymentState.CAPTURED: frozenset({PaymentState.SETTLED, PaymentState.REFUNDED, PaymentState.FAILED}),
    PaymentState.SETTLED: frozenset({PaymentState.REFUNDED, PaymentState.FAILED}),
    PaymentState.VOIDED: frozenset({PaymentState.FAILED}),
    PaymentState.REFUNDED: frozenset({PaymentState.FAILED}),
    PaymentState.FAILED: frozenset({PaymentState.FAILED}),
}

# Source states each mutating command accepts. SETTLE lists SETTLED so a
# repeated settle is accepted as a replay.
AUTHORIZABLE_STATES = frozenset({PaymentState.INITIATED})
CAPTURABLE_STATES = frozenset({PaymentState.AUTHORIZED, PaymentState.PRE_SETTLEMENT_REVIEW})
SETTLEABLE_STATES = frozenset({PaymentState.CAPTURED, PaymentState.SETTLED})
VOIDABLE_STATES = frozenset(
    {PaymentState.INITIATED, PaymentState.AUTHORIZED, PaymentState.PRE_SETTLEMENT_REVIEW}
)
REFUNDABLE_STATES = frozenset({PaymentState.CAPTURED, PaymentState.SETTLED})

# Fraud-review gate: authorizations at or above 100.00 go to review.
REVIEW_THRESHOLD_CENTS = 10_000


def validate_transition(current: PaymentState, new: PaymentState) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(f"Invalid transition: {current.value} -> {new.value}")


def authorization_target(amount_cents: int) -> PaymentState:
    """Pick the post-authorization state for an amount in cents."""

    if amount_cents >= REVIEW_THRESHOLD_CENTS:
        return PaymentState.PRE_SETTLEMENT_REVIEW
    return PaymentState.AUTHORIZED
