"""Payment record and audit trail models.

`Payment` is immutable. Each command has one transition method that returns a
new record carrying exactly the fields that command is allowed to change.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, Field

from paycli.common.errors import ValidationError
from paycli.common.state_machine import PaymentState, authorization_target, validate_transition


CENT = Decimal("0.01")


def normalize_amount(value: Decimal) -> tuple[str, int]:
    """Round an amount to 2 decimals and return (text, cents)."""

    try:
        rounded = value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"Amount {value} is too large") from None
    return f"{rounded:.2f}", int(rounded * 100)


class Payment(BaseModel):
    """Current state of one payment."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    amount: str
    amount_cents: int = Field(ge=0)
    currency: str
    merchant_id: str
    state: PaymentState = PaymentState.INITIATED
    reason_code: str | None = None
    refunded_amount: str | None = None
    refunded_amount_cents: int | None = None
    create_conflict_reason: str | None = None

    def _moved_to(self, new_state: PaymentState, **changes) -> "Payment":
        validate_transition(self.state, new_state)
        return self.model_copy(update={"state": new_state, **changes})

    def authorize(self) -> "Payment":
        return self._moved_to(authorization_target(self.amount_cents))

    def capture(self) -> "Payment":
        return self._moved_to(PaymentState.CAPTURED)

    def settle(self) -> "Payment":
        return self._moved_to(PaymentState.SETTLED)

    def void(self, reason_code: str) -> "Payment":
        return self._moved_to(PaymentState.VOIDED, reason_code=reason_code)

    def refund(self, refunded_amount: str, refunded_amount_cents: int) -> "Payment":
        return self._moved_to(
            PaymentState.REFUNDED,
            refunded_amount=refunded_amount,
            refunded_amount_cents=refunded_amount_cents,
        )

    def mark_failed(self, conflict_reason: str) -> "Payment":
        """Poison the record after a conflicting CREATE."""

        return self._moved_to(PaymentState.FAILED, create_conflict_reason=conflict_reason)

    def differences(self, amount_cents: int, currency: str, merchant_id: str) -> list[str]:
        """Name the creation fields that differ from the given values."""

        diffs = []
        if self.amount_cents != amount_cents:
            diffs.append("amount")
        if self.currency != currency:
            diffs.append("currency")
        if self.merchant_id != merchant_id:
            diffs.append("merchant_id")
        return diffs


class TimelineEntry(BaseModel):
    """Immutable audit record of one state write."""

    model_config = ConfigDict(frozen=True)

    payment_id: str
    command: str
    from_state: PaymentState | None
    to_state: PaymentState
    reason: str
    comment: str | None = None
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
