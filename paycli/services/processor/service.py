"""Payment lifecycle command handlers.

Each handler validates its arguments, re-reads the current record under the
per-ID lock, computes the next record with the matching transition method,
writes it back and records the write in the timeline.
"""

from paycli.common.errors import (
    AlreadyRefundedError,
    InvalidTransitionError,
    PaymentConflictError,
    PaymentNotFoundError,
    RefundLimitExceededError,
)
from paycli.common.logging import logger, payment_id_ctx
from paycli.common.metrics import idempotent_replays_total, payment_transitions_total
from paycli.common.state_machine import (
    AUTHORIZABLE_STATES,
    CAPTURABLE_STATES,
    REFUNDABLE_STATES,
    SETTLEABLE_STATES,
    VOIDABLE_STATES,
    PaymentState,
)
from paycli.services.processor.models import Payment, TimelineEntry, normalize_amount
from paycli.services.processor.store import PaymentStore, PaymentTimeline
from paycli.services.processor.validators import (
    validate_amount,
    validate_args_length,
    validate_currency,
    validate_required,
)


class PaymentProcessor:
    """Owns payment state machine progression for the six mutating commands."""

    def __init__(
        self,
        store: PaymentStore,
        timeline: PaymentTimeline | None = None,
        service_name: str = "paycli",
    ) -> None:
        self.store = store
        self.timeline = timeline or PaymentTimeline()
        self.service_name = service_name

    def _payment_id(self, args: list[str], minimum: int, command: str) -> str:
        validate_args_length(args, minimum, command)
        payment_id = validate_required(args[0], "Payment ID", command)
        payment_id_ctx.set(payment_id)
        return payment_id

    def _load(self, payment_id: str) -> Payment:
        payment = self.store.get(payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return payment

    def _require_state(
        self, payment: Payment, allowed: frozenset[PaymentState], action: str
    ) -> None:
        if payment.state not in allowed:
            raise InvalidTransitionError(
                f'Payment with ID "{payment.id}" is not in a state that can be {action}. '
                f"Current state: {payment.state.value}"
            )

    def _write(
        self,
        command: str,
        previous: Payment | None,
        payment: Payment,
        reason: str,
        comment: str | None,
    ) -> None:
        """Persist one state write and append it to the timeline."""

        from_state = previous.state if previous else None
        self.store.upsert(payment.id, payment)
        self.timeline.record(
            TimelineEntry(
                payment_id=payment.id,
                command=command,
                from_state=from_state,
                to_state=payment.state,
                reason=reason,
                comment=comment,
            )
        )
        payment_transitions_total.labels(
            service=self.service_name,
            from_state=from_state.value if from_state else "NONE",
            to_state=payment.state.value,
        ).inc()
        logger.info(
            "payment transition payment_id=%s from=%s to=%s reason=%s",
            payment.id,
            from_state.value if from_state else None,
            payment.state.value,
            reason,
        )

    def _record_replay(self, command: str, payment_id: str) -> None:
        idempotent_replays_total.labels(service=self.service_name, command=command).inc()
        logger.info("idempotent replay command=%s payment_id=%s", command, payment_id)

    def create(self, args: list[str], comment: str | None = None) -> str:
        """Create a payment once per ID; replays with the same details are no-ops.

        A CREATE that reuses an ID with a different amount, currency or
        merchant marks the stored payment FAILED and then raises.
        """

        command = "CREATE"
        payment_id = self._payment_id(args, 4, command)
        raw_amount = validate_required(args[1], "Amount", command)
        amount, amount_cents = normalize_amount(validate_amount(raw_amount, command))
        currency = validate_currency(validate_required(args[2], "Currency", command))
        merchant_id = validate_required(args[3], "Merchant ID", command)

        with self.store.locked(payment_id):
            existing = self.store.get(payment_id)
            if existing is None:
                payment = Payment(
                    id=payment_id,
                    amount=amount,
                    amount_cents=amount_cents,
                    currency=currency,
                    merchant_id=merchant_id,
                )
                self._write(command, None, payment, "payment_created", comment)
                return f"Payment with ID: {payment_id} has been created."

            differences = existing.differences(amount_cents, currency, merchant_id)
            if not differences:
                self._record_replay(command, payment_id)
                return f"Payment with ID: {payment_id} already exists with the same details. No changes made."

            conflict_reason = f"create_conflict: {', '.join(differences)} differ"
            self._write(command, existing, existing.mark_failed(conflict_reason), conflict_reason, comment)
            raise PaymentConflictError(payment_id, differences)

    def authorize(self, args: list[str], comment: str | None = None) -> str:
        """Authorize an INITIATED payment, routing large amounts to review."""

        command = "AUTHORIZE"
        payment_id = self._payment_id(args, 1, command)
        with self.store.locked(payment_id):
            payment = self._load(payment_id)
            self._require_state(payment, AUTHORIZABLE_STATES, "authorized")
            updated = payment.authorize()
            reason = (
                "review_required"
                if updated.state is PaymentState.PRE_SETTLEMENT_REVIEW
                else "authorized"
            )
            self._write(command, payment, updated, reason, comment)
        return f"Payment with ID: {payment_id} has been authorized. Current state: {updated.state.value}"

    def capture(self, args: list[str], comment: str | None = None) -> str:
        command = "CAPTURE"
        payment_id = self._payment_id(args, 1, command)
        with self.store.locked(payment_id):
            payment = self._load(payment_id)
            self._require_state(payment, CAPTURABLE_STATES, "captured")
            self._write(command, payment, payment.capture(), "captured", comment)
        return f"Payment with ID: {payment_id} has been captured."

    def settle(self, args: list[str], comment: str | None = None) -> str:
        """Settle a captured payment; settling again is accepted unchanged."""

        command = "SETTLE"
        payment_id = self._payment_id(args, 1, command)
        with self.store.locked(payment_id):
            payment = self._load(payment_id)
            self._require_state(payment, SETTLEABLE_STATES, "settled")
            if payment.state is PaymentState.SETTLED:
                self._record_replay(command, payment_id)
                return f"Payment with ID: {payment_id} is already settled."
            self._write(command, payment, payment.settle(), "settled", comment)
        return f"Payment with ID: {payment_id} has been settled."

    def void(self, args: list[str], comment: str | None = None) -> str:
        command = "VOID"
        payment_id = self._payment_id(args, 2, command)
        reason_code = validate_required(args[1], "Reason Code", command)
        with self.store.locked(payment_id):
            payment = self._load(payment_id)
            self._require_state(payment, VOIDABLE_STATES, "voided")
            self._write(command, payment, payment.void(reason_code), f"voided: {reason_code}", comment)
        return f"Payment with ID: {payment_id} has been voided due to {reason_code}."

    def refund(self, args: list[str], comment: str | None = None) -> str:
        """Refund up to the original amount of a captured or settled payment."""

        command = "REFUND"
        payment_id = self._payment_id(args, 2, command)
        raw_amount = validate_required(args[1], "Amount", command)
        refund_amount, refund_cents = normalize_amount(validate_amount(raw_amount, command))
        with self.store.locked(payment_id):
            payment = self._load(payment_id)
            if payment.state is PaymentState.REFUNDED:
                raise AlreadyRefundedError(payment_id)
            self._require_state(payment, REFUNDABLE_STATES, "refunded")
            if refund_cents > payment.amount_cents:
                raise RefundLimitExceededError(payment_id)
            self._write(command, payment, payment.refund(refund_amount, refund_cents), "refunded", comment)
        return f"Payment with ID: {payment_id} has been refunded {refund_amount} {payment.currency}."
