"""Command handler tests: lifecycle, idempotency and rejection paths."""

import pytest

from paycli.common.errors import (
    AlreadyRefundedError,
    InvalidTransitionError,
    PaymentConflictError,
    PaymentNotFoundError,
    RefundLimitExceededError,
    ValidationError,
)
from paycli.common.state_machine import PaymentState


def test_create_stores_initiated_payment(processor, store):
    message = processor.create(["P1", "10.00", "MYR", "M01"])

    payment = store.get("P1")
    assert message == "Payment with ID: P1 has been created."
    assert payment.state is PaymentState.INITIATED
    assert payment.amount == "10.00"
    assert payment.amount_cents == 1000
    assert payment.currency == "MYR"
    assert payment.merchant_id == "M01"


def test_create_rounds_amount_to_two_decimals(processor, store):
    processor.create(["P1", "10.005", "MYR", "M01"])

    assert store.get("P1").amount == "10.01"
    assert store.get("P1").amount_cents == 1001


def test_create_replay_is_noop(processor, store, timeline):
    """Identical CREATE is accepted and leaves the record untouched."""

    processor.create(["P1", "10.00", "MYR", "M01"])
    before = store.get("P1")
    message = processor.create(["P1", "10.0", "MYR", "M01"])

    assert "No changes made" in message
    assert store.get("P1") == before
    assert store.get("P1").state is PaymentState.INITIATED
    assert len(timeline.entries("P1")) == 1


@pytest.mark.parametrize(
    "args, field",
    [
        (["P1", "11.00", "MYR", "M01"], "amount"),
        (["P1", "10.00", "USD", "M01"], "currency"),
        (["P1", "10.00", "MYR", "M02"], "merchant_id"),
    ],
)
def test_create_conflict_marks_payment_failed(processor, store, args, field):
    processor.create(["P1", "10.00", "MYR", "M01"])

    with pytest.raises(PaymentConflictError) as exc_info:
        processor.create(args)

    payment = store.get("P1")
    assert exc_info.value.differences == [field]
    assert payment.state is PaymentState.FAILED
    assert payment.amount_cents == 1000
    assert payment.merchant_id == "M01"
    assert field in payment.create_conflict_reason


def test_create_conflict_poisons_even_advanced_payments(processor, seed_payment, store):
    seed_payment("P1", PaymentState.SETTLED)

    with pytest.raises(PaymentConflictError):
        processor.create(["P1", "99.00", "MYR", "M01"])

    assert store.get("P1").state is PaymentState.FAILED


@pytest.mark.parametrize(
    "args, match",
    [
        (["P1", "10.00", "MYR"], "Insufficient arguments for CREATE"),
        (["P1", "abc", "MYR", "M01"], "positive number"),
        (["P1", "-5", "MYR", "M01"], "positive number"),
        (["P1", "1_0.00", "MYR", "M01"], "positive number"),
        (["P1", "10.00", "XXX", "M01"], "not supported"),
    ],
)
def test_create_validation_failures_store_nothing(processor, store, args, match):
    with pytest.raises(ValidationError, match=match):
        processor.create(args)

    assert store.get("P1") is None


@pytest.mark.parametrize("raw", ["abc", "-1", "0", "0.00", "1e2", "1_000"])
def test_refund_validation_failures_leave_state_unchanged(processor, seed_payment, store, raw):
    original = seed_payment("P1", PaymentState.CAPTURED)

    with pytest.raises(ValidationError, match="positive number for REFUND"):
        processor.refund(["P1", raw])

    assert store.get("P1") == original


def test_authorize_threshold_boundary(processor, store):
    """100.00 goes to review; 99.99 authorizes directly."""

    processor.create(["BIG", "100.00", "MYR", "M01"])
    processor.create(["SMALL", "99.99", "MYR", "M01"])

    processor.authorize(["BIG"])
    processor.authorize(["SMALL"])

    assert store.get("BIG").state is PaymentState.PRE_SETTLEMENT_REVIEW
    assert store.get("SMALL").state is PaymentState.AUTHORIZED


def test_reauthorize_is_rejected(processor, store):
    processor.create(["P1", "10.00", "MYR", "M01"])
    processor.authorize(["P1"])

    with pytest.raises(InvalidTransitionError, match="Current state: AUTHORIZED"):
        processor.authorize(["P1"])

    assert store.get("P1").state is PaymentState.AUTHORIZED


@pytest.mark.parametrize(
    "method, args",
    [
        ("authorize", ["NOPE"]),
        ("capture", ["NOPE"]),
        ("settle", ["NOPE"]),
        ("void", ["NOPE", "R1"]),
        ("refund", ["NOPE", "1.00"]),
    ],
)
def test_missing_payment_is_not_found(processor, method, args):
    with pytest.raises(PaymentNotFoundError, match='"NOPE" does not exist'):
        getattr(processor, method)(args)


@pytest.mark.parametrize(
    "method, args",
    [
        ("authorize", []),
        ("capture", []),
        ("settle", []),
        ("void", ["P1"]),
        ("refund", ["P1"]),
    ],
)
def test_insufficient_arguments(processor, method, args):
    with pytest.raises(ValidationError, match="Insufficient arguments"):
        getattr(processor, method)(args)


def test_capture_from_review(processor, seed_payment, store):
    seed_payment("P1", PaymentState.PRE_SETTLEMENT_REVIEW, amount_cents=20000)

    processor.capture(["P1"])

    assert store.get("P1").state is PaymentState.CAPTURED


def test_settle_replay_changes_nothing(processor, seed_payment, store, timeline):
    seed_payment("P1", PaymentState.CAPTURED)
    processor.settle(["P1"])
    settled = store.get("P1")

    message = processor.settle(["P1"])

    assert message == "Payment with ID: P1 is already settled."
    assert store.get("P1") == settled
    assert len(timeline.entries("P1")) == 1


def test_void_records_reason_code(processor, seed_payment, store):
    seed_payment("P1", PaymentState.AUTHORIZED)

    message = processor.void(["P1", "FRAUD_SUSPECTED"])

    payment = store.get("P1")
    assert payment.state is PaymentState.VOIDED
    assert payment.reason_code == "FRAUD_SUSPECTED"
    assert message.endswith("voided due to FRAUD_SUSPECTED.")


def test_refund_full_amount_succeeds(processor, seed_payment, store):
    seed_payment("P1", PaymentState.SETTLED, amount_cents=1000)

    processor.refund(["P1", "10.00"])

    payment = store.get("P1")
    assert payment.state is PaymentState.REFUNDED
    assert payment.refunded_amount == "10.00"
    assert payment.refunded_amount_cents == 1000
    assert payment.amount == "10.00"
    assert payment.amount_cents == 1000


def test_refund_one_cent_over_is_rejected(processor, seed_payment, store):
    seed_payment("P1", PaymentState.CAPTURED, amount_cents=1000)

    with pytest.raises(RefundLimitExceededError):
        processor.refund(["P1", "10.01"])

    assert store.get("P1").state is PaymentState.CAPTURED


@pytest.mark.parametrize("amount", ["0.01", "5.00", "999.99"])
def test_refund_on_refunded_payment_is_already_refunded(processor, seed_payment, amount):
    seed_payment("P1", PaymentState.REFUNDED)

    with pytest.raises(AlreadyRefundedError, match="already been refunded"):
        processor.refund(["P1", amount])


def test_refund_from_authorized_is_invalid_transition(processor, seed_payment):
    seed_payment("P1", PaymentState.AUTHORIZED)

    with pytest.raises(InvalidTransitionError, match="can be refunded") as exc_info:
        processor.refund(["P1", "1.00"])

    assert not isinstance(exc_info.value, AlreadyRefundedError)


LEGAL = {
    "authorize": {PaymentState.INITIATED},
    "capture": {PaymentState.AUTHORIZED, PaymentState.PRE_SETTLEMENT_REVIEW},
    "settle": {PaymentState.CAPTURED, PaymentState.SETTLED},
    "void": {PaymentState.INITIATED, PaymentState.AUTHORIZED, PaymentState.PRE_SETTLEMENT_REVIEW},
    "refund": {PaymentState.CAPTURED, PaymentState.SETTLED},
}
ARGS = {
    "authorize": ["P1"],
    "capture": ["P1"],
    "settle": ["P1"],
    "void": ["P1", "R1"],
    "refund": ["P1", "1.00"],
}
ILLEGAL_PAIRS = [
    (state, method) for method, allowed in LEGAL.items() for state in PaymentState if state not in allowed
]


@pytest.mark.parametrize("state, method", ILLEGAL_PAIRS)
def test_illegal_pairs_fail_and_leave_state_unchanged(processor, seed_payment, store, state, method):
    """Every (state, command) pair outside the lifecycle table is rejected."""

    original = seed_payment("P1", state)

    with pytest.raises(InvalidTransitionError):
        getattr(processor, method)(ARGS[method])

    assert store.get("P1") == original


def test_end_to_end_lifecycle(processor, store):
    processor.create(["P1", "10.00", "MYR", "M01"])
    payment = store.get("P1")
    assert (payment.state, payment.amount, payment.amount_cents) == (PaymentState.INITIATED, "10.00", 1000)

    processor.authorize(["P1"])
    assert store.get("P1").state is PaymentState.AUTHORIZED

    processor.capture(["P1"])
    assert store.get("P1").state is PaymentState.CAPTURED

    message = processor.refund(["P1", "5.00"])
    assert message == "Payment with ID: P1 has been refunded 5.00 MYR."
    assert store.get("P1").state is PaymentState.REFUNDED
    assert store.get("P1").refunded_amount_cents == 500

    with pytest.raises(AlreadyRefundedError):
        processor.refund(["P1", "1.00"])
    assert store.get("P1").state is PaymentState.REFUNDED


def test_timeline_records_each_write_with_comment(processor, timeline):
    processor.create(["P1", "150.00", "MYR", "M01"], comment="first order")
    processor.authorize(["P1"])

    entries = timeline.entries("P1")
    assert [(e.from_state, e.to_state) for e in entries] == [
        (None, PaymentState.INITIATED),
        (PaymentState.INITIATED, PaymentState.PRE_SETTLEMENT_REVIEW),
    ]
    assert entries[0].comment == "first order"
    assert entries[1].reason == "review_required"
