"""Read-only reporting commands rendered as plain text tables."""

from paycli.common.state_machine import PaymentState
from paycli.services.processor.models import Payment, TimelineEntry
from paycli.services.processor.store import PaymentStore, PaymentTimeline
from paycli.services.processor.validators import validate_args_length, validate_required


PAYMENT_COLUMNS = [
    "id",
    "amount",
    "amount_cents",
    "currency",
    "merchant_id",
    "state",
    "reason_code",
    "refunded_amount",
    "refunded_amount_cents",
]
TIMELINE_COLUMNS = ["occurred_at", "payment_id", "command", "from_state", "to_state", "reason", "comment"]


def _cell(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, PaymentState):
        return value.value
    if hasattr(value, "isoformat"):
        return value.isoformat(timespec="seconds")
    return str(value)


def render_table(rows: list[dict], columns: list[str]) -> str:
    """Render rows as a fixed-width table with a header line."""

    cells = [[_cell(row.get(col)) for col in columns] for row in rows]
    widths = [max([len(col)] + [len(r[i]) for r in cells]) for i, col in enumerate(columns)]
    lines = [
        "  ".join(col.ljust(w) for col, w in zip(columns, widths)).rstrip(),
        "  ".join("-" * w for w in widths),
    ]
    lines.extend("  ".join(c.ljust(w) for c, w in zip(r, widths)).rstrip() for r in cells)
    return "\n".join(lines)


def _payment_table(payments: list[Payment]) -> str:
    return render_table([p.model_dump() for p in payments], PAYMENT_COLUMNS)


def payment_status(store: PaymentStore, args: list[str], comment: str | None = None) -> str:
    """Show one payment, or a not-found notice."""

    validate_args_length(args, 1, "STATUS")
    payment_id = validate_required(args[0], "Payment ID", "STATUS")
    payment = store.get(payment_id)
    if payment is None:
        return f"Payment ID {payment_id} not found."
    return _payment_table([payment])


def settlement_report(store: PaymentStore, args: list[str], comment: str | None = None) -> str:
    """List settled payments for a settlement batch."""

    validate_args_length(args, 1, "SETTLEMENT")
    batch_id = validate_required(args[0], "Batch ID", "SETTLEMENT")
    settled = sorted(
        (p for p in store.list_all() if p.state is PaymentState.SETTLED), key=lambda p: p.id
    )
    if not settled:
        return "No payments found for settlement in this batch."
    return f"{_payment_table(settled)}\nProcessed settlement report for Batch ID: {batch_id}"


def list_payments(store: PaymentStore, args: list[str], comment: str | None = None) -> str:
    payments = sorted(store.list_all(), key=lambda p: p.id)
    if not payments:
        return "No payments recorded."
    return _payment_table(payments)


def audit_report(timeline: PaymentTimeline, args: list[str], comment: str | None = None) -> str:
    """Show recorded state writes, optionally for one payment ID."""

    entries: list[TimelineEntry] = timeline.entries(args[0] if args else None)
    if not entries:
        return "No audit entries recorded."
    return render_table([e.model_dump() for e in entries], TIMELINE_COLUMNS)
