"""Generate a batch file of payment commands for smoke runs.

Each payment walks a random but plausible lifecycle path; a share of lines
repeat earlier commands or add trailing comments so replay and comment
handling get exercised too.
"""

import argparse
import random
from pathlib import Path


PATHS = [
    ["AUTHORIZE", "CAPTURE", "SETTLE"],
    ["AUTHORIZE", "CAPTURE", "SETTLE", "REFUND"],
    ["AUTHORIZE", "CAPTURE", "REFUND"],
    ["AUTHORIZE", "VOID"],
    ["VOID"],
    [],
]
CURRENCIES = ["MYR", "SGD", "USD"]


def payment_lines(rng: random.Random, idx: int) -> list[str]:
    """Return the command lines for one payment's lifecycle."""

    payment_id = f"P{idx:05d}"
    amount_cents = rng.randint(100, 25000)
    amount = f"{amount_cents / 100:.2f}"
    create = f"CREATE {payment_id} {amount} {rng.choice(CURRENCIES)} M{rng.randint(1, 20):02d}"
    lines = [create]
    for step in rng.choice(PATHS):
        if step == "VOID":
            lines.append(f"VOID {payment_id} CUSTOMER_REQUEST")
        elif step == "REFUND":
            lines.append(f"REFUND {payment_id} {rng.randint(1, amount_cents) / 100:.2f}")
        else:
            lines.append(f"{step} {payment_id}")
    if rng.random() < 0.1:
        lines.append(create)
    if rng.random() < 0.1:
        # padding puts the marker past the four reserved token slots
        lines[-1] = f"{lines[-1]} {'x ' * 3}# generated replay check"
    return lines


def main() -> None:
    """CLI entrypoint for writing a batch file."""

    parser = argparse.ArgumentParser(description="Write a random payment command batch file.")
    parser.add_argument("--payments", type=int, default=100)
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--output", default="batch.txt")
    args = parser.parse_args()

    rng = random.Random(args.seed)
    lines: list[str] = []
    for i in range(args.payments):
        lines.extend(payment_lines(rng, i))
    lines.append("SETTLEMENT B001")
    Path(args.output).write_text("\n".join(lines) + "\n", encoding="utf-8")
    print(f"wrote {len(lines)} lines to {args.output}")


if __name__ == "__main__":
    main()
