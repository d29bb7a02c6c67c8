"""Stateless argument checks shared by command handlers."""

import re
from decimal import Decimal, InvalidOperation

from paycli.common.errors import ValidationError


ALLOWED_CURRENCIES: tuple[str, ...] = ("MYR", "SGD", "USD", "EUR", "GBP", "AUD", "THB", "IDR", "PHP", "VND")
# Plain ASCII decimal text; no exponents, underscores or non-ASCII digits.
AMOUNT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def validate_args_length(args: list[str], minimum: int, command: str) -> None:
    if len(args) < minimum:
        raise ValidationError(
            f"Insufficient arguments for {command} command, one or more arguments is missing."
        )


def validate_required(value: str | None, field: str, command: str) -> str:
    if not value:
        raise ValidationError(f"{field} is required for {command} command")
    return value


def validate_amount(raw: str, command: str) -> Decimal:
    """Parse a decimal amount that must be finite and strictly positive."""

    amount = None
    if AMOUNT_PATTERN.fullmatch(raw):
        try:
            amount = Decimal(raw)
        except InvalidOperation:
            amount = None
    if amount is None or not amount.is_finite() or amount <= 0:
        raise ValidationError(f"Amount must be a positive number for {command} command")
    return amount


def validate_currency(currency: str) -> str:
    if currency not in ALLOWED_CURRENCIES:
        raise ValidationError(
            f'Currency "{currency}" is not supported. Allowed currencies: {", ".join(ALLOWED_CURRENCIES)}'
        )
    return currency
