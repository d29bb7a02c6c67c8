"""Error taxonomy for payment commands.

Every failure a command can produce is a `PaymentCommandError`. The front end
catches that base class per line, reports it and moves on to the next line.

    PaymentCommandError
    ├── MalformedCommandError
    ├── ValidationError
    ├── PaymentNotFoundError
    ├── InvalidTransitionError
    │   └── AlreadyRefundedError
    ├── PaymentConflictError
    ├── RefundLimitExceededError
    └── UnknownCommandError
"""


class PaymentCommandError(Exception):
    """Base class for all command-level failures."""


class MalformedCommandError(PaymentCommandError):
    """Raised when a line starts with the comment marker."""


class ValidationError(PaymentCommandError):
    """Raised for missing arguments, bad amounts or unsupported currencies."""


class PaymentNotFoundError(PaymentCommandError):
    """Raised when a command references a payment ID with no record."""

    def __init__(self, payment_id: str) -> None:
        super().__init__(f'Payment with ID "{payment_id}" does not exist.')
        self.payment_id = payment_id


class InvalidTransitionError(PaymentCommandError):
    """Raised when the current state does not permit the requested operation."""


class AlreadyRefundedError(InvalidTransitionError):
    """Raised when REFUND targets a payment that is already refunded."""

    def __init__(self, payment_id: str) -> None:
        super().__init__(f'Payment with ID "{payment_id}" has already been refunded.')
        self.payment_id = payment_id


class PaymentConflictError(PaymentCommandError):
    """Raised when CREATE reuses an ID with different details.

    The conflicting record has already been marked FAILED when this is raised.
    """

    def __init__(self, payment_id: str, differences: list[str]) -> None:
        super().__init__(
            f'Payment with ID "{payment_id}" already exists with different details. '
            "Marked as FAILED due to conflict."
        )
        self.payment_id = payment_id
        self.differences = differences


class RefundLimitExceededError(PaymentCommandError):
    """Raised when a refund is larger than the original payment amount."""

    def __init__(self, payment_id: str) -> None:
        super().__init__(
            f'Refund amount exceeds the original payment amount for Payment ID "{payment_id}".'
        )
        self.payment_id = payment_id


class UnknownCommandError(PaymentCommandError):
    """Raised when the command name is outside the fixed vocabulary."""

    def __init__(self, command: str) -> None:
        super().__init__(f'Unknown command: "{command}", Please enter a valid command.')
        self.command = command


class ExitRequested(Exception):
    """Signals that the operator asked to end the session."""
