"""Route tokenized command lines to their handlers."""

import time
from collections.abc import Callable
from enum import Enum
from functools import partial

from paycli.common.errors import ExitRequested, PaymentCommandError, UnknownCommandError
from paycli.common.logging import command_ctx, logger, payment_id_ctx
from paycli.common.metrics import command_latency_seconds, commands_total
from paycli.services.processor import reports
from paycli.services.processor.service import PaymentProcessor
from paycli.services.processor.tokenizer import parse_tokens


class Command(str, Enum):
    """Fixed command vocabulary; names match case-sensitively."""

    CREATE = "CREATE"
    AUTHORIZE = "AUTHORIZE"
    CAPTURE = "CAPTURE"
    VOID = "VOID"
    REFUND = "REFUND"
    SETTLE = "SETTLE"
    STATUS = "STATUS"
    SETTLEMENT = "SETTLEMENT"
    LIST = "LIST"
    AUDIT = "AUDIT"
    EXIT = "EXIT"


Handler = Callable[[list[str], str | None], str | None]


class CommandDispatcher:
    """Maps each `Command` to exactly one handler."""

    def __init__(self, processor: PaymentProcessor) -> None:
        self.processor = processor
        self.service_name = processor.service_name
        store = processor.store
        self._handlers: dict[Command, Handler] = {
            Command.CREATE: processor.create,
            Command.AUTHORIZE: processor.authorize,
            Command.CAPTURE: processor.capture,
            Command.VOID: processor.void,
            Command.REFUND: processor.refund,
            Command.SETTLE: processor.settle,
            Command.STATUS: partial(reports.payment_status, store),
            Command.SETTLEMENT: partial(reports.settlement_report, store),
            Command.LIST: partial(reports.list_payments, store),
            Command.AUDIT: partial(reports.audit_report, processor.timeline),
        }
        missing = set(Command) - set(self._handlers) - {Command.EXIT}
        if missing:
            raise RuntimeError(f"commands without handlers: {sorted(c.value for c in missing)}")

    @staticmethod
    def resolve(name: str) -> Command:
        try:
            return Command(name)
        except ValueError:
            raise UnknownCommandError(name) from None

    def dispatch(self, line: str) -> str | None:
        """Tokenize one line and run its handler; None for blank lines."""

        parsed = parse_tokens(line)
        if parsed is None:
            return None
        name, *args = parsed.tokens
        command = self.resolve(name)
        if command is Command.EXIT:
            raise ExitRequested()

        command_ctx.set(command.value)
        payment_id_ctx.set("")
        started = time.perf_counter()
        try:
            output = self._handlers[command](args, parsed.comment)
        except PaymentCommandError:
            commands_total.labels(service=self.service_name, command=command.value, outcome="rejected").inc()
            raise
        except Exception:
            commands_total.labels(service=self.service_name, command=command.value, outcome="error").inc()
            raise
        finally:
            command_latency_seconds.labels(service=self.service_name, command=command.value).observe(
                time.perf_counter() - started
            )
        commands_total.labels(service=self.service_name, command=command.value, outcome="ok").inc()
        logger.debug("command handled command=%s", command.value)
        return output
