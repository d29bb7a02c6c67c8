"""Structured JSON logging with command/line context fields."""

import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

from paycli.common.config import settings


command_ctx: ContextVar[str] = ContextVar("command", default="")
line_number_ctx: ContextVar[int] = ContextVar("line_number", default=0)
payment_id_ctx: ContextVar[str] = ContextVar("payment_id", default="")


class ContextFilter(logging.Filter):
    """Inject service and command identifiers into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = settings.service_name
        record.command = command_ctx.get()
        record.line_number = line_number_ctx.get()
        record.payment_id = payment_id_ctx.get()
        return True


def configure_logging() -> None:
    """Configure root logger once per process.

    Logs go to stderr so that command output on stdout stays readable in an
    interactive session.
    """

    handler = logging.StreamHandler(sys.stderr)
    context_filter = ContextFilter()
    handler.addFilter(context_filter)
    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(service_name)s %(command)s %(line_number)s %(payment_id)s %(message)s"
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level)
    root.addFilter(context_filter)


logger = logging.getLogger("paycli")
