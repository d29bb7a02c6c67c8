"""Interactive and batch front end for the payment command interpreter.

Lines are processed one at a time in input order. A failing line is reported
and never stops the session.
"""

import argparse
from collections.abc import Callable, Iterable
from pathlib import Path

from paycli.common.config import settings
from paycli.common.errors import ExitRequested, PaymentCommandError
from paycli.common.logging import configure_logging, line_number_ctx, logger
from paycli.common.metrics import render_metrics
from paycli.common.startup import log_startup_config
from paycli.services.processor.dispatcher import Command, CommandDispatcher
from paycli.services.processor.service import PaymentProcessor
from paycli.services.processor.store import InMemoryPaymentStore


def build_dispatcher() -> CommandDispatcher:
    """Wire a dispatcher over a fresh in-memory store."""

    processor = PaymentProcessor(InMemoryPaymentStore(), service_name=settings.service_name)
    return CommandDispatcher(processor)


def process_line(dispatcher: CommandDispatcher, line: str, line_number: int = 0) -> bool:
    """Run one line and print its outcome; return False when EXIT was requested."""

    line_number_ctx.set(line_number)
    try:
        output = dispatcher.dispatch(line)
    except ExitRequested:
        print("Goodbye!")
        return False
    except PaymentCommandError as exc:
        logger.info("command rejected error_type=%s error=%s", type(exc).__name__, exc)
        print(f"Error processing command: {exc}")
        return True
    except Exception as exc:
        logger.exception("unexpected failure processing line")
        print(f"Error processing command: {exc}")
        return True
    if output:
        print(output)
    return True


def run_lines(dispatcher: CommandDispatcher, lines: Iterable[str]) -> bool:
    """Process lines in order; return False if one of them was EXIT."""

    for number, line in enumerate(lines, start=1):
        if not process_line(dispatcher, line.rstrip("\r\n"), number):
            return False
    return True


def run_batch(dispatcher: CommandDispatcher, path: str) -> bool:
    """Process a batch file; return False if the batch ended the session."""

    if not path.endswith(settings.batch_file_suffix):
        print("Invalid file type. Proceeding with interactive mode.")
        return True
    print("Loading dataset from file...")
    try:
        with Path(path).open(encoding="utf-8", errors="replace") as fh:
            keep_going = run_lines(dispatcher, fh)
    except OSError as exc:
        logger.warning("batch file unreadable path=%s error=%s", path, exc)
        print(f"Error reading file: {exc}")
        return True
    if keep_going:
        print("Finished processing file. Proceeding with interactive mode.")
    return keep_going


def run_interactive(dispatcher: CommandDispatcher, read_line: Callable[[str], str] = input) -> None:
    """Prompt for commands until EXIT or end of input."""

    print("Welcome to the payment processing CLI, start by entering commands followed by appropriate arguments.")
    print(f"Available commands: {', '.join(c.value for c in Command)}")
    print("Enter command (EXIT to quit):")
    number = 0
    while True:
        try:
            line = read_line(settings.prompt)
        except EOFError:
            print("Goodbye!")
            return
        number += 1
        if not process_line(dispatcher, line, number):
            return


def write_metrics(path: str) -> None:
    Path(path).write_bytes(render_metrics())


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: optional batch file, then interactive mode."""

    parser = argparse.ArgumentParser(description="Process payment lifecycle commands.")
    parser.add_argument("batch_file", nargs="?", help="text file with one command per line")
    parser.add_argument("--no-interactive", action="store_true", help="exit after the batch file")
    parser.add_argument("--metrics-file", default=settings.metrics_file)
    args = parser.parse_args(argv)

    configure_logging()
    log_startup_config(settings, ["SERVICE_NAME", "LOG_LEVEL", "METRICS_FILE"])
    dispatcher = build_dispatcher()

    keep_going = True
    if args.batch_file:
        keep_going = run_batch(dispatcher, args.batch_file)
    if keep_going and not args.no_interactive:
        run_interactive(dispatcher)

    if args.metrics_file:
        write_metrics(args.metrics_file)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
