"""Termination orchestrator for pykill."""

import logging
from collections.abc import Callable

import psutil
from rich.console import Console
from rich.markup import escape

from pykill.models import ProcessRecord, ProcessSnapshot, SelectionSet, TerminationOutcome

logger = logging.getLogger(__name__)

error_console = Console(stderr=True, highlight=False)

Terminator = Callable[[ProcessRecord], None]
ErrorReporter = Callable[[ProcessRecord, str], None]


def terminate_process(record: ProcessRecord) -> None:
    """Send SIGTERM to the process behind ``record``."""
    process = record.process if record.process is not None else psutil.Process(record.pid)
    process.terminate()


def describe_error(error: Exception) -> str:
    """Human-readable reason for a failed termination."""
    if isinstance(error, psutil.AccessDenied):
        return "permission denied"
    if isinstance(error, psutil.NoSuchProcess):
        return "process no longer exists"
    return str(error) or type(error).__name__


def report_error(record: ProcessRecord, message: str) -> None:
    """Print a termination failure to stderr."""
    error_console.print(
        f"[bold red]error[/bold red]: failed to terminate {escape(record.name or '?')} "
        f"(pid {record.pid}): {escape(message)}",
        markup=True,
        soft_wrap=True,
    )


def terminate_all(
    snapshot: ProcessSnapshot,
    selection: SelectionSet,
    terminate: Terminator | None = None,
    on_error: ErrorReporter | None = None,
) -> list[TerminationOutcome]:
    """
    Terminate every snapshot process whose pid is in ``selection``.

    Processes are handled one at a time in snapshot order. A failure is
    reported immediately through ``on_error`` and never stops the remaining
    terminations. Selected pids missing from the snapshot are ignored.
    """
    terminate = terminate or terminate_process
    on_error = on_error or report_error
    outcomes: list[TerminationOutcome] = []

    for record in snapshot:
        if record.pid not in selection:
            continue
        try:
            terminate(record)
        except (psutil.Error, OSError) as error:
            message = describe_error(error)
            on_error(record, message)
            outcomes.append(TerminationOutcome(record, message))
            continue
        logger.debug("Terminated %s (pid %d)", record.name, record.pid)
        outcomes.append(TerminationOutcome(record))

    return outcomes
