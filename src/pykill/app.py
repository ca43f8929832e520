"""pykill - pick processes with a fuzzy finder and terminate them."""

import logging
import sys

from rich.console import Console
from rich.markup import escape

from pykill import corpus, notify, selector, snapshot, terminate
from pykill.errors import NotificationError
from pykill.logging_config import resolve_level, setup_logging
from pykill.options import SelectionOptions, options_from_env

logger = logging.getLogger(__name__)


def run(options: SelectionOptions | None = None) -> int:
    """
    Run one capture, select, terminate and notify cycle.

    Returns the process exit status. NotificationError propagates.
    """
    if options is None:
        options = options_from_env()

    processes = snapshot.capture()
    lines = corpus.render(processes).splitlines()
    selected = selector.select(lines, options)

    selection = corpus.resolve(selected)
    if not selection:
        logger.debug("Nothing selected")
        return 0

    outcomes = terminate.terminate_all(processes, selection)
    failed = sum(1 for outcome in outcomes if not outcome.succeeded)
    logger.info("Attempted %d terminations, %d failed", len(outcomes), failed)

    notify.notify_outcome(selection)
    return 0


def main() -> None:
    """Entry point for pykill."""
    setup_logging(resolve_level())
    try:
        status = run()
    except NotificationError as error:
        Console(stderr=True, highlight=False).print(
            f"[bold red]error[/bold red]: could not send notification: {escape(str(error))}"
        )
        status = 1
    sys.exit(status)


if __name__ == "__main__":
    main()
