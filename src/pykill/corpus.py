"""Corpus rendering and selection resolution for pykill."""

import logging
from collections.abc import Iterable

from rich.color import ColorSystem
from rich.style import Style

from pykill.models import CorpusLine, ProcessRecord, ProcessSnapshot, SelectionSet

logger = logging.getLogger(__name__)

NAME_STYLE = Style(color="red")
PID_STYLE = Style(color="green")
COLUMN_GAP = "  "


def renderable_records(snapshot: ProcessSnapshot) -> list[ProcessRecord]:
    """Return the records that have a valid pid and a readable, non-empty name."""
    return [
        record for record in snapshot if record.pid > 0 and record.name and record.name.strip()
    ]


def render(snapshot: ProcessSnapshot) -> str:
    """
    Render a snapshot as a column-aligned, ANSI-coloured corpus.

    Each line holds a right-aligned red name and a right-aligned green pid,
    so the pid is always the last whitespace-delimited token. Records without
    a name are left out entirely.
    """
    rows = [
        (" ".join(record.name.split()), str(record.pid))
        for record in renderable_records(snapshot)
    ]
    if not rows:
        return ""

    # Widths come from the plain text; escape codes would skew them
    name_width = max(len(name) for name, _ in rows)
    pid_width = max(len(pid) for _, pid in rows)

    lines = []
    for name, pid in rows:
        lines.append(
            NAME_STYLE.render(name.rjust(name_width), color_system=ColorSystem.STANDARD)
            + COLUMN_GAP
            + PID_STYLE.render(pid.rjust(pid_width), color_system=ColorSystem.STANDARD)
        )
    return "\n".join(lines) + "\n"


def resolve(selected_lines: Iterable[str]) -> SelectionSet:
    """Map selected corpus lines back to pids, dropping malformed lines."""
    entries = []
    for line in selected_lines:
        parsed = CorpusLine.parse(line)
        if parsed is None:
            logger.debug("Dropping malformed selection line: %r", line)
            continue
        entries.append(parsed)
    return SelectionSet(tuple(entries))
