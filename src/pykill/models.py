"""Data models for pykill."""

from __future__ import annotations

from dataclasses import dataclass, field

import psutil
from rich.text import Text


def strip_ansi(text: str) -> str:
    """Remove terminal styling codes from a line of text."""
    return Text.from_ansi(text).plain


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable record of one process at snapshot time."""

    pid: int
    name: str | None  # None when the name could not be read
    process: psutil.Process | None = field(default=None, compare=False, repr=False)


@dataclass(slots=True, frozen=True)
class ProcessSnapshot:
    """Ordered, duplicate-free capture of the process table."""

    records: tuple[ProcessRecord, ...] = ()

    def __post_init__(self) -> None:
        seen: set[int] = set()
        unique = []
        for record in self.records:
            if record.pid in seen:
                continue
            seen.add(record.pid)
            unique.append(record)
        object.__setattr__(self, "records", tuple(unique))

    def __iter__(self):
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def pids(self) -> frozenset[int]:
        """Pids of every captured process."""
        return frozenset(record.pid for record in self.records)


@dataclass(slots=True, frozen=True)
class CorpusLine:
    """Structured form of one rendered corpus line."""

    name: str
    pid: int

    @classmethod
    def parse(cls, text: str) -> CorpusLine | None:
        """
        Parse a (possibly styled) corpus line.

        The first whitespace-delimited token is the name and the last one is
        the pid. Returns None for lines with fewer than two tokens or a
        trailing token that is not a positive integer.
        """
        tokens = strip_ansi(text).split()
        if len(tokens) < 2:
            return None
        try:
            pid = int(tokens[-1])
        except ValueError:
            return None
        if pid <= 0:
            return None
        return cls(name=tokens[0], pid=pid)


@dataclass(slots=True, frozen=True)
class SelectionSet:
    """Processes chosen by the operator, in selection order."""

    entries: tuple[CorpusLine, ...] = ()

    def __post_init__(self) -> None:
        seen: set[int] = set()
        unique = []
        for entry in self.entries:
            if entry.pid not in seen:
                seen.add(entry.pid)
                unique.append(entry)
        object.__setattr__(self, "entries", tuple(unique))

    def __contains__(self, pid: object) -> bool:
        return pid in self.pids

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    @property
    def pids(self) -> frozenset[int]:
        """Selected pids."""
        return frozenset(entry.pid for entry in self.entries)

    @property
    def names(self) -> list[str]:
        """Selected process names in selection order."""
        return [entry.name for entry in self.entries]


@dataclass(slots=True, frozen=True)
class TerminationOutcome:
    """Result of one termination attempt."""

    record: ProcessRecord
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
