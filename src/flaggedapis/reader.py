# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Reader contracts for the three tool inputs."""

from pathlib import Path
from typing import Protocol

from flaggedapis.flag import Flag
from flaggedapis.symbol import Symbol

FlaggedSymbol = tuple[Symbol, Flag]


class ReaderError(RuntimeError):
    """Represent an unreadable or structurally invalid input file."""


class FlaggedSymbolReader(Protocol):
    """Read the symbols carrying a flag annotation."""

    def read(self, path: Path) -> set[FlaggedSymbol]:
        """Read flagged symbols from ``path``.

        Raises:
            ReaderError: If the file cannot be read or parsed.
        """


class FlagStateReader(Protocol):
    """Read the enabled/disabled state of every flag."""

    def read(self, path: Path) -> dict[Flag, bool]:
        """Read flag states from ``path``.

        Raises:
            ReaderError: If the file cannot be read or parsed.
        """


class OutputSymbolReader(Protocol):
    """Read the symbols present in a built artifact."""

    def read(self, path: Path) -> set[Symbol]:
        """Read output symbols from ``path``.

        Raises:
            ReaderError: If the file cannot be read or parsed.
        """
