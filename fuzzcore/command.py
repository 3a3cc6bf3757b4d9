"""A command line for running a subprocess, with output redirection settings."""

from __future__ import annotations

from collections.abc import Iterable

IGNORE_REMAINING_ARGS = "-ignore_remaining_args=1"


class Command:
    """Arguments, output file and stderr redirection of a command to run.

    Arguments after ``-ignore_remaining_args=1`` are immutable: additions go
    before that marker, and lookups and removals do not see past it.
    """

    IGNORE_REMAINING_ARGS = IGNORE_REMAINING_ARGS

    def __init__(self, args: Iterable[str] = ()) -> None:
        self._args: list[str] = list(args)
        self.out_and_err_combined = False
        self.output_file = ""

    def copy(self) -> Command:
        """Return an independent copy of this command."""
        other = Command(self._args)
        other.out_and_err_combined = self.out_and_err_combined
        other.output_file = self.output_file
        return other

    @property
    def arguments(self) -> list[str]:
        """All arguments, including those after the immutable marker."""
        return list(self._args)

    def _end_mutable(self) -> int:
        try:
            return self._args.index(IGNORE_REMAINING_ARGS)
        except ValueError:
            return len(self._args)

    def has_argument(self, arg: str) -> bool:
        """Return whether ``arg`` appears among the mutable arguments."""
        return arg in self._args[: self._end_mutable()]

    def add_argument(self, arg: str) -> None:
        """Insert ``arg`` at the end of the mutable arguments."""
        self._args.insert(self._end_mutable(), arg)

    def add_arguments(self, args: Iterable[str]) -> None:
        """Insert ``args`` in order at the end of the mutable arguments."""
        end = self._end_mutable()
        self._args[end:end] = list(args)

    def remove_argument(self, arg: str) -> None:
        """Remove every mutable occurrence of ``arg``."""
        end = self._end_mutable()
        self._args[:end] = [a for a in self._args[:end] if a != arg]

    def has_flag(self, flag: str) -> bool:
        """Return whether a mutable ``-flag=...`` argument is present."""
        prefix = f"-{flag}="
        return any(a.startswith(prefix) for a in self._args[: self._end_mutable()])

    def get_flag_value(self, flag: str) -> str:
        """Return the value of the first mutable ``-flag=...``, or ``""``."""
        prefix = f"-{flag}="
        for arg in self._args[: self._end_mutable()]:
            if arg.startswith(prefix):
                return arg[len(prefix):]
        return ""

    def add_flag(self, flag: str, value: str) -> None:
        """Add ``-flag=value`` as a mutable argument."""
        self.add_argument(f"-{flag}={value}")

    def remove_flag(self, flag: str) -> None:
        """Remove every mutable ``-flag=...`` argument."""
        prefix = f"-{flag}="
        end = self._end_mutable()
        self._args[:end] = [a for a in self._args[:end] if not a.startswith(prefix)]

    def has_output_file(self) -> bool:
        """Return whether stdout is redirected to a file."""
        return bool(self.output_file)

    def combine_out_and_err(self, combine: bool = True) -> None:
        """Set whether stderr is redirected to stdout."""
        self.out_and_err_combined = combine

    def __str__(self) -> str:
        parts = list(self._args)
        if self.has_output_file():
            parts.append(f">{self.output_file}")
        if self.out_and_err_combined:
            parts.append("2>&1")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"Command({self._args!r}, output_file={self.output_file!r}, "
            f"out_and_err_combined={self.out_and_err_combined!r})"
        )