"""Error taxonomy shared by the roster, draw, and grouping subsystems."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.entities import DuplicateReport


class LuckyGroupError(Exception):
    """Base class for recoverable errors raised by :mod:`luckygroup`."""


class EmptyInputError(LuckyGroupError, ValueError):
    """Raised when raw text yields no usable entries after trimming."""


class EmptyPoolError(LuckyGroupError):
    """Raised when a draw is requested but nobody is left in the pool."""


class EmptyRosterError(LuckyGroupError):
    """Raised when grouping or navigation needs at least one participant."""


class DrawInProgressError(LuckyGroupError):
    """Raised when an operation is not allowed while the draw is rolling."""


class DrawCancelledError(LuckyGroupError):
    """Raised to a waiter when the rolling draw it awaited was aborted."""


class DuplicateNameWarning(UserWarning):
    """Condition raised by gate checks while display names are duplicated.

    Attributes
    ----------
    report : DuplicateReport
        Name counts at the time of the check.
    """

    def __init__(self, report: "DuplicateReport") -> None:
        self.report = report
        names = ", ".join(sorted(report.duplicates))
        super().__init__(f"Duplicate names must be resolved first: {names}")


__all__ = [
    "DrawCancelledError",
    "DrawInProgressError",
    "DuplicateNameWarning",
    "EmptyInputError",
    "EmptyPoolError",
    "EmptyRosterError",
    "LuckyGroupError",
]
