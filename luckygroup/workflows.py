"""Orchestration across the roster, draw engine, partitioner, and preferences."""

from __future__ import annotations

import asyncio
import logging
import os
import random
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from sqlalchemy.orm import Session

from .exceptions import DrawCancelledError, EmptyRosterError
from .grouping.export import write_groups_csv
from .grouping.partitioner import DEFAULT_GROUP_SIZE, GroupPartitioner, clamp_group_size
from .lucky_draw.engine import DrawTiming, LuckyDrawEngine
from .lucky_draw.scheduling import Scheduler
from .models.entities import DrawRecord, Group
from .models.preference import (
    DEFAULT_THEME,
    THEME_DARK,
    THEME_KEY,
    THEME_LIGHT,
    VALID_THEMES,
    Preference,
    normalize_theme,
)
from .roster.prizes import PrizeQueue
from .roster.roster import Roster

logger = logging.getLogger(__name__)


class AppMode(str, Enum):
    INPUT = "INPUT"
    LUCKY_DRAW = "LUCKY_DRAW"
    GROUPING = "GROUPING"


class LuckyGroupApp:
    """Application shell owning every piece of authoritative state.

    Presentation code holds a reference to this object and calls its
    operations; it never keeps its own copy of the roster or the prizes.

    Parameters
    ----------
    scheduler : Optional[Scheduler], default: None
        Timer backend handed to the draw engine.
    rng : Optional[random.Random], default: None
        Random source shared by the draw engine and the partitioner.
    timing : Optional[DrawTiming], default: None
        Rolling timing for the draw engine.
    """

    def __init__(
        self,
        *,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        timing: Optional[DrawTiming] = None,
    ) -> None:
        rng = rng or random.Random()
        self.roster = Roster()
        self.prizes = PrizeQueue()
        self.engine = LuckyDrawEngine(
            self.roster, self.prizes, scheduler=scheduler, rng=rng, timing=timing
        )
        self.partitioner = GroupPartitioner(rng)
        self.mode = AppMode.INPUT
        self.group_size = DEFAULT_GROUP_SIZE
        self.groups: list[Group] = []

    def switch_mode(self, mode: AppMode) -> AppMode:
        """Navigate directly to ``mode`` (the navigation bar is never gated)."""

        self.mode = AppMode(mode)
        return self.mode

    def proceed(self) -> AppMode:
        """Leave the input screen for the lucky draw.

        Raises
        ------
        EmptyRosterError
            If the roster is empty.
        DuplicateNameWarning
            While two participants share a name.
        """

        if not len(self.roster):
            raise EmptyRosterError("Add at least one participant before continuing")
        self.roster.ensure_no_duplicates()
        return self.switch_mode(AppMode.LUCKY_DRAW)

    def generate_groups(self, group_size: Optional[int] = None) -> list[Group]:
        """Partition the roster, replacing any previously generated groups.

        ``group_size`` is clamped to the range offered for the roster size.
        """

        if group_size is not None:
            self.group_size = clamp_group_size(group_size, len(self.roster))
        self.groups = self.partitioner.generate(self.roster, self.group_size)
        return self.groups

    def export_groups(self, destination: Union[str, os.PathLike] = ".") -> Path:
        """Write the last generated groups as CSV; see :func:`write_groups_csv`."""

        return write_groups_csv(self.groups, destination)

    def close(self) -> None:
        self.engine.close()


async def run_draw(engine: LuckyDrawEngine) -> DrawRecord:
    """Start a draw and wait for its automatic stop.

    The engine must be driven by a scheduler running on the current event
    loop (the default :class:`~luckygroup.lucky_draw.scheduling.AsyncioScheduler`).

    Returns
    -------
    DrawRecord
        The record appended when the winner was selected.

    Raises
    ------
    EmptyPoolError
        If nobody is left to draw.
    DrawCancelledError
        If the roll is aborted by a reset, a roster change, or a restart.
    """

    loop = asyncio.get_running_loop()
    outcome: asyncio.Future[DrawRecord] = loop.create_future()

    def _on_result(record: DrawRecord) -> None:
        if not outcome.done():
            outcome.set_result(record)

    def _on_cancel(reason: str) -> None:
        if not outcome.done():
            outcome.set_exception(DrawCancelledError(reason))

    # start() may abandon an earlier roll; that cancel belongs to its waiter.
    engine.start()
    unsubscribe_result = engine.subscribe("result", _on_result)
    unsubscribe_cancel = engine.subscribe("cancel", _on_cancel)
    try:
        return await outcome
    finally:
        unsubscribe_result()
        unsubscribe_cancel()


def load_theme(session: Session) -> str:
    """Return the stored theme, falling back to ``"light"``.

    An unrecognised stored value is ignored rather than propagated.
    """

    stored = Preference.get_value(session, THEME_KEY)
    if stored is None:
        return DEFAULT_THEME
    if stored not in VALID_THEMES:
        logger.warning(f"Ignoring unknown stored theme '{stored}'")
        return DEFAULT_THEME
    return stored


def save_theme(session: Session, theme: str) -> str:
    """Validate and persist ``theme``; returns the normalized value."""

    normalized = normalize_theme(theme)
    Preference.set_value(session, THEME_KEY, normalized)
    return normalized


def toggle_theme(session: Session) -> str:
    current = load_theme(session)
    return save_theme(session, THEME_DARK if current == THEME_LIGHT else THEME_LIGHT)


__all__ = [
    "AppMode",
    "LuckyGroupApp",
    "load_theme",
    "run_draw",
    "save_theme",
    "toggle_theme",
]
