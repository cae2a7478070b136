"""State machine that runs a lucky draw over the roster's remaining pool."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from ..exceptions import DrawInProgressError, EmptyPoolError
from ..models.entities import (
    GENERIC_WIN,
    AwardedPrize,
    DrawRecord,
    Participant,
    Prize,
)
from ..roster.prizes import PrizeQueue
from ..roster.roster import Roster
from .randomness import display_samples, pick_uniform, rolling_duration
from .scheduling import AsyncioScheduler, Scheduler, TaskHandle

logger = logging.getLogger(__name__)

EVENTS = ("display", "result", "cancel", "reset")


class DrawState(str, Enum):
    IDLE = "idle"
    ROLLING = "rolling"
    RESULT_SHOWN = "result_shown"


@dataclass(frozen=True)
class DrawTiming:
    """Timing of the rolling phase, in seconds.

    Attributes
    ----------
    tick_interval : float
        Cadence at which a new participant is shown while rolling.
    min_duration : float
        Lower bound (inclusive) of the rolling duration.
    max_duration : float
        Upper bound (exclusive) of the rolling duration.
    """

    tick_interval: float = 0.05
    min_duration: float = 2.5
    max_duration: float = 3.5

    def __post_init__(self) -> None:
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        if self.min_duration < 0 or self.max_duration < self.min_duration:
            raise ValueError("durations must satisfy 0 <= min_duration <= max_duration")


@dataclass
class _RollingDraw:
    prize: AwardedPrize
    duration: float
    samples: Iterator[Participant]
    tick: Optional[TaskHandle] = None
    stop: Optional[TaskHandle] = None

    def cancel(self) -> None:
        if self.tick is not None:
            self.tick.cancel()
        if self.stop is not None:
            self.stop.cancel()


class LuckyDrawEngine:
    """Draw winners one at a time from the roster.

    The engine owns the remaining pool and the draw history. With repeats
    disallowed the pool is the roster minus everybody already drawn; with
    repeats allowed it is the whole roster. The rolling phase is driven by a
    :class:`~luckygroup.lucky_draw.scheduling.Scheduler`: a recurring tick
    refreshes :attr:`displayed` and a one-shot timer selects the winner.

    Parameters
    ----------
    roster : Roster
        Source of participants. The engine subscribes to its changes.
    prizes : Optional[PrizeQueue], default: None
        Prizes awarded front to back. Without a queue every draw records
        :data:`~luckygroup.models.entities.GENERIC_WIN`.
    allow_repeat : bool, default: False
        Whether a winner stays eligible for later draws.
    scheduler : Optional[Scheduler], default: None
        Timer backend; defaults to :class:`AsyncioScheduler`.
    rng : Optional[random.Random], default: None
        Random source for display samples, durations, and winners.
    timing : Optional[DrawTiming], default: None
        Rolling cadence and duration bounds.
    clock : Optional[Callable[[], datetime]], default: None
        Returns the timestamp stored on each :class:`DrawRecord`.
    """

    def __init__(
        self,
        roster: Roster,
        prizes: Optional[PrizeQueue] = None,
        *,
        allow_repeat: bool = False,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        timing: Optional[DrawTiming] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._roster = roster
        self._prizes = prizes
        self._allow_repeat = allow_repeat
        self._scheduler = scheduler or AsyncioScheduler()
        self._rng = rng or random.Random()
        self.timing = timing or DrawTiming()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._state = DrawState.IDLE
        self._history: list[DrawRecord] = []
        self._remaining: list[Participant] = list(roster.participants)
        self._current_winner: Optional[Participant] = None
        self._current_prize: Optional[AwardedPrize] = None
        self._displayed: Optional[Participant] = None
        self._rolling: Optional[_RollingDraw] = None
        self._listeners: dict[str, list[Callable[[Any], None]]] = {
            event: [] for event in EVENTS
        }
        self._unsubscribe_roster: Optional[Callable[[], None]] = roster.subscribe(
            self._on_roster_changed
        )

    # -- read access -----------------------------------------------------

    @property
    def state(self) -> DrawState:
        return self._state

    @property
    def allow_repeat(self) -> bool:
        return self._allow_repeat

    @property
    def remaining(self) -> tuple[Participant, ...]:
        return tuple(self._remaining)

    @property
    def remaining_count(self) -> int:
        return len(self._remaining)

    @property
    def total_count(self) -> int:
        return len(self._roster)

    @property
    def history(self) -> tuple[DrawRecord, ...]:
        """Draw records, oldest first."""
        return tuple(self._history)

    def recent_history(self) -> list[DrawRecord]:
        """Draw records, newest first, as shown in the winners list."""
        return list(reversed(self._history))

    @property
    def current_winner(self) -> Optional[Participant]:
        return self._current_winner

    @property
    def current_prize(self) -> Optional[AwardedPrize]:
        return self._current_prize

    @property
    def displayed(self) -> Optional[Participant]:
        return self._displayed

    # -- events ----------------------------------------------------------

    def subscribe(self, event: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Call ``callback`` whenever ``event`` fires; returns an unsubscriber.

        Events are ``"display"`` (the participant shown), ``"result"`` (the
        new :class:`DrawRecord`), ``"cancel"`` (a reason string) and
        ``"reset"`` (the engine).
        """

        if event not in self._listeners:
            raise ValueError(f"Unknown draw event '{event}'")
        listeners = self._listeners[event]
        listeners.append(callback)

        def unsubscribe() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: str, payload: Any) -> None:
        for callback in list(self._listeners[event]):
            callback(payload)

    # -- pool bookkeeping ------------------------------------------------

    def _recompute_pool(self) -> None:
        if self._allow_repeat:
            self._remaining = list(self._roster.participants)
            return
        drawn = {record.participant.id for record in self._history}
        self._remaining = [p for p in self._roster.participants if p.id not in drawn]

    def _clear_result(self) -> None:
        self._current_winner = None
        self._current_prize = None
        self._displayed = None

    def _cancel_rolling(self, reason: str) -> bool:
        rolling = self._rolling
        if rolling is None:
            return False
        rolling.cancel()
        self._rolling = None
        self._state = DrawState.IDLE
        self._clear_result()
        logger.warning(f"Rolling draw cancelled: {reason}")
        self._emit("cancel", reason)
        return True

    # -- transitions -----------------------------------------------------

    def start(self) -> AwardedPrize:
        """Begin rolling and schedule the automatic stop.

        A result still on screen is acknowledged implicitly. Starting while
        already rolling abandons the in-flight roll first.

        Returns
        -------
        Prize | GenericWin
            The prize this draw will award.

        Raises
        ------
        EmptyPoolError
            If nobody is left in the remaining pool.
        RuntimeError
            Propagated from the scheduler (e.g. no running event loop); the
            engine is left without a rolling draw.
        """

        if self._state is DrawState.ROLLING:
            self._cancel_rolling("restarted")
        if not self._remaining:
            raise EmptyPoolError("All participants have already been drawn")

        prize: AwardedPrize = GENERIC_WIN
        if self._prizes is not None:
            prize = self._prizes.peek_next() or GENERIC_WIN

        duration = rolling_duration(
            self.timing.min_duration, self.timing.max_duration, self._rng
        )
        ticks = max(1, int(duration / self.timing.tick_interval))
        rolling = _RollingDraw(
            prize=prize,
            duration=duration,
            samples=display_samples(tuple(self._remaining), ticks, self._rng),
        )
        try:
            rolling.tick = self._scheduler.call_every(
                self.timing.tick_interval, lambda: self._tick(rolling)
            )
            rolling.stop = self._scheduler.call_later(
                duration, lambda: self._stop(rolling)
            )
        except Exception:
            rolling.cancel()
            raise
        # Commit only once both timers exist.
        self._rolling = rolling
        self._state = DrawState.ROLLING
        self._current_winner = None
        self._current_prize = prize
        logger.debug(
            f"Draw started for '{prize.name}' over {len(self._remaining)} participants "
            f"({duration:.2f}s)"
        )
        return prize

    def _tick(self, rolling: _RollingDraw) -> None:
        if self._rolling is not rolling:
            return
        sample = next(rolling.samples, None)
        if sample is None:
            if rolling.tick is not None:
                rolling.tick.cancel()
            return
        self._displayed = sample
        self._emit("display", sample)

    def _stop(self, rolling: _RollingDraw) -> None:
        # A stale timer from an abandoned roll must not touch the pool.
        if self._rolling is not rolling:
            return
        rolling.cancel()
        self._rolling = None

        winner = pick_uniform(self._remaining, self._rng)
        record = DrawRecord(
            sequence=len(self._history) + 1,
            participant=winner,
            prize=rolling.prize,
            drawn_at=self._clock(),
        )
        self._history.append(record)
        if not self._allow_repeat:
            self._remaining = [p for p in self._remaining if p.id != winner.id]
        if isinstance(rolling.prize, Prize):
            self._consume_prize(rolling.prize)

        self._displayed = winner
        self._current_winner = winner
        self._state = DrawState.RESULT_SHOWN
        logger.info(
            f"Draw #{record.sequence}: '{winner.name}' wins '{rolling.prize.name}' "
            f"({len(self._remaining)} remaining)"
        )
        self._emit("display", winner)
        self._emit("result", record)

    def _consume_prize(self, prize: Prize) -> None:
        if self._prizes is None:
            return
        if self._prizes.peek_next() == prize:
            self._prizes.consume_next()
        else:
            # the queue was edited while rolling
            self._prizes.remove(prize.id)

    def acknowledge(self) -> None:
        """Dismiss the result on screen; the pool is not touched."""

        if self._state is DrawState.ROLLING:
            raise DrawInProgressError("Cannot acknowledge while the draw is rolling")
        self._state = DrawState.IDLE

    def reset_history(self) -> None:
        """Forget all winners and make the whole roster eligible again."""

        self._cancel_rolling("history reset")
        self._history.clear()
        self._recompute_pool()
        self._clear_result()
        self._state = DrawState.IDLE
        logger.debug("Draw history reset")
        self._emit("reset", self)

    def set_allow_repeat(self, allow_repeat: bool) -> bool:
        """Switch repeat mode and rebuild the remaining pool from scratch."""

        if self._state is DrawState.ROLLING:
            raise DrawInProgressError("Cannot change repeat mode while the draw is rolling")
        self._allow_repeat = bool(allow_repeat)
        self._recompute_pool()
        logger.debug(
            f"Repeat winners {'allowed' if self._allow_repeat else 'disallowed'}; "
            f"{len(self._remaining)} eligible"
        )
        return self._allow_repeat

    def toggle_repeat(self) -> bool:
        return self.set_allow_repeat(not self._allow_repeat)

    def _on_roster_changed(self, roster: Roster) -> None:
        self._cancel_rolling("roster changed")
        if self._allow_repeat:
            self._recompute_pool()
            return
        # Without repeats any roster edit starts the draw over.
        had_history = bool(self._history)
        self._history.clear()
        self._clear_result()
        self._state = DrawState.IDLE
        self._recompute_pool()
        if had_history:
            logger.info("Roster changed; draw history cleared")
        self._emit("reset", self)

    def close(self) -> None:
        """Cancel pending timers and stop listening to the roster."""

        self._cancel_rolling("engine closed")
        if self._unsubscribe_roster is not None:
            self._unsubscribe_roster()
            self._unsubscribe_roster = None


__all__ = ["DrawState", "DrawTiming", "EVENTS", "LuckyDrawEngine"]
