"""The authoritative, ordered list of participants."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, Iterable, Iterator, Optional

from ..exceptions import DuplicateNameWarning, EmptyInputError
from ..models.entities import DuplicateReport, Participant
from ..models.utils import IdAllocator
from .demo import DEMO_NAMES
from .ingest import TextSource, read_text_source, split_entries

logger = logging.getLogger(__name__)

RosterListener = Callable[["Roster"], None]


class Roster:
    """Ordered collection of uniquely identified participants.

    The roster is the only owner of its participant list. Other components
    read snapshots through :attr:`participants` and learn about edits through
    :meth:`subscribe`.
    """

    def __init__(self, *, id_allocator: Optional[IdAllocator] = None) -> None:
        self._ids = id_allocator or IdAllocator("P")
        self._participants: list[Participant] = []
        self._listeners: list[RosterListener] = []

    # -- read access -----------------------------------------------------

    @property
    def participants(self) -> tuple[Participant, ...]:
        return tuple(self._participants)

    def __len__(self) -> int:
        return len(self._participants)

    def __iter__(self) -> Iterator[Participant]:
        return iter(tuple(self._participants))

    def __contains__(self, participant_id: object) -> bool:
        """Membership is tested by participant id, not by name."""
        return any(p.id == participant_id for p in self._participants)

    def get(self, participant_id: str) -> Optional[Participant]:
        for participant in self._participants:
            if participant.id == participant_id:
                return participant
        return None

    def names(self) -> list[str]:
        return [p.name for p in self._participants]

    # -- observers -------------------------------------------------------

    def subscribe(self, listener: RosterListener) -> Callable[[], None]:
        """Register ``listener`` to be called after every content change.

        Returns a callable that removes the listener again.
        """

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -- mutations -------------------------------------------------------

    def _create(self, names: Iterable[str]) -> list[Participant]:
        return [Participant(id=self._ids.allocate(), name=name) for name in names]

    def add(self, raw_text: str, *, strict: bool = False) -> list[Participant]:
        """Parse ``raw_text`` and append one participant per entry.

        Parameters
        ----------
        raw_text : str
            Names separated by newlines or commas.
        strict : bool, default: False
            When ``True`` an input without usable entries raises
            :class:`~luckygroup.exceptions.EmptyInputError` instead of being
            ignored.

        Returns
        -------
        list[Participant]
            The newly added participants, in input order.
        """

        names = split_entries(raw_text)
        if not names:
            if strict:
                raise EmptyInputError("No names found in the supplied text")
            logger.debug("Ignoring roster input without usable names")
            return []
        added = self._create(names)
        self._participants.extend(added)
        logger.debug(f"Added {len(added)} participants (roster size {len(self)})")
        self._notify()
        return added

    def add_file(self, source: TextSource, *, strict: bool = False) -> list[Participant]:
        """Append participants read from an uploaded text or CSV source."""

        return self.add(read_text_source(source), strict=strict)

    def load_demo(self, *, replace: bool = False) -> list[Participant]:
        """Append the demo names, or replace the roster with them."""

        demo = self._create(DEMO_NAMES)
        if replace:
            self._participants = demo
        else:
            self._participants.extend(demo)
        logger.debug(f"Loaded {len(demo)} demo participants (replace={replace})")
        self._notify()
        return demo

    def remove(self, participant_id: str) -> Optional[Participant]:
        """Remove the participant with ``participant_id``; no-op when absent."""

        for index, participant in enumerate(self._participants):
            if participant.id == participant_id:
                del self._participants[index]
                self._notify()
                return participant
        return None

    def clear(self) -> None:
        if not self._participants:
            return
        self._participants.clear()
        logger.debug("Roster cleared")
        self._notify()

    # -- duplicate names -------------------------------------------------

    def duplicates_by_name(self) -> DuplicateReport:
        """Count how often each display name occurs in the roster."""

        return DuplicateReport(counts=dict(Counter(p.name for p in self._participants)))

    def remove_duplicates_by_name(self) -> int:
        """Keep the first participant for every name and drop the rest.

        Returns
        -------
        int
            Number of participants removed.
        """

        seen: set[str] = set()
        unique: list[Participant] = []
        for participant in self._participants:
            if participant.name not in seen:
                seen.add(participant.name)
                unique.append(participant)

        removed = len(self._participants) - len(unique)
        if removed:
            self._participants = unique
            logger.debug(f"Removed {removed} duplicate participants")
            self._notify()
        return removed

    def ensure_no_duplicates(self) -> None:
        """Raise :class:`DuplicateNameWarning` while any name is repeated."""

        report = self.duplicates_by_name()
        if report.has_duplicates:
            raise DuplicateNameWarning(report)


__all__ = ["Roster", "RosterListener"]
