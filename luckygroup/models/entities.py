"""Value objects passed between the roster, draw engine, and partitioner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Union

from ..db.utils import dt_iso


@dataclass(frozen=True)
class Participant:
    """A roster entry. Identity is ``id``; ``name`` may repeat."""

    id: str
    name: str


@dataclass(frozen=True)
class Prize:
    """A prize awarded in queue order, one per successful draw."""

    id: str
    name: str


@dataclass(frozen=True)
class GenericWin:
    """Sentinel prize recorded when the prize queue was empty at draw start."""

    name: str = "Lucky Winner"

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "GENERIC_WIN"


GENERIC_WIN = GenericWin()

AwardedPrize = Union[Prize, GenericWin]


@dataclass(frozen=True)
class DrawRecord:
    """Immutable outcome of one completed draw.

    Attributes
    ----------
    sequence : int
        1-based position of the draw within the current history.
    participant : Participant
        The winner.
    prize : Prize | GenericWin
        Prize captured when the draw started, or :data:`GENERIC_WIN`.
    drawn_at : datetime
        Timestamp (UTC) taken when the winner was selected.
    """

    sequence: int
    participant: Participant
    prize: AwardedPrize
    drawn_at: datetime

    @property
    def is_generic(self) -> bool:
        return isinstance(self.prize, GenericWin)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation for display layers."""
        return {
            "sequence": self.sequence,
            "participant_id": self.participant.id,
            "participant_name": self.participant.name,
            "prize_id": None if self.is_generic else self.prize.id,  # type: ignore[union-attr]
            "prize_name": self.prize.name,
            "drawn_at": dt_iso(self.drawn_at),
        }


@dataclass(frozen=True)
class Group:
    """One chunk of a partition. ``id`` starts at 1 in partition order."""

    id: int
    members: tuple[Participant, ...]

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def label(self) -> str:
        return f"Group {self.id}"


@dataclass(frozen=True)
class DuplicateReport:
    """Occurrence counts of each display name in a roster."""

    counts: Mapping[str, int] = field(default_factory=dict)

    @property
    def has_duplicates(self) -> bool:
        return any(count > 1 for count in self.counts.values())

    @property
    def duplicates(self) -> dict[str, int]:
        return {name: count for name, count in self.counts.items() if count > 1}

    def count_for(self, name: str) -> int:
        return self.counts.get(name, 0)

    def is_duplicate(self, name: str) -> bool:
        return self.count_for(name) > 1


__all__ = [
    "AwardedPrize",
    "DrawRecord",
    "DuplicateReport",
    "GENERIC_WIN",
    "GenericWin",
    "Group",
    "Participant",
    "Prize",
]
