"""Ordered prize queue; the front prize goes to the next winner."""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from ..exceptions import EmptyInputError
from ..models.entities import Prize
from ..models.utils import IdAllocator
from .ingest import split_entries

logger = logging.getLogger(__name__)


class PrizeQueue:
    """Prizes in award order. Index 0 is awarded first."""

    def __init__(self, *, id_allocator: Optional[IdAllocator] = None) -> None:
        self._ids = id_allocator or IdAllocator("PRZ")
        self._prizes: list[Prize] = []

    @property
    def prizes(self) -> tuple[Prize, ...]:
        return tuple(self._prizes)

    def __len__(self) -> int:
        return len(self._prizes)

    def __iter__(self) -> Iterator[Prize]:
        return iter(tuple(self._prizes))

    def add(self, raw_text: str, *, strict: bool = False) -> list[Prize]:
        """Append one prize per comma/newline separated entry of ``raw_text``."""

        names = split_entries(raw_text)
        if not names:
            if strict:
                raise EmptyInputError("No prize names found in the supplied text")
            return []
        added = [Prize(id=self._ids.allocate(), name=name) for name in names]
        self._prizes.extend(added)
        logger.debug(f"Queued {len(added)} prizes (queue length {len(self)})")
        return added

    def remove(self, prize_id: str) -> Optional[Prize]:
        for index, prize in enumerate(self._prizes):
            if prize.id == prize_id:
                del self._prizes[index]
                return prize
        return None

    def clear(self) -> None:
        self._prizes.clear()

    def _swap(self, index: int, target: int) -> bool:
        self._prizes[index], self._prizes[target] = self._prizes[target], self._prizes[index]
        return True

    def move_up(self, index: int) -> bool:
        """Swap the prize at ``index`` with its predecessor.

        Returns ``False`` (and changes nothing) at the front of the queue or
        for an index outside the queue.
        """

        if index <= 0 or index >= len(self._prizes):
            return False
        return self._swap(index, index - 1)

    def move_down(self, index: int) -> bool:
        """Swap the prize at ``index`` with its successor; no-op at the end."""

        if index < 0 or index >= len(self._prizes) - 1:
            return False
        return self._swap(index, index + 1)

    def peek_next(self) -> Optional[Prize]:
        return self._prizes[0] if self._prizes else None

    def consume_next(self) -> Optional[Prize]:
        """Remove and return the front prize, or ``None`` when empty."""

        if not self._prizes:
            return None
        prize = self._prizes.pop(0)
        logger.debug(f"Prize '{prize.name}' consumed ({len(self)} left)")
        return prize


__all__ = ["PrizeQueue"]
