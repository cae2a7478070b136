"""Shuffle-and-chunk partitioning of a roster into groups."""

from __future__ import annotations

import logging
import math
import random
from typing import Iterable, Optional

from ..exceptions import EmptyRosterError
from ..lucky_draw.randomness import shuffled
from ..models.entities import Group, Participant

logger = logging.getLogger(__name__)

MIN_GROUP_SIZE = 2
DEFAULT_GROUP_SIZE = 3


def expected_group_count(roster_size: int, group_size: int) -> int:
    """Number of groups ``generate`` produces for the given sizes."""

    if group_size < 1:
        raise ValueError("group_size must be positive")
    return math.ceil(roster_size / group_size)


def max_group_size(roster_size: int) -> int:
    """Upper bound offered to operators for a roster of ``roster_size``."""

    return max(10, math.ceil(roster_size / 2))


def clamp_group_size(value: int, roster_size: int) -> int:
    """Clamp ``value`` into ``[MIN_GROUP_SIZE, max_group_size(roster_size)]``."""

    return min(max(int(value), MIN_GROUP_SIZE), max_group_size(roster_size))


class GroupPartitioner:
    """Split participants into randomly composed groups of a fixed size.

    Every call reshuffles, so two calls with the same input usually differ.
    The input is never modified.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def generate(
        self, participants: Iterable[Participant], group_size: int
    ) -> list[Group]:
        """Return groups of ``group_size`` built from a uniform shuffle.

        Parameters
        ----------
        participants : Iterable[Participant]
            Roster snapshot (a :class:`~luckygroup.roster.Roster` works too).
        group_size : int
            Members per group; the last group may be smaller.

        Returns
        -------
        list[Group]
            Groups numbered from 1 in partition order.

        Raises
        ------
        EmptyRosterError
            If ``participants`` is empty.
        ValueError
            If ``group_size`` is below :data:`MIN_GROUP_SIZE`.
        """

        members = list(participants)
        if not members:
            raise EmptyRosterError("Cannot build groups from an empty roster")
        if group_size < MIN_GROUP_SIZE:
            raise ValueError(f"group_size must be at least {MIN_GROUP_SIZE}")

        order = shuffled(members, self._rng)
        groups = [
            Group(id=number, members=tuple(order[start : start + group_size]))
            for number, start in enumerate(range(0, len(order), group_size), start=1)
        ]
        logger.info(
            f"Partitioned {len(members)} participants into {len(groups)} groups of {group_size}"
        )
        return groups


__all__ = [
    "DEFAULT_GROUP_SIZE",
    "GroupPartitioner",
    "MIN_GROUP_SIZE",
    "clamp_group_size",
    "expected_group_count",
    "max_group_size",
]
