from .base import Base

# import models so metadata.create_all can discover mappers
from .preference import Preference  # noqa: F401
from .entities import (  # noqa: F401
    AwardedPrize,
    DrawRecord,
    DuplicateReport,
    GENERIC_WIN,
    GenericWin,
    Group,
    Participant,
    Prize,
)
from .utils import IdAllocator  # noqa: F401

__all__ = [
    "Base",
    "Preference",
    "AwardedPrize",
    "DrawRecord",
    "DuplicateReport",
    "GENERIC_WIN",
    "GenericWin",
    "Group",
    "Participant",
    "Prize",
    "IdAllocator",
]
