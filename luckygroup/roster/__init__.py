"""Participant roster, prize queue, and text ingestion."""

from .demo import DEMO_NAMES
from .ingest import read_text_source, split_entries
from .prizes import PrizeQueue
from .roster import Roster

__all__ = [
    "DEMO_NAMES",
    "PrizeQueue",
    "Roster",
    "read_text_source",
    "split_entries",
]
