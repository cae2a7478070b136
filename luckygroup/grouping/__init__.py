"""Random grouping and CSV export."""

from .export import CSV_FILENAME, groups_to_csv, write_groups_csv
from .partitioner import (
    DEFAULT_GROUP_SIZE,
    GroupPartitioner,
    MIN_GROUP_SIZE,
    clamp_group_size,
    expected_group_count,
    max_group_size,
)

__all__ = [
    "CSV_FILENAME",
    "DEFAULT_GROUP_SIZE",
    "GroupPartitioner",
    "MIN_GROUP_SIZE",
    "clamp_group_size",
    "expected_group_count",
    "groups_to_csv",
    "max_group_size",
    "write_groups_csv",
]
