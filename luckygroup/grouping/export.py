"""CSV export of a grouping result."""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import Sequence, Union

from ..exceptions import EmptyRosterError
from ..models.entities import Group

logger = logging.getLogger(__name__)

CSV_FILENAME = "grouping_result.csv"
CSV_HEADER = ("Group", "Name")
BOM = "\ufeff"


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def groups_to_csv(groups: Sequence[Group]) -> str:
    """Render ``groups`` as spreadsheet-friendly CSV text.

    The text starts with a BOM so spreadsheet applications detect UTF-8.
    Every member becomes one ``Group <id>,"<name>"`` row.
    """

    output = io.StringIO()
    output.write(BOM)
    output.write(",".join(CSV_HEADER) + "\n")
    for group in groups:
        for member in group.members:
            output.write(f"{group.label},{_quote(member.name)}\n")
    return output.getvalue()


def write_groups_csv(
    groups: Sequence[Group], destination: Union[str, os.PathLike] = "."
) -> Path:
    """Write the CSV export and return its path.

    When ``destination`` is an existing directory the file is named
    :data:`CSV_FILENAME` inside it; otherwise ``destination`` is the file path.

    Raises
    ------
    EmptyRosterError
        If there are no groups to export.
    """

    if not groups:
        raise EmptyRosterError("There are no groups to export")
    path = Path(destination)
    if path.is_dir():
        path = path / CSV_FILENAME
    # newline="" keeps the "\n" row terminators on every platform
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(groups_to_csv(groups))
    logger.info(f"Exported {len(groups)} groups to {path}")
    return path


__all__ = ["BOM", "CSV_FILENAME", "CSV_HEADER", "groups_to_csv", "write_groups_csv"]
