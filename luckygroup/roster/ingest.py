"""Helpers for turning pasted text or uploaded files into entry names."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import IO, Union

TextSource = Union[str, bytes, os.PathLike, IO[str], IO[bytes]]

_SEPARATORS = re.compile(r"[,\n]")


def _strip_bom(text: str) -> str:
    if text.startswith("\ufeff"):
        return text[1:]
    return text


def split_entries(text: str) -> list[str]:
    """Split ``text`` on commas and newlines, returning trimmed non-empty entries.

    Parameters
    ----------
    text : str
        Raw text as pasted by the operator or read from a file.

    Returns
    -------
    list[str]
        Entries in input order. Empty when nothing usable was found.
    """

    if text is None:
        return []
    if not isinstance(text, str):
        raise TypeError("text must be a string")
    entries = (token.strip() for token in _SEPARATORS.split(_strip_bom(text)))
    return [entry for entry in entries if entry]


def read_text_source(source: TextSource) -> str:
    """Return the text content of an uploaded plain-text/CSV source.

    ``source`` may be a filesystem path, raw ``bytes``, an already decoded
    ``str``, or a file-like object opened in text or binary mode. Bytes are
    decoded as UTF-8 and a leading BOM is removed. The content is not parsed
    as CSV; commas simply separate entries like newlines do.
    """

    if hasattr(source, "read"):
        text = source.read()  # type: ignore[union-attr]
    elif isinstance(source, bytes):
        text = source
    elif isinstance(source, os.PathLike):
        text = Path(source).read_bytes()
    elif isinstance(source, str):
        text = source
    else:
        raise TypeError(f"Unsupported text source: {type(source).__name__}")

    if isinstance(text, bytes):
        text = text.decode("utf-8")
    return _strip_bom(text)


__all__ = ["TextSource", "read_text_source", "split_entries"]
