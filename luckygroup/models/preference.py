"""Persisted key/value preferences (currently only the UI theme)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
THEME_LIGHT = "light"
THEME_DARK = "dark"
VALID_THEMES = (THEME_LIGHT, THEME_DARK)
DEFAULT_THEME = THEME_LIGHT


class Preference(Base):
    """A single preference value stored under a fixed key."""

    __tablename__ = "preferences"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    """Preference name, e.g. ``"theme"``."""

    value: Mapped[str] = mapped_column(String(255), nullable=False)
    """Stored preference value."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    """Timestamp automatically bumped when the value changes."""

    def __init__(
        self,
        *,
        key: str,
        value: str,
        updated_at: Optional[datetime] = None,
    ) -> None:
        self.key = key
        self.value = value
        if updated_at is not None:
            self.updated_at = updated_at

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Preference(key={self.key}, value={self.value})>"

    @classmethod
    def get_value(cls, session: Session, key: str) -> Optional[str]:
        """Return the value stored under ``key`` or ``None`` when unset."""

        return session.scalar(select(cls.value).where(cls.key == key))

    @classmethod
    def set_value(cls, session: Session, key: str, value: str) -> "Preference":
        """Insert or update the row for ``key`` and flush it.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        key : str
            Preference name.
        value : str
            New value.

        Returns
        -------
        Preference
            The upserted row.
        """

        row = session.get(cls, key)
        if row is None:
            row = cls(key=key, value=value)
            session.add(row)
        else:
            row.value = value
        session.flush()
        logger.debug(f"Preference '{key}' set to '{value}'")
        return row


def normalize_theme(theme: str) -> str:
    """Return ``theme`` lower-cased, or raise when it is not a known theme."""

    if not isinstance(theme, str):
        raise TypeError("theme must be a string")
    normalized = theme.strip().lower()
    if normalized not in VALID_THEMES:
        raise ValueError(f"theme must be one of {VALID_THEMES}, got '{theme}'")
    return normalized


__all__ = [
    "DEFAULT_THEME",
    "Preference",
    "THEME_DARK",
    "THEME_KEY",
    "THEME_LIGHT",
    "VALID_THEMES",
    "normalize_theme",
]
