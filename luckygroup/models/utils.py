"""Utility helpers for the models package."""

from __future__ import annotations

import secrets
import string

BASE62_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase


class IdAllocator:
    """Issue prefixed base62 identifiers that never repeat.

    Every identifier handed out is remembered, so a random candidate that
    matches an earlier one is simply redrawn. Uniqueness therefore holds for
    the lifetime of the allocator regardless of how short ``length`` is.

    Parameters
    ----------
    prefix : str
        Text placed before the random suffix, e.g. ``"P"`` gives ``"P-x9Zk..."``.
    length : int, default: 12
        Number of random base62 characters in the suffix.
    max_attempts : int, default: 32
        Consecutive collisions tolerated before giving up.

    Notes
    -----
    Issued identifiers are never released, so memory grows with every
    allocation for the lifetime of the allocator, including across roster
    clears.
    """

    def __init__(self, prefix: str, *, length: int = 12, max_attempts: int = 32) -> None:
        if length < 1:
            raise ValueError("length must be at least 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.prefix = prefix
        self.length = length
        self.max_attempts = max_attempts
        self._issued: set[str] = set()

    def _candidate(self) -> str:
        suffix = "".join(secrets.choice(BASE62_ALPHABET) for _ in range(self.length))
        return f"{self.prefix}-{suffix}"

    def allocate(self) -> str:
        """Return a fresh identifier not issued before by this allocator."""
        attempts = 0
        while attempts < self.max_attempts:
            candidate = self._candidate()
            if candidate in self._issued:
                attempts += 1
                continue
            self._issued.add(candidate)
            return candidate

        raise RuntimeError(
            f"Unable to generate a unique '{self.prefix}' identifier after multiple attempts"
        )

    def issued_count(self) -> int:
        return len(self._issued)


__all__ = ["BASE62_ALPHABET", "IdAllocator"]
