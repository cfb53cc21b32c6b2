"""Span and token types, and class-name token extraction from string literals."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open byte range [lo, hi) into UTF-8 encoded source."""

    lo: int
    hi: int

    def __len__(self) -> int:
        return self.hi - self.lo

    def contains(self, offset: int) -> bool:
        """Return True if offset lies within [lo, hi)."""
        return self.lo <= offset < self.hi


@dataclass(frozen=True, slots=True)
class Token:
    """A whitespace-delimited run inside a string literal, a class-name candidate."""

    value: str
    span: Span


# WHATWG ASCII whitespace: no vertical tab.
_ASCII_WHITESPACE = frozenset(b" \t\n\x0c\r")


def is_ascii_whitespace(byte: int) -> bool:
    """Return True if byte is ASCII whitespace (space, tab, LF, FF, CR)."""
    return byte in _ASCII_WHITESPACE


def split_runs(value: bytes) -> list[tuple[int, int]]:
    """Split value into maximal non-whitespace runs.

    Returns (start, end) pairs with *inclusive* end offsets, relative to the
    start of value.
    """
    runs: list[tuple[int, int]] = []
    start: int | None = None

    for offset, byte in enumerate(value):
        if is_ascii_whitespace(byte):
            if start is not None:
                runs.append((start, offset - 1))
                start = None
        elif start is None:
            start = offset

    if start is not None:
        runs.append((start, len(value) - 1))

    return runs


def extract_token(value: bytes, content_start: int, cursor: int) -> Token | None:
    """Return the token of a string literal that contains the cursor.

    *value* is the raw literal content between the quotes and *content_start*
    the absolute byte offset of its first byte; the opening quote sits at
    ``content_start - 1``. The cursor must fall strictly inside the quoted
    span, and on a token (both ends of a token count), for a result.
    """
    if not value:
        return None

    quote_lo = content_start - 1
    quote_hi = content_start + len(value) + 1
    if not (quote_lo < cursor < quote_hi):
        return None

    for start, end in split_runs(value):
        lo = content_start + start
        hi = content_start + end
        if lo <= cursor <= hi:
            text = value[start : end + 1].decode("utf-8", errors="replace")
            return Token(text, Span(lo, hi + 1))

    return None
