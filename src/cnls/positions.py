"""Conversion between editor (line, character) positions and byte offsets.

Byte offsets into the UTF-8 encoded text are the only coordinates used
internally. Editor positions count ``character`` in the position encoding
negotiated with the client: UTF-16 code units unless the client agreed to
UTF-8 bytes or UTF-32 code points.
"""

from __future__ import annotations

from bisect import bisect_right

from lsprotocol.types import PositionEncodingKind

from cnls.errors import PositionError

UTF8 = PositionEncodingKind.Utf8
UTF16 = PositionEncodingKind.Utf16
UTF32 = PositionEncodingKind.Utf32


def _units(ch: str, encoding: str) -> int:
    """Width of one character in the given position encoding."""
    if encoding == UTF8:
        return len(ch.encode("utf-8"))
    if encoding == UTF16:
        return 2 if ord(ch) > 0xFFFF else 1
    return 1


class LineIndex:
    """Line-start table for a UTF-8 byte string, built by scanning line feeds."""

    def __init__(self, source: bytes) -> None:
        self._source = source
        starts = [0]
        pos = source.find(b"\n")
        while pos != -1:
            starts.append(pos + 1)
            pos = source.find(b"\n", pos + 1)
        self._starts = starts

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def line_start(self, line: int) -> int:
        """Byte offset where line begins. Raises PositionError past the last line."""
        if not 0 <= line < len(self._starts):
            raise PositionError("line out of range", line, len(self._starts))
        return self._starts[line]

    def _line_end(self, line: int) -> int:
        if line + 1 < len(self._starts):
            return self._starts[line + 1]
        return len(self._source)

    def offset_at(self, line: int, character: int, encoding: str = UTF16) -> int:
        """Absolute byte offset of an editor position.

        Units beyond the end of the line are added one byte per unit, as the
        editor asked for them.
        """
        start = self.line_start(line)
        if encoding == UTF8:
            return start + character

        text = self._source[start : self._line_end(line)].decode("utf-8", errors="replace")
        remaining = character
        offset = start
        for ch in text:
            if remaining <= 0:
                break
            remaining -= _units(ch, encoding)
            offset += len(ch.encode("utf-8"))
        return offset + max(remaining, 0)

    def position_at(self, offset: int, encoding: str = UTF16) -> tuple[int, int]:
        """Editor (line, character) of a byte offset, both zero-based."""
        offset = max(0, min(offset, len(self._source)))
        line = bisect_right(self._starts, offset) - 1
        prefix = self._source[self._starts[line] : offset]
        if encoding == UTF8:
            return line, len(prefix)
        text = prefix.decode("utf-8", errors="replace")
        return line, sum(_units(ch, encoding) for ch in text)


def locate(text: str | bytes, line: int, character: int, encoding: str = UTF16) -> int:
    """Byte offset of (line, character) in text. Raises PositionError past the last line."""
    source = text.encode("utf-8") if isinstance(text, str) else text
    return LineIndex(source).offset_at(line, character, encoding)
