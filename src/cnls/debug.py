"""--dump-index output: a stylesheet's class names grouped by rule."""

from __future__ import annotations

import sys
from itertools import groupby
from typing import TextIO

from cnls.stylesheet import StylesheetIndex


def dump_index(index: StylesheetIndex, *, file: TextIO | None = None) -> None:
    """Print a human-readable view of *index* to *file* (default: stdout)."""
    if file is None:
        file = sys.stdout
    file.write(f"Stylesheet {index.path}\n")
    for span, entries in groupby(index.entries, key=lambda e: e.span):
        file.write(f"  Rule {span.lo}..{span.hi}\n")
        for entry in entries:
            file.write(f"    .{entry.value}\n")
    if index.diagnostics:
        file.write(f"  {len(index.diagnostics)} syntax error(s)\n")
