"""Stylesheet discovery under a workspace root.

The walk is deterministic: directory entries are visited in name order and a
subdirectory is walked where it is met. ``.gitignore`` and ``.ignore`` files
apply to their own directory and everything below it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from pathspec import GitIgnoreSpec

logger = logging.getLogger(__name__)

IGNORE_FILES: tuple[str, ...] = (".gitignore", ".ignore")
IGNORE_DIRS: frozenset[str] = frozenset({".git"})
STYLESHEET_SUFFIX = ".css"


def translate_ignore_pattern(raw_line: str, base_rel: str) -> str | None:
    """
    Translate one ignore-file pattern living in directory ``base_rel``
    (relative to the walk root) into a root-relative gitignore pattern.

    Handles negation (``!``), anchoring (leading ``/``) and patterns without a
    slash, which match at any depth under their directory.
    """
    line = raw_line.rstrip("\n").rstrip("\r")
    if not line.strip() or line.lstrip().startswith("#"):
        return None

    negated = line.startswith("!")
    body = line[1:] if negated else line

    anchored = body.startswith("/")
    if anchored:
        body = body[1:]

    prefix = f"{base_rel}/" if base_rel else ""

    # A slash anywhere but the end anchors the pattern to its directory
    if anchored or "/" in body.rstrip("/"):
        pat = f"/{prefix}{body}"
    elif base_rel:
        pat = f"{base_rel}/**/{body}"
    else:
        pat = f"**/{body}"

    return f"!{pat}" if negated else pat


def _read_ignore_patterns(directory: Path, base_rel: str) -> list[str]:
    patterns: list[str] = []
    for name in IGNORE_FILES:
        ignore_file = directory / name
        if not ignore_file.is_file():
            continue
        try:
            with open(ignore_file, encoding="utf-8", errors="replace") as f:
                for raw in f:
                    translated = translate_ignore_pattern(raw, base_rel)
                    if translated is not None:
                        patterns.append(translated)
        except OSError as exc:
            logger.error("failed to read ignore file %s: %s", ignore_file, exc)
    return patterns


class StylesheetWalker:
    """Recursive ``*.css`` collector honoring ignore files and extra exclude patterns."""

    def __init__(self, root: Path, exclude: Sequence[str] = ()) -> None:
        self.root = root
        self._base_patterns = [translate_ignore_pattern(p, "") for p in exclude]

    def walk(self) -> list[Path]:
        found: list[Path] = []
        if not self.root.is_dir():
            logger.error("workspace root is not a directory: %s", self.root)
            return found
        patterns = [p for p in self._base_patterns if p is not None]
        self._walk_dir(self.root, "", patterns, found)
        return found

    def _walk_dir(self, directory: Path, rel: str, inherited: list[str], found: list[Path]) -> None:
        patterns = inherited + _read_ignore_patterns(directory, rel)
        spec = GitIgnoreSpec.from_lines(patterns) if patterns else None

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            logger.error("failed to read directory %s: %s", directory, exc)
            return

        for entry in entries:
            entry_rel = f"{rel}/{entry.name}" if rel else entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError as exc:
                logger.error("failed to read a directory entry %s: %s", entry.path, exc)
                continue

            if is_dir:
                if entry.name in IGNORE_DIRS:
                    continue
                if spec is not None and spec.match_file(entry_rel + "/"):
                    continue
                self._walk_dir(Path(entry.path), entry_rel, patterns, found)
            elif is_file and entry.name.endswith(STYLESHEET_SUFFIX):
                if spec is not None and spec.match_file(entry_rel):
                    continue
                found.append(Path(entry.path))


def find_stylesheets(root: Path, exclude: Iterable[str] = ()) -> list[Path]:
    """All stylesheets under root, in discovery order."""
    stylesheets = StylesheetWalker(root, tuple(exclude)).walk()
    logger.debug("discovered %d stylesheet(s) under %s", len(stylesheets), root)
    return stylesheets
