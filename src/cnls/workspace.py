"""Open documents and active configuration, shared by every query."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from cnls.config import Settings
from cnls.errors import ScopeError
from cnls.scope import DEFAULT_SCOPES, Scope, parse_scopes

logger = logging.getLogger(__name__)


class WorkspaceState:
    """Document texts by URI, the active scopes, and the workspace roots.

    Document updates are single dict operations, so a reader sees either the
    old or the new text in full. The scope tuple is immutable and swapped
    under a lock; readers take the current tuple without locking.
    """

    def __init__(
        self,
        scopes: Iterable[Scope] = DEFAULT_SCOPES,
        roots: Iterable[Path] = (),
        exclude: Iterable[str] = (),
    ) -> None:
        self._documents: dict[str, str] = {}
        self._scopes: tuple[Scope, ...] = tuple(scopes)
        self._scopes_lock = threading.Lock()
        self._roots: tuple[Path, ...] = tuple(roots)
        self._exclude: tuple[str, ...] = tuple(exclude)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def on_document_open(self, uri: str, text: str) -> None:
        self._documents[uri] = text

    def on_document_change(self, uri: str, text: str) -> None:
        self._documents[uri] = text

    def on_document_close(self, uri: str) -> None:
        self._documents.pop(uri, None)

    def document(self, uri: str) -> str | None:
        return self._documents.get(uri)

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    @property
    def scopes(self) -> tuple[Scope, ...]:
        return self._scopes

    def set_scopes(self, scopes: Iterable[Scope]) -> None:
        new_scopes = tuple(scopes)
        with self._scopes_lock:
            self._scopes = new_scopes

    def on_configuration_change(self, scope_strings: Iterable[str]) -> list[ScopeError]:
        """Replace all scopes with the valid entries; log and return the invalid ones."""
        scopes, errors = parse_scopes(scope_strings)
        for err in errors:
            logger.error("cnls.scopes: %s", err)
        self.set_scopes(scopes)
        return errors

    # ------------------------------------------------------------------
    # Workspace roots and settings
    # ------------------------------------------------------------------

    @property
    def roots(self) -> tuple[Path, ...]:
        return self._roots

    @property
    def root(self) -> Path | None:
        """The authoritative root: the first one."""
        return self._roots[0] if self._roots else None

    def set_roots(self, roots: Iterable[Path]) -> None:
        self._roots = tuple(roots)

    @property
    def exclude(self) -> tuple[str, ...]:
        return self._exclude

    def apply_settings(self, settings: Settings) -> list[ScopeError]:
        """Apply settings loaded from a config file."""
        self._exclude = settings.exclude
        if settings.scopes is None:
            return []
        return self.on_configuration_change(settings.scopes)
