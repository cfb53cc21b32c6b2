"""cnls: CSS class-name hover and go-to-definition for JSX/TSX sources."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cnls.scope import Scope

__version__ = "0.1.0"


def lookup(
    path: Path,
    line: int,
    character: int,
    root: Path,
    scopes: tuple[Scope, ...] | None = None,
) -> str | None:
    """Return the CSS rule defining the class name at a zero-based position of a file.

    *character* counts Unicode code points. Stylesheets are searched under *root*.
    """
    from pygls.uris import from_fs_path

    from cnls.positions import UTF32
    from cnls.query import query_hover
    from cnls.scope import DEFAULT_SCOPES
    from cnls.workspace import WorkspaceState

    state = WorkspaceState(scopes if scopes is not None else DEFAULT_SCOPES, roots=[root])
    uri = from_fs_path(str(path.resolve())) or str(path)
    state.on_document_open(uri, path.read_text(encoding="utf-8"))

    result = query_hover(state, uri, line, character, UTF32)
    return result.text if result is not None else None
