"""LSP server for cnls: hover and go-to-definition for CSS class names."""

from __future__ import annotations

import logging
import re
import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from lsprotocol.types import (
    INITIALIZED,
    TEXT_DOCUMENT_DEFINITION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_HOVER,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    DefinitionParams,
    DidChangeConfigurationParams,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    Hover,
    HoverParams,
    InitializedParams,
    Location,
    LogMessageParams,
    MarkupContent,
    MarkupKind,
    MessageType,
    Position,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from cnls import __version__
from cnls.config import load_config, scopes_from_client_settings, settings_from_config
from cnls.positions import UTF16
from cnls.query import query_definition, query_hover
from cnls.workspace import WorkspaceState

logger = logging.getLogger(__name__)


class ClassNameServer(LanguageServer):
    """A LanguageServer owning the workspace state its queries read."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.state = WorkspaceState()
        # Command-line options, set by configure_server before serving
        self.fallback_root: Path | None = None
        self.config_path: Path | None = None
        self.launch_scopes: tuple[str, ...] | None = None


class ClientLogHandler(logging.Handler):
    """Forward log records to the client as window/logMessage notifications."""

    def __init__(self, ls: LanguageServer, level: int = logging.WARNING) -> None:
        super().__init__(level)
        self._ls = ls

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            self._ls.window_log_message(
                LogMessageParams(type=message_type_for(record.levelno), message=message)
            )
        except Exception:
            self.handleError(record)


def message_type_for(levelno: int) -> MessageType:
    if levelno >= logging.ERROR:
        return MessageType.Error
    if levelno >= logging.WARNING:
        return MessageType.Warning
    if levelno >= logging.INFO:
        return MessageType.Info
    return MessageType.Log


server = ClassNameServer("cnls", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _log(ls: LanguageServer, message_type: MessageType, message: str) -> None:
    ls.window_log_message(LogMessageParams(type=message_type, message=message))


def _position_encoding(ls: LanguageServer) -> str:
    return ls.workspace.position_encoding or UTF16


def _workspace_roots(ls: LanguageServer) -> list[Path]:
    """Workspace folder paths in client order, falling back to the root URI."""
    ws = ls.workspace
    uris = [folder.uri for folder in ws.folders.values()]
    if not uris and ws.root_uri:
        uris = [ws.root_uri]

    roots: list[Path] = []
    for uri in uris:
        path = to_fs_path(uri)
        if path is None:
            logger.warning("ignoring non-file workspace folder: %s", uri)
            continue
        roots.append(Path(path))
    return roots


def configure_server(
    ls: ClassNameServer,
    *,
    root: Path | None = None,
    config_path: Path | None = None,
    scopes: Iterable[str] | None = None,
) -> None:
    """Seed the server with command-line options before it starts serving.

    *root* is used when the client sends no workspace folders. *config_path*
    replaces the ``cnls.toml`` discovered in the workspace. *scopes* win over
    the scopes of any config file, including one loaded at initialization.
    """
    ls.fallback_root = root
    ls.config_path = config_path
    ls.launch_scopes = tuple(scopes) if scopes is not None else None
    if root is not None:
        ls.state.set_roots([root])
    _apply_config(ls, root)
    _apply_launch_scopes(ls)


def _apply_config(ls: ClassNameServer, root: Path | None) -> None:
    if root is None and ls.config_path is None:
        return

    try:
        config = load_config(ls.config_path, root or Path("."))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.error("cnls.toml: %s", exc)
        return

    # Invalid scope entries are logged by the state
    ls.state.apply_settings(settings_from_config(config))


def _apply_launch_scopes(ls: ClassNameServer) -> None:
    if ls.launch_scopes is not None:
        ls.state.on_configuration_change(ls.launch_scopes)


def _load_workspace(ls: ClassNameServer) -> None:
    """Record the workspace roots and apply ``cnls.toml`` from the first one."""
    roots = _workspace_roots(ls)
    if not roots and ls.fallback_root is not None:
        roots = [ls.fallback_root]
    ls.state.set_roots(roots)
    _apply_config(ls, roots[0] if roots else None)
    _apply_launch_scopes(ls)


def _change_configuration(ls: ClassNameServer, settings: Any) -> None:
    scope_strings = scopes_from_client_settings(settings)
    if scope_strings is None:
        logger.warning("cnls.scopes should be an array of strings")
        return
    ls.state.on_configuration_change(scope_strings)


def _code_block(language: str, text: str) -> str:
    """Fence *text* as Markdown, with a fence longer than any backtick run inside."""
    longest = max((len(run) for run in re.findall(r"`+", text)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}{language}\n{text}\n{fence}"


def _hover(ls: ClassNameServer, uri: str, position: Position) -> Hover | None:
    result = query_hover(
        ls.state, uri, position.line, position.character, _position_encoding(ls)
    )
    if result is None:
        return None
    return Hover(
        contents=MarkupContent(
            kind=MarkupKind.Markdown,
            value=_code_block(result.language, result.text),
        )
    )


def _definition(ls: ClassNameServer, uri: str, position: Position) -> Location | None:
    result = query_definition(
        ls.state, uri, position.line, position.character, _position_encoding(ls)
    )
    if result is None:
        return None
    return Location(
        uri=result.uri,
        range=Range(
            start=Position(line=result.start_line, character=result.start_col),
            end=Position(line=result.end_line, character=result.end_col),
        ),
    )


@server.feature(INITIALIZED)
def initialized(ls: ClassNameServer, params: InitializedParams) -> None:
    _load_workspace(ls)
    _log(ls, MessageType.Info, "server initialized!")


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: ClassNameServer, params: DidOpenTextDocumentParams) -> None:
    logger.debug("opened %s", params.text_document.uri)
    ls.state.on_document_open(params.text_document.uri, params.text_document.text)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: ClassNameServer, params: DidChangeTextDocumentParams) -> None:
    # Full sync: the last change carries the whole text
    if params.content_changes:
        ls.state.on_document_change(params.text_document.uri, params.content_changes[-1].text)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: ClassNameServer, params: DidCloseTextDocumentParams) -> None:
    ls.state.on_document_close(params.text_document.uri)


@server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(ls: ClassNameServer, params: DidChangeConfigurationParams) -> None:
    _change_configuration(ls, params.settings)


@server.thread()
@server.feature(TEXT_DOCUMENT_HOVER)
def hover(ls: ClassNameServer, params: HoverParams) -> Hover | None:
    return _hover(ls, params.text_document.uri, params.position)


@server.thread()
@server.feature(TEXT_DOCUMENT_DEFINITION)
def definition(ls: ClassNameServer, params: DefinitionParams) -> Location | None:
    return _definition(ls, params.text_document.uri, params.position)


def _attach_client_logging(ls: LanguageServer) -> None:
    logging.getLogger("cnls").addHandler(ClientLogHandler(ls))


def main() -> None:
    _attach_client_logging(server)
    server.start_io()


def main_tcp(host: str, port: int) -> None:
    _attach_client_logging(server)
    server.start_tcp(host, port)
