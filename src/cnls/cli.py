"""Command-line interface for cnls."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

from cnls.config import load_config, settings_from_config
from cnls.errors import StylesheetError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class LookupTarget:
    """A FILE:LINE:COL position, 1-based."""

    path: Path
    line: int
    column: int


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    root: Path
    config: Path | None
    scopes: list[str] | None
    cli_scopes: list[str]
    exclude: list[str]
    lookup: LookupTarget | None
    definition: bool
    dump_index: Path | None
    tcp: bool
    host: str
    port: int
    log_file: Path | None
    log_level: str


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="cnls",
        description="Language server for CSS class names in JSX/TSX sources",
    )
    p.add_argument("--tcp", action="store_true", help="Serve over TCP instead of stdio")
    p.add_argument("--host", default="127.0.0.1", help="TCP host (default: 127.0.0.1)")
    p.add_argument("--port", type=int, default=2087, help="TCP port (default: 2087)")
    p.add_argument(
        "--lookup",
        metavar="FILE:LINE:COL",
        help="Resolve the class name at a 1-based position once and exit",
    )
    p.add_argument(
        "--definition",
        action="store_true",
        help="With --lookup, print the rule location instead of its text",
    )
    p.add_argument("--root", help="Workspace root (default: current directory)")
    p.add_argument(
        "--scope",
        action="append",
        default=[],
        metavar="SCOPE",
        help="Scope such as att:className or fn:clsx (repeatable, replaces configured scopes)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover cnls.toml in the root)",
    )
    p.add_argument("--dump-index", metavar="CSS", help="Print the class index of a stylesheet")
    p.add_argument("--log-file", metavar="FILE", help="Write logs to FILE (default: stderr)")
    p.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: warning)",
    )
    return p


def parse_lookup_arg(s: str) -> LookupTarget:
    """Parse a FILE:LINE:COL string (1-based line and column)."""
    rest, _, col = s.rpartition(":")
    path, _, line = rest.rpartition(":")
    if not path or not line.isdigit() or not col.isdigit():
        raise argparse.ArgumentTypeError(f"invalid lookup format (expected FILE:LINE:COL): {s}")
    if int(line) < 1 or int(col) < 1:
        raise argparse.ArgumentTypeError(f"line and column are 1-based: {s}")
    return LookupTarget(Path(path), int(line), int(col))


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    root = Path(args.root) if args.root else Path(".")
    config_path = Path(args.config) if args.config else None
    settings = settings_from_config(load_config(config_path, root))

    scopes: list[str] | None = list(settings.scopes) if settings.scopes is not None else None
    if args.scope:
        scopes = list(args.scope)

    return CliOptions(
        root=root,
        config=config_path,
        scopes=scopes,
        cli_scopes=list(args.scope),
        exclude=list(settings.exclude),
        lookup=parse_lookup_arg(args.lookup) if args.lookup else None,
        definition=args.definition,
        dump_index=Path(args.dump_index) if args.dump_index else None,
        tcp=args.tcp,
        host=args.host,
        port=args.port,
        log_file=Path(args.log_file) if args.log_file else None,
        log_level=args.log_level,
    )


def configure_logging(options: CliOptions) -> None:
    """Send logs to the log file or stderr; stdout may carry the protocol."""
    level = getattr(logging, options.log_level.upper())
    if options.log_file is not None:
        logging.basicConfig(filename=options.log_file, level=level, format=LOG_FORMAT)
    else:
        logging.basicConfig(stream=sys.stderr, level=level, format=LOG_FORMAT)


def run_lookup(options: CliOptions, target: LookupTarget) -> int:
    """Resolve one position and print the rule text or location. Returns 0/1/2."""
    from pygls.uris import from_fs_path, to_fs_path

    from cnls.positions import UTF32
    from cnls.query import query_definition, query_hover
    from cnls.scope import DEFAULT_SCOPES, parse_scopes
    from cnls.workspace import WorkspaceState

    scopes = DEFAULT_SCOPES
    if options.scopes is not None:
        parsed, errors = parse_scopes(options.scopes)
        if errors:
            for err in errors:
                print(f"error: {err}", file=sys.stderr)
            return 2
        scopes = tuple(parsed)

    try:
        text = target.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: {target.path}: {exc}", file=sys.stderr)
        return 2

    state = WorkspaceState(scopes, roots=[options.root.resolve()], exclude=options.exclude)
    uri = from_fs_path(str(target.path.resolve())) or str(target.path)
    state.on_document_open(uri, text)

    line, character = target.line - 1, target.column - 1
    if options.definition:
        location = query_definition(state, uri, line, character, UTF32)
        if location is None:
            return 1
        path = to_fs_path(location.uri) or location.uri
        print(f"{path}:{location.start_line + 1}:{location.start_col + 1}")
        return 0

    hover = query_hover(state, uri, line, character, UTF32)
    if hover is None:
        return 1
    print(hover.text)
    return 0


def run_dump_index(path: Path) -> int:
    from cnls.debug import dump_index
    from cnls.stylesheet import build_index

    try:
        index = build_index(path)
    except StylesheetError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    dump_index(index)
    return 0


def serve(options: CliOptions) -> int:
    """Run the language server until the client disconnects. Returns 0/2.

    The root, config file and ``--scope`` flags seed the server; scopes given
    on the command line stay in force over the workspace's ``cnls.toml``.
    """
    from cnls import lsp
    from cnls.scope import parse_scopes

    _, errors = parse_scopes(options.cli_scopes)
    if errors:
        for err in errors:
            print(f"error: {err}", file=sys.stderr)
        return 2

    lsp.configure_server(
        lsp.server,
        root=options.root.resolve(),
        config_path=options.config,
        scopes=options.cli_scopes or None,
    )
    if options.tcp:
        lsp.main_tcp(options.host, options.port)
    else:
        lsp.main()
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except (OSError, tomllib.TOMLDecodeError) as exc:
        print(f"error: config: {exc}", file=sys.stderr)
        return 2

    configure_logging(options)

    if options.dump_index is not None:
        return run_dump_index(options.dump_index)

    if options.lookup is not None:
        return run_lookup(options, options.lookup)

    return serve(options)
