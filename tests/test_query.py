"""End-to-end tests for hover and definition queries."""

from __future__ import annotations

from cnls import lookup
from cnls.positions import UTF8, UTF16, UTF32
from cnls.query import HoverResult, class_name_at, query_definition, query_hover
from cnls.scope import DEFAULT_SCOPES, parse_scope
from cnls.workspace import WorkspaceState
from tests.conftest import utf16_column


def open_state(project, rel: str, text: str, **kwargs) -> tuple[WorkspaceState, str]:
    path = project.write(rel, text)
    state = WorkspaceState(roots=[project.root], **kwargs)
    uri = path.as_uri()
    state.on_document_open(uri, text)
    return state, uri


# ---------------------------------------------------------------------------
# Hover
# ---------------------------------------------------------------------------


class TestHover:
    def test_create_element(self, project) -> None:
        project.write("styles.css", ".bar { color: red; }\n")
        line = 'createElement("foo bar", null);'
        state, uri = open_state(project, "index.js", line + "\n")
        result = query_hover(state, uri, 0, line.index("bar") + 1)
        assert result == HoverResult("css", ".bar { color: red; }")

    def test_jsx_attribute_on_later_line(self, project) -> None:
        project.write("src/card.css", ".card {\n  padding: 1rem;\n}\n")
        text = "export function Card() {\n  return <div className=\"card\" />;\n}\n"
        state, uri = open_state(project, "src/Card.tsx", text)
        line = text.split("\n")[1]
        result = query_hover(state, uri, 1, line.index("card"))
        assert result.text == ".card {\n  padding: 1rem;\n}"

    def test_class_not_defined(self, project) -> None:
        project.write("styles.css", ".bar {}\n")
        line = 'createElement("foo");'
        state, uri = open_state(project, "index.js", line)
        assert query_hover(state, uri, 0, line.index("foo") + 1) is None

    def test_cursor_outside_scope(self, project) -> None:
        project.write("styles.css", ".bar {}\n")
        line = 'const s = "bar";'
        state, uri = open_state(project, "index.js", line)
        assert query_hover(state, uri, 0, line.index("bar") + 1) is None

    def test_custom_scopes(self, project) -> None:
        project.write("styles.css", ".m-2 { margin: 0.5rem; }\n")
        line = 'const c = clsx("p-4 m-2");'
        state, uri = open_state(project, "util.ts", line, scopes=[parse_scope("fn:clsx")])
        assert query_hover(state, uri, 0, line.index("m-2")).text == ".m-2 { margin: 0.5rem; }"

    def test_document_not_open(self, project, caplog) -> None:
        state = WorkspaceState(roots=[project.root])
        assert query_hover(state, "file:///nowhere/App.tsx", 0, 0) is None
        assert "document is not open" in caplog.text

    def test_line_past_end(self, project) -> None:
        state, uri = open_state(project, "index.js", 'createElement("a");')
        assert query_hover(state, uri, 9, 0) is None

    def test_unsupported_extension(self, project, caplog) -> None:
        project.write("styles.css", ".bar {}\n")
        line = 'createElement("bar");'
        state, uri = open_state(project, "notes.txt", line)
        assert query_hover(state, uri, 0, line.index("bar")) is None
        assert "unknown filetype: .txt" in caplog.text

    def test_no_root(self, project, caplog) -> None:
        line = 'createElement("bar");'
        state = WorkspaceState()
        state.on_document_open("file:///x/index.js", line)
        assert query_hover(state, "file:///x/index.js", 0, line.index("bar")) is None
        assert "must define the root_path" in caplog.text

    def test_latest_text_wins(self, project) -> None:
        project.write("styles.css", ".old {}\n.new { color: red; }\n")
        state, uri = open_state(project, "index.js", 'createElement("old");')
        state.on_document_change(uri, 'createElement("new");')
        assert query_hover(state, uri, 0, 16).text == ".new { color: red; }"

    def test_rule_edited_after_indexing_is_reread(self, project) -> None:
        css = project.write("styles.css", ".bar { color: red; }\n")
        line = 'createElement("bar");'
        state, uri = open_state(project, "index.js", line)
        col = line.index("bar")
        assert query_hover(state, uri, 0, col).text == ".bar { color: red; }"
        css.write_text(".bar { color: blue; }\n", encoding="utf-8")
        assert query_hover(state, uri, 0, col).text == ".bar { color: blue; }"


# ---------------------------------------------------------------------------
# Position encodings
# ---------------------------------------------------------------------------


class TestEncodings:
    def test_utf16_after_astral_character(self, project) -> None:
        project.write("styles.css", ".bar { color: red; }\n")
        line = '<div title="😀" className="bar" />;'
        state, uri = open_state(project, "App.tsx", line)
        col = utf16_column(line, "bar", 1)
        assert query_hover(state, uri, 0, col, UTF16).text == ".bar { color: red; }"

    def test_utf32_counts_code_points(self, project) -> None:
        project.write("styles.css", ".bar { color: red; }\n")
        line = '<div title="😀" className="bar" />;'
        state, uri = open_state(project, "App.tsx", line)
        assert query_hover(state, uri, 0, line.index("bar"), UTF32) is not None

    def test_utf8_counts_bytes(self, project) -> None:
        project.write("styles.css", ".bar { color: red; }\n")
        line = '<div title="😀" className="bar" />;'
        state, uri = open_state(project, "App.tsx", line)
        col = len(line[: line.index("bar")].encode("utf-8"))
        assert query_hover(state, uri, 0, col, UTF8) is not None


# ---------------------------------------------------------------------------
# Definition
# ---------------------------------------------------------------------------


class TestDefinition:
    def test_location(self, project) -> None:
        css = project.write("styles/app.css", "/* app */\n.bar {\n  color: red;\n}\n")
        line = 'createElement("foo bar", null);'
        state, uri = open_state(project, "index.js", line)
        loc = query_definition(state, uri, 0, line.index("bar"))
        assert loc.uri == css.as_uri()
        assert (loc.start_line, loc.start_col) == (1, 0)
        assert (loc.end_line, loc.end_col) == (3, 1)

    def test_first_stylesheet_in_walk_order(self, project) -> None:
        project.write("b.css", ".dup { color: blue; }\n")
        a = project.write("a.css", ".dup { color: red; }\n")
        line = 'createElement("dup");'
        state, uri = open_state(project, "index.js", line)
        assert query_definition(state, uri, 0, line.index("dup")).uri == a.as_uri()

    def test_ignored_stylesheet_not_searched(self, project) -> None:
        project.write(".gitignore", "dist/\n")
        project.write("dist/out.css", ".bar {}\n")
        line = 'createElement("bar");'
        state, uri = open_state(project, "index.js", line)
        assert query_definition(state, uri, 0, line.index("bar")) is None

    def test_excluded_stylesheet_not_searched(self, project) -> None:
        project.write("vendor/lib.css", ".bar {}\n")
        line = 'createElement("bar");'
        state, uri = open_state(project, "index.js", line, exclude=["vendor/"])
        assert query_definition(state, uri, 0, line.index("bar")) is None

    def test_miss(self, project) -> None:
        line = 'createElement("bar");'
        state, uri = open_state(project, "index.js", line)
        assert query_definition(state, uri, 0, line.index("bar")) is None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestClassNameAt:
    def test_token(self) -> None:
        text = 'x;\ncreateElement("a b");'
        token = class_name_at("index.js", text, 1, 17, DEFAULT_SCOPES)
        assert token.value == "b"

    def test_position_error_is_a_miss(self) -> None:
        assert class_name_at("index.js", "x", 5, 0, DEFAULT_SCOPES) is None


class TestLookup:
    def test_lookup(self, project) -> None:
        project.write("styles.css", ".bar { color: red; }\n")
        line = 'createElement("foo bar");'
        path = project.write("index.js", line + "\n")
        assert lookup(path, 0, line.index("bar"), project.root) == ".bar { color: red; }"

    def test_lookup_miss(self, project) -> None:
        path = project.write("index.js", 'createElement("bar");\n')
        assert lookup(path, 0, 16, project.root) is None
