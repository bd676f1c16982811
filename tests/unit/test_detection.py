from docdrift.classifier import classify_file, file_extension, language_for
from docdrift.detector import (
    detect_construct,
    determine_priority,
    has_documentation,
    parse_parameters,
    parse_return_type,
    scan_source,
    suggested_doc_path,
)
from docdrift.model import Parameter


def test_det_001_classifier_assigns_categories_by_extension() -> None:
    assert classify_file("src/app.ts") == "code"
    assert classify_file("docs/GUIDE.MD") == "documentation"
    assert classify_file("package.json") == "configuration"
    assert classify_file("static/logo.png") == "asset"
    assert classify_file("Makefile") == "other"
    assert file_extension("a/b.Test.TSX") == ".tsx"


def test_det_002_language_hint_is_none_for_non_code_files() -> None:
    assert language_for("main.go") == "go"
    assert language_for("lib.rs") == "rust"
    assert language_for("README.md") is None


def test_det_003_router_route_on_line_twelve_is_high_priority_api_route() -> None:
    lines = ["const express = require('express');"] + ["" for _ in range(10)]
    lines.append('router.get("/users", handler)')
    text = "\n".join(lines)

    items = scan_source("src/routes/users.js", text, "javascript")

    routes = [item for item in items if item.kind == "api-route"]
    assert len(routes) == 1
    assert routes[0].name == "GET /users"
    assert routes[0].priority == "high"
    assert routes[0].line_number == 12
    assert routes[0].signature == 'router.get("/users", handler)'


def test_det_004_route_rule_wins_over_function_rule() -> None:
    construct = detect_construct("app.post('/login', async (req, res) => {", "typescript")

    assert construct is not None
    assert construct.kind == "api-route"
    assert construct.name == "POST /login"


def test_det_005_python_decorator_routes_are_detected() -> None:
    fastapi_route = detect_construct('@app.get("/items/{item_id}")', "python")
    flask_route = detect_construct("@bp.route('/health')", "python")

    assert fastapi_route is not None
    assert fastapi_route.name == "GET /items/{item_id}"
    assert flask_route is not None
    assert flask_route.name == "ROUTE /health"


def test_det_006_interface_is_checked_before_class() -> None:
    construct = detect_construct("export interface UserRepository {", "typescript")

    assert construct is not None
    assert construct.kind == "interface"
    assert construct.name == "UserRepository"


def test_det_007_language_scoped_rules_do_not_leak_between_languages() -> None:
    assert detect_construct("def build(self):", "javascript") is None
    assert detect_construct("func Serve(w http.ResponseWriter) {", "go").name == "Serve"
    assert detect_construct("type Store interface {", "go").kind == "interface"
    assert detect_construct("pub struct Config {", "rust").kind == "class"
    assert detect_construct("class Thing", None) is None


def test_det_008_doc_comment_markers_depend_on_language() -> None:
    ts_lines = ["/**", " * Create a user.", " */", "function createUser() {"]
    py_lines = ["def helper():", '    """Help with things."""', "    return 1"]
    bare_lines = ["// plain comment", "function other() {"]

    assert has_documentation(ts_lines, 3, "typescript") is True
    assert has_documentation(py_lines, 0, "python") is True
    assert has_documentation(bare_lines, 1, "javascript") is False


def test_det_009_doc_comment_outside_window_is_ignored() -> None:
    lines = ["/**", " */"] + ["" for _ in range(12)] + ["function late() {"]

    assert has_documentation(lines, len(lines) - 1, "javascript", window=10) is False


def test_det_010_priority_keywords_are_case_insensitive() -> None:
    assert determine_priority("AuthGuard", "class") == "high"
    assert determine_priority("publicHandler", "function") == "high"
    assert determine_priority("DateHelper", "class") == "medium"
    assert determine_priority("formatDate", "function") == "low"
    assert determine_priority("ping", "api-route") == "high"


def test_det_011_suggested_doc_path_sanitizes_route_names() -> None:
    assert suggested_doc_path("src/routes/users.js", "GET /users") == (
        "src/routes/users.GET_users.md"
    )
    assert suggested_doc_path("app.py", "main") == "app.main.md"


def test_det_012_parameters_and_return_types_are_parsed() -> None:
    py_params = parse_parameters(
        "def fetch(self, user_id: int, retries: int = 3) -> dict[str, int]:", "python"
    )
    ts_params = parse_parameters(
        "function merge(a: Map<string, number>, b?: string): Promise<void> {",
        "typescript",
    )
    go_params = parse_parameters("func Serve(addr string, port int) error {", "go")

    assert py_params == (Parameter("user_id", "int"), Parameter("retries", "int"))
    assert ts_params == (
        Parameter("a", "Map<string, number>"),
        Parameter("b", "string"),
    )
    assert go_params == (Parameter("addr", "string"), Parameter("port", "int"))
    assert (
        parse_return_type("def fetch(self) -> dict[str, int]:", "python")
        == "dict[str, int]"
    )
    assert parse_return_type("function merge(a): Promise<void> {", "typescript") == (
        "Promise<void>"
    )
    assert parse_return_type("func Serve(addr string) error {", "go") == "error"
    assert parse_return_type("public void run() {", "java") is None


def test_det_013_scan_marks_documented_and_undocumented_constructs() -> None:
    text = "\n".join(
        [
            "class UserService:",
            '    """Manage users."""',
            "",
            "    def create_user(self, name: str) -> None:",
            "        pass",
            "",
            "",
            "",
            "",
            "",
            "",
            "",
            "",
            "",
            "",
            "def tidy(value):",
            "    return value",
        ]
    )

    items = scan_source("app/users/service.py", text, "python")

    by_name = {item.name: item for item in items}
    assert [item.name for item in items] == ["UserService", "create_user", "tidy"]
    assert by_name["UserService"].has_documentation is True
    assert by_name["create_user"].has_documentation is False
    assert by_name["create_user"].parameters == (Parameter("name", "str"),)
    assert by_name["create_user"].return_type == "None"
    assert by_name["tidy"].has_documentation is False
    assert by_name["tidy"].line_number == 16


def test_det_014_python_docstrings_belong_to_the_following_declaration() -> None:
    text = "\n".join(
        [
            "def first():",
            '    """Documented."""',
            "    return 1",
            "",
            "def second():",
            "    return 2",
            "",
            "def inline(): '''Inline docstring.'''",
            "",
            "def spread(",
            "    name: str,",
            "    key=lambda item: item,",
            ") -> dict[str, int]:  # trailing comment",
            "",
            '    r"""Raw docstring."""',
            "",
            '@app.get("/users")',
            "def list_users():",
            "    return []",
        ]
    )

    items = scan_source("app/views.py", text, "python")

    assert [(item.name, item.has_documentation) for item in items] == [
        ("first", True),
        ("second", False),
        ("inline", True),
        ("spread", True),
        ("GET /users", False),
        ("list_users", False),
    ]
