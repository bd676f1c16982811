import io
import json
import re
from pathlib import Path

from cli.docdrift_cli import build_drafter, run
from docdrift.llm import OllamaDrafter, OpenAIDrafter, StubDrafter


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _run_json(argv: list[str]) -> tuple[int, dict]:
    stdout = io.StringIO()
    stderr = io.StringIO()
    exit_code = run(argv + ["--format", "json"], stdout=stdout, stderr=stderr)
    return exit_code, json.loads(_strip_ansi(stdout.getvalue()))


def test_cli_001_requires_a_command() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run([], stdout=stdout, stderr=stderr)

    assert exit_code == 2


def test_cli_002_analyze_fails_for_missing_workspace(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["analyze", "--path", str(tmp_path / "absent")], stdout=stdout, stderr=stderr
    )

    assert exit_code == 2
    assert "No workspace folder found" in stderr.getvalue()


def test_cli_003_analyze_supports_json_output(tmp_path: Path) -> None:
    _write_file(tmp_path / "src" / "routes" / "users.js", "router.get('/users', h)\n")

    exit_code, payload = _run_json(["analyze", "--path", str(tmp_path)])

    assert exit_code == 0
    assert payload["command"] == "analyze-workspace"
    assert payload["payload"]["code_items"][0]["name"] == "GET /users"
    assert payload["payload"]["total_files"] == 1


def test_cli_004_analyze_supports_table_output(tmp_path: Path) -> None:
    _write_file(tmp_path / "src" / "auth" / "login.ts", "export function login() {}\n")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["analyze", "--path", str(tmp_path)], stdout=stdout, stderr=stderr)

    assert exit_code == 0
    compact_text = re.sub(r"[^a-zA-Z0-9_./-]+", "", _strip_ansi(stdout.getvalue()))
    assert "Analyzed1files0documentationcoverage" in compact_text
    assert "Unknown" in compact_text
    assert "Monolithic" in compact_text


def test_cli_005_generate_then_apply_and_revert_by_id(tmp_path: Path) -> None:
    _write_file(tmp_path / "app.py", "def main():\n    pass\n")
    db_path = tmp_path.parent / f"{tmp_path.name}-changes.sqlite"

    generate_code, generated = _run_json(
        ["generate", "--path", str(tmp_path), "--db", str(db_path)]
    )
    change_id = generated["payload"]["change_ids"][0]
    revert_code, _ = _run_json(
        ["revert", change_id, "--path", str(tmp_path), "--db", str(db_path)]
    )
    apply_code, _ = _run_json(
        ["apply", change_id, "--path", str(tmp_path), "--db", str(db_path)]
    )
    second_apply_code, second_apply = _run_json(
        ["apply", change_id, "--path", str(tmp_path), "--db", str(db_path)]
    )
    stats_code, stats = _run_json(["stats", "--path", str(tmp_path), "--db", str(db_path)])

    assert generate_code == 0
    assert (tmp_path / "README.md").is_file()
    assert revert_code == 0
    assert apply_code == 0
    assert second_apply_code == 1
    assert "already applied" in second_apply["message"]
    assert stats_code == 0
    assert stats["payload"]["total"] == len(generated["payload"]["generated"])
    assert stats["payload"]["applied"] == stats["payload"]["total"]


def test_cli_006_changes_diff_and_clear_use_default_database(tmp_path: Path) -> None:
    _write_file(tmp_path / "main.go", "func main() {\n}\n")
    _, generated = _run_json(["generate", "--path", str(tmp_path)])
    change_id = generated["payload"]["change_ids"][0]

    _, changes = _run_json(["changes", "--path", str(tmp_path), "--status", "applied"])
    _, diff = _run_json(["diff", change_id, "--path", str(tmp_path)])
    clear_code, _ = _run_json(["clear", "--path", str(tmp_path)])
    _, activities = _run_json(["changes", "--path", str(tmp_path)])

    assert (tmp_path / ".docdrift" / "changes.sqlite").is_file()
    assert len(changes["payload"]["changes"]) == len(generated["payload"]["generated"])
    assert diff["payload"]["document"].startswith("# Diff: Generated")
    assert clear_code == 0
    assert activities["payload"]["activities"] == []


def test_cli_007_unknown_change_id_exits_with_failure(tmp_path: Path) -> None:
    exit_code, payload = _run_json(["diff", "nope", "--path", str(tmp_path)])

    assert exit_code == 1
    assert payload["message"] == "Change not found: nope"


def test_cli_008_build_drafter_selects_provider() -> None:
    assert isinstance(build_drafter("stub", None, None), StubDrafter)
    assert isinstance(
        build_drafter("ollama", "http://localhost:11434", "llama3.1"), OllamaDrafter
    )
    assert isinstance(build_drafter("openai", None, None), OpenAIDrafter)
