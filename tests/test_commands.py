"""Tests for CLI commands using Click's test runner."""

import json
import os

import pytest
from click.testing import CliRunner

from beadslite.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def beads_dir(tmp_path, monkeypatch):
    """Create a temporary directory with beads-lite initialized."""
    for var in ("BL_DB", "BL_PREFIX", "BL_JSON"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["init", "--prefix", "test"])
    assert result.exit_code == 0, result.output
    yield str(tmp_path)


def _create(runner, *args) -> str:
    result = runner.invoke(cli, ["create", *args, "--silent"])
    assert result.exit_code == 0, result.output
    return result.output.strip()


class TestInit:
    def test_init(self, runner: CliRunner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init", "--prefix", "myproj"])
            assert result.exit_code == 0
            assert "Initialized beads-lite" in result.output
            assert os.path.exists(".beads-lite/config.yaml")
            assert os.path.exists(".beads-lite/beads.db")
            with open(".beads-lite/config.yaml") as f:
                assert "issue-prefix: myproj" in f.read()

    def test_init_twice(self, runner: CliRunner, beads_dir: str):
        result = runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "already initialized" in result.output

    def test_not_initialized(self, runner: CliRunner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["list"])
            assert result.exit_code == 1
            assert "bl init" in result.output


class TestCreate:
    def test_create_basic(self, runner: CliRunner, beads_dir: str):
        result = runner.invoke(cli, ["create", "Test", "Issue", "-p", "1", "--type", "bug"])
        assert result.exit_code == 0
        assert "Created test-" in result.output
        assert result.output.strip().endswith(": Test Issue")

    def test_create_silent(self, runner: CliRunner, beads_dir: str):
        issue_id = _create(runner, "Silent")
        assert issue_id.startswith("test-")
        assert len(issue_id) == len("test-") + 4

    def test_create_json(self, runner: CliRunner, beads_dir: str):
        result = runner.invoke(cli, ["--json", "create", "Json", "issue"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["title"] == "Json issue"
        assert data["status"] == "open"

    def test_create_with_blocker_and_parent(self, runner: CliRunner, beads_dir: str):
        epic = _create(runner, "Epic", "--type", "epic")
        blocker = _create(runner, "Blocker")
        child = _create(runner, "Child", "--parent", epic, "--blocked-by", blocker)

        result = runner.invoke(cli, ["show", child, "--json"])
        assert result.exit_code == 0
        deps = json.loads(result.output)["dependencies"]
        assert {"depends_on": epic, "type": "parent_child"} in deps
        assert {"depends_on": blocker, "type": "blocks"} in deps

    def test_create_missing_blocker(self, runner: CliRunner, beads_dir: str):
        result = runner.invoke(cli, ["create", "Orphan", "--blocked-by", "test-zzzz"])
        assert result.exit_code == 1
        assert "test-zzzz" in result.output
        result = runner.invoke(cli, ["list"])
        assert "No issues found" in result.output

    def test_create_bad_priority(self, runner: CliRunner, beads_dir: str):
        result = runner.invoke(cli, ["create", "Bad", "-p", "7"])
        assert result.exit_code != 0


class TestList:
    def test_list(self, runner: CliRunner, beads_dir: str):
        _create(runner, "Low", "-p", "4")
        _create(runner, "Urgent", "-p", "0")
        result = runner.invoke(cli, ["list"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert "Urgent" in lines[0]
        assert "Low" in lines[1]
        assert "2 issue(s)" in result.output

    def test_list_jsonl(self, runner: CliRunner, beads_dir: str):
        _create(runner, "One")
        _create(runner, "Two")
        result = runner.invoke(cli, ["list", "--json"])
        assert result.exit_code == 0
        records = [json.loads(line) for line in result.output.splitlines()]
        assert {r["title"] for r in records} == {"One", "Two"}

    @pytest.mark.parametrize("args", [
        ["--status", "blocked"],
        ["--priority", "9"],
        ["--type", "chore"],
        ["--resolution", "fixed"],
    ])
    def test_list_invalid_filter(self, runner: CliRunner, beads_dir: str, args):
        result = runner.invoke(cli, ["list", *args])
        assert result.exit_code == 1
        assert "Error: invalid" in result.output


class TestReadyAndBlocked:
    def test_ready_follows_blockers(self, runner: CliRunner, beads_dir: str):
        first = _create(runner, "First")
        second = _create(runner, "Second", "--blocked-by", first)

        result = runner.invoke(cli, ["ready"])
        assert result.exit_code == 0
        assert first in result.output
        assert second not in result.output

        result = runner.invoke(cli, ["blocked"])
        assert result.exit_code == 0
        assert second in result.output
        assert f"blocked by: {first}" in result.output

        result = runner.invoke(cli, ["close", first])
        assert result.exit_code == 0
        assert f"Closed {first}: First" in result.output

        result = runner.invoke(cli, ["ready"])
        assert second in result.output
        assert first not in result.output
        assert "No blocked issues." in runner.invoke(cli, ["blocked"]).output

    def test_ready_empty(self, runner: CliRunner, beads_dir: str):
        result = runner.invoke(cli, ["ready"])
        assert result.exit_code == 0
        assert "No ready issues." in result.output


class TestCloseUpdateDelete:
    def test_close_twice(self, runner: CliRunner, beads_dir: str):
        issue_id = _create(runner, "Once")
        assert runner.invoke(cli, ["close", issue_id, "-r", "wontfix"]).exit_code == 0
        result = runner.invoke(cli, ["close", issue_id])
        assert result.exit_code == 0
        assert "Already closed" in result.output

    def test_close_invalid_resolution(self, runner: CliRunner, beads_dir: str):
        issue_id = _create(runner, "Once")
        result = runner.invoke(cli, ["close", issue_id, "-r", "fixed"])
        assert result.exit_code == 1
        assert "invalid resolution" in result.output

    def test_close_missing(self, runner: CliRunner, beads_dir: str):
        result = runner.invoke(cli, ["close", "test-nope"])
        assert result.exit_code == 1
        assert "issue not found: test-nope" in result.output

    def test_update(self, runner: CliRunner, beads_dir: str):
        issue_id = _create(runner, "Before")
        result = runner.invoke(cli, ["update", issue_id, "--title", "After",
                                     "--status", "in_progress", "-p", "0"])
        assert result.exit_code == 0
        assert f"Updated {issue_id}: After" in result.output
        data = json.loads(runner.invoke(cli, ["show", issue_id, "--json"]).output)
        assert data["status"] == "in_progress"
        assert data["priority"] == 0

    def test_update_invalid_status(self, runner: CliRunner, beads_dir: str):
        issue_id = _create(runner, "Task")
        result = runner.invoke(cli, ["update", issue_id, "--status", "done"])
        assert result.exit_code == 1

    def test_delete_requires_confirm(self, runner: CliRunner, beads_dir: str):
        issue_id = _create(runner, "Doomed")
        result = runner.invoke(cli, ["delete", issue_id])
        assert result.exit_code == 1
        assert "--confirm" in result.output

        result = runner.invoke(cli, ["delete", issue_id, "--confirm"])
        assert result.exit_code == 0
        assert f"Deleted {issue_id}: Doomed" in result.output
        assert runner.invoke(cli, ["show", issue_id]).exit_code == 1


class TestDep:
    def test_add_list_remove(self, runner: CliRunner, beads_dir: str):
        a = _create(runner, "A")
        b = _create(runner, "B")

        result = runner.invoke(cli, ["dep", "add", b, a])
        assert result.exit_code == 0
        assert f"{b} depends on {a} (blocks)" in result.output

        result = runner.invoke(cli, ["dep", "add", b, a])
        assert result.exit_code == 1
        assert "already exists" in result.output

        result = runner.invoke(cli, ["dep", "list", b])
        assert result.exit_code == 0
        assert a in result.output

        result = runner.invoke(cli, ["dep", "remove", b, a])
        assert result.exit_code == 0
        assert "Removed dependency" in result.output

        result = runner.invoke(cli, ["dep", "remove", b, a])
        assert "No such dependency" in result.output

    def test_add_self(self, runner: CliRunner, beads_dir: str):
        a = _create(runner, "A")
        result = runner.invoke(cli, ["dep", "add", a, a, "--type", "related"])
        assert result.exit_code == 1


class TestExchange:
    def test_export_import_round_trip(self, runner: CliRunner, beads_dir: str):
        a = _create(runner, "A")
        _create(runner, "B", "--blocked-by", a)

        result = runner.invoke(cli, ["export", "issues.jsonl"])
        assert result.exit_code == 0
        assert "Exported to issues.jsonl" in result.output

        stdout_export = runner.invoke(cli, ["export"]).output
        with open("issues.jsonl", encoding="utf-8") as f:
            assert f.read() == stdout_export

        result = runner.invoke(cli, ["--db", "other.db", "import", "issues.jsonl"])
        assert result.exit_code == 0
        assert "Imported: 2 created, 0 updated" in result.output

        result = runner.invoke(cli, ["import", "issues.jsonl"])
        assert "Imported: 0 created, 2 updated" in result.output

        other = runner.invoke(cli, ["--db", "other.db", "export"]).output
        assert other == stdout_export

    def test_import_malformed(self, runner: CliRunner, beads_dir: str):
        with open("bad.jsonl", "w", encoding="utf-8") as f:
            f.write('{"id": "test-1"}\n')
        result = runner.invoke(cli, ["import", "bad.jsonl"])
        assert result.exit_code == 1
        assert "line 1" in result.output


class TestConfig:
    def test_bad_id_length_reported(self, runner: CliRunner, beads_dir: str):
        with open(".beads-lite/config.yaml", "a", encoding="utf-8") as f:
            f.write("id-length: 0\n")
        result = runner.invoke(cli, ["create", "Anything"])
        assert result.exit_code == 1
        assert "id-length must be at least 3" in result.output
