"""
Tests for CLI commands — generate, check, list-stacks and global options.
"""

import json

from click.testing import CliRunner

from stackgen.main import cli
from tests.sandbox import block, generate_hcl


def _invoke(sandbox, *args: str, chdir: str | None = None):
    working_dir = sandbox.root / chdir if chdir else sandbox.root
    runner = CliRunner()
    return runner.invoke(cli, ["--root", str(sandbox.root), "-C", str(working_dir), *args])


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "generate" in result.output
        assert "check" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_missing_project_root(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["generate"])
        assert result.exit_code == 1
        assert "No stackgen.yml" in result.output

    def test_root_found_from_working_dir(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        runner = CliRunner()
        result = runner.invoke(cli, ["-C", str(entry.path), "list-stacks"])
        assert result.exit_code == 0
        assert result.output.strip() == "/stacks/app"


class TestGenerateCommand:
    def test_generate(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        entry.create_config({"export_as_locals": {"a": 1}})

        result = _invoke(sandbox, "generate")

        assert result.exit_code == 0
        assert "Successes:" in result.output
        assert "\t[+] _gen_locals.tf" in result.output
        assert entry.has_file("_gen_locals.tf")

    def test_generate_up_to_date(self, sandbox):
        sandbox.create_stack("stacks/app")

        result = _invoke(sandbox, "generate")

        assert result.exit_code == 0
        assert "Nothing to do" in result.output

    def test_generate_json(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        entry.create_config(generate_hcl({"main.tf": [block("terraform")]}))

        result = _invoke(sandbox, "generate", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["bootstrap_error"] is None
        assert data["stacks"][0]["stack"] == "/stacks/app"
        assert data["stacks"][0]["created"] == ["main.tf"]

    def test_generate_failure_exits_1(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        entry.create_config({"export_as_locals": {"a": "${global.missing}"}})

        result = _invoke(sandbox, "generate")

        assert result.exit_code == 1
        assert "Failures:" in result.output
        assert "- /stacks/app" in result.output

    def test_generate_respects_working_dir(self, sandbox):
        a = sandbox.create_stack("a/app")
        a.create_config({"export_as_locals": {"x": 1}})
        b = sandbox.create_stack("b/app")
        b.create_config({"export_as_locals": {"x": 1}})

        result = _invoke(sandbox, "generate", chdir="a")

        assert result.exit_code == 0
        assert a.has_file("_gen_locals.tf")
        assert not b.has_file("_gen_locals.tf")


class TestCheckCommand:
    def test_outdated(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        entry.create_config({"export_as_locals": {"a": 1}})

        result = _invoke(sandbox, "check")

        assert result.exit_code == 1
        assert "/stacks/app" in result.output
        assert "_gen_locals.tf" in result.output

    def test_up_to_date(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        entry.create_config({"export_as_locals": {"a": 1}})
        sandbox.generate()

        result = _invoke(sandbox, "check")

        assert result.exit_code == 0
        assert "up to date" in result.output

    def test_json(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        entry.create_config({"export_as_locals": {"a": 1}})

        result = _invoke(sandbox, "check", "--json")

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["outdated"] == {"/stacks/app": ["_gen_locals.tf"]}
        assert data["errors"] == {}

    def test_error(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        entry.create_config({"export_as_locals": {"a": "${global.missing}"}})

        result = _invoke(sandbox, "check")

        assert result.exit_code == 1
        assert "❌ /stacks/app" in result.output

    def test_does_not_write(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        entry.create_config({"export_as_locals": {"a": 1}})

        _invoke(sandbox, "check")

        assert not entry.has_file("_gen_locals.tf")


class TestListStacksCommand:
    def test_list(self, sandbox):
        sandbox.create_stack("stacks/b")
        sandbox.create_stack("stacks/a")

        result = _invoke(sandbox, "list-stacks")

        assert result.exit_code == 0
        assert result.output.splitlines() == ["/stacks/a", "/stacks/b"]

    def test_list_json(self, sandbox):
        entry = sandbox.create_stack("stacks/app")
        entry.create_config({"stack": {"name": "payments", "description": "Pays"}})

        result = _invoke(sandbox, "list-stacks", "--json")

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {"name": "payments", "path": "/stacks/app", "description": "Pays"},
        ]

    def test_list_invalid_config(self, sandbox):
        sandbox.dir_entry("stacks/broken").create_config("stack: [\n")

        result = _invoke(sandbox, "list-stacks")

        assert result.exit_code == 1
        assert "❌" in result.output
