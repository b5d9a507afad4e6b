"""Tests for the hookscript CLI."""

import pytest
from typer.testing import CliRunner

from hookscript import __version__
from hookscript.cli import _parse_kv_args, app


runner = CliRunner()


@pytest.fixture
def project(monkeypatch, tmp_path):
    """A project directory with a few hook scripts."""
    monkeypatch.delenv("HOOKSCRIPT_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / "verify.py").write_text(
        "print(f\"foo={context['foo']}\")\n"
        "print(f'globalVar={globalVar}')\n"
        "True\n"
    )
    (tmp_path / "return-false.py").write_text("False\n")
    (tmp_path / "failed.py").write_text("raise RuntimeError('broken hook')\n")
    return tmp_path


class TestParseKvArgs:
    """Tests for key=value parsing."""

    def test_types(self):
        """Values should be parsed into Python types."""
        parsed = _parse_kv_args(
            ["a=true", "b=False", "c=null", "d=42", "e=1.5", 'f={"x": 1}', "g=text", "h=x=y"]
        )

        assert parsed == {
            "a": True,
            "b": False,
            "c": None,
            "d": 42,
            "e": 1.5,
            "f": {"x": 1},
            "g": "text",
            "h": "x=y",
        }

    def test_empty(self):
        """None should give an empty dict."""
        assert _parse_kv_args(None) == {}


class TestRunCommand:
    """Tests for hookscript run."""

    def test_passing_script(self, project):
        """A passing script should exit 0 and write the log."""
        log_file = project / "target" / "verify.log"

        result = runner.invoke(
            app,
            ["run", "--log-file", str(log_file), "-g", "globalVar=rocks", "test", str(project), "verify", "foo=bar"],
        )

        assert result.exit_code == 0, result.output
        assert "foo=bar" in result.output
        log_content = log_file.read_text()
        assert "Running test:" in log_content
        assert "globalVar=rocks" in log_content
        assert "Finished test:" in log_content

    def test_quiet(self, project):
        """--quiet should not echo script output."""
        result = runner.invoke(
            app,
            ["run", "--quiet", "-g", "globalVar=x", "test", str(project), "verify", "foo=bar"],
        )

        assert result.exit_code == 0
        assert "foo=bar" not in result.output

    def test_failing_result(self, project):
        """A failing result should exit 2."""
        result = runner.invoke(app, ["run", "test", str(project), "return-false"])

        assert result.exit_code == 2
        assert "The test returned False." in result.output

    def test_failed_script(self, project):
        """A raising script should exit 1."""
        result = runner.invoke(app, ["run", "test", str(project), "failed"])

        assert result.exit_code == 1
        assert "broken hook" in result.output

    def test_missing_script(self, project):
        """A missing script should be skipped with exit 0."""
        result = runner.invoke(app, ["run", "test", str(project), "does-not-exist"])

        assert result.exit_code == 0

    def test_config_globals(self, project):
        """Globals from the config file should reach the script."""
        (project / "hookscript.yaml").write_text(
            "log_file: logs/hooks.log\nglobals:\n  globalVar: from-config\n"
        )

        result = runner.invoke(app, ["run", "test", str(project), "verify", "foo=bar"])

        assert result.exit_code == 0, result.output
        assert "globalVar=from-config" in (project / "logs" / "hooks.log").read_text()

    def test_bad_config(self, project):
        """An invalid config should exit 1."""
        result = runner.invoke(
            app, ["run", "--config", str(project / "missing.yaml"), "test", str(project), "verify"]
        )

        assert result.exit_code == 1
        assert "Config error" in result.output


class TestRunFileCommand:
    """Tests for hookscript run-file."""

    def test_run_file(self, project):
        """Should run the given file."""
        result = runner.invoke(
            app,
            ["run-file", "-g", "globalVar=rocks", "test", str(project / "verify.py"), "foo=bar"],
        )

        assert result.exit_code == 0, result.output
        assert "globalVar=rocks" in result.output

    def test_read_error(self, project):
        """An unreadable script should exit 1."""
        (project / "broken.py").mkdir()

        result = runner.invoke(app, ["run-file", "test", str(project / "broken.py")])

        assert result.exit_code == 1
        assert "error reading test" in result.output


class TestOtherCommands:
    """Tests for informational commands."""

    def test_interpreters(self):
        """Should list extensions in probe order."""
        result = runner.invoke(app, ["interpreters"])

        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].startswith("py\tPythonScriptInterpreter")
        assert "(default)" in lines[0]
        assert lines[1].startswith("sh\tShellScriptInterpreter")

    def test_version(self):
        """Should print the version."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config_validate(self, project):
        """config validate should report the loaded settings."""
        (project / "hookscript.yaml").write_text("encoding: utf-8\nclass_path:\n  - lib\n")

        result = runner.invoke(app, ["config", "validate"])

        assert result.exit_code == 0
        assert "Encoding: utf-8" in result.output
        assert "Class path: lib" in result.output

    def test_config_validate_invalid(self, project):
        """Invalid config should fail validation."""
        (project / "hookscript.yaml").write_text("encoding: [1]\n")

        result = runner.invoke(app, ["config", "validate"])

        assert result.exit_code == 1
