"""Tests for the distrender command line."""

import logging

import pytest
from typer.testing import CliRunner

from distrender.cli.app import app

runner = CliRunner()


@pytest.fixture
def source(tmp_path):
    root = tmp_path / "src"
    (root / "public").mkdir(parents=True)
    (root / "greeting.txt.tt").write_text("Hello [% name %]")
    (root / "public" / "version.js.tt").write_text("v = '[% dist.version %]';\n")
    (root / "public" / "version.js").write_text("v = 'dev';\n")
    return root


class TestBuild:
    """Tests for the build command."""

    def test_greeting(self, source, tmp_path):
        dest = tmp_path / "out"
        result = runner.invoke(
            app,
            ["build", str(source), "--dest", str(dest), "--var", "name = World", "--replace"],
        )

        assert result.exit_code == 0, result.output
        assert (dest / "greeting.txt").read_text() == "Hello World"
        assert (dest / "greeting.txt.tt").exists()
        assert (dest / "public" / "version.js").read_text() == "v = '0.001';\n"

    def test_replace_and_prune_with_finder(self, source, tmp_path):
        dest = tmp_path / "out"
        result = runner.invoke(
            app,
            [
                "build",
                str(source),
                "--dest",
                str(dest),
                "--version",
                "2.5",
                "--define-finder",
                "JsTemplates=public/*.js.tt",
                "--finder",
                "JsTemplates",
                "--replace",
                "--prune",
            ],
        )

        assert result.exit_code == 0, result.output
        assert (dest / "public" / "version.js").read_text() == "v = '2.5';\n"
        assert not (dest / "public" / "version.js.tt").exists()
        assert (dest / "greeting.txt.tt").exists()
        assert not (dest / "greeting.txt").exists()

    def test_manifest(self, source, tmp_path):
        (source / "distrender.yaml").write_text(
            "name: Demo\n"
            "version: 3.0\n"
            "templates:\n"
            "  - var:\n"
            "      name: Manifest\n"
            "    prune: true\n"
            "    replace: true\n"
        )
        dest = tmp_path / "out"

        result = runner.invoke(app, ["build", str(source), "--dest", str(dest)])

        assert result.exit_code == 0, result.output
        assert (dest / "greeting.txt").read_text() == "Hello Manifest"
        assert (dest / "public" / "version.js").read_text() == "v = '3.0';\n"
        assert not (dest / "greeting.txt.tt").exists()

    def test_manifest_templates_override_options(self, source, tmp_path, caplog):
        (source / "distrender.yaml").write_text(
            "name: Demo\n"
            "templates:\n"
            "  - var: name = Manifest\n"
            "    replace: true\n"
        )
        dest = tmp_path / "out"

        with caplog.at_level(logging.WARNING, logger="distrender"):
            result = runner.invoke(
                app,
                ["build", str(source), "--dest", str(dest), "--var", "name = Cli", "--prune"],
            )

        assert result.exit_code == 0, result.output
        assert (dest / "greeting.txt").read_text() == "Hello Manifest"
        assert (dest / "greeting.txt.tt").exists()
        assert "ignoring --var, --prune" in caplog.text

    def test_manifest_without_options_does_not_warn(self, source, tmp_path, caplog):
        (source / "distrender.yaml").write_text(
            "name: Demo\ntemplates:\n  - replace: true\n"
        )

        with caplog.at_level(logging.WARNING, logger="distrender"):
            result = runner.invoke(
                app, ["build", str(source), "--dest", str(tmp_path / "out")]
            )

        assert result.exit_code == 0, result.output
        assert "ignoring" not in caplog.text

    def test_method_needing_arguments_fails(self, source, tmp_path):
        (source / "lookup.txt.tt").write_text("[% dist.find_by_name %]")
        result = runner.invoke(
            app, ["build", str(source), "--dest", str(tmp_path / "out"), "--replace"]
        )
        assert result.exit_code == 1
        assert not isinstance(result.exception, TypeError)

    def test_dry_run(self, source, tmp_path):
        dest = tmp_path / "out"
        result = runner.invoke(
            app, ["build", str(source), "--dest", str(dest), "--prune", "--replace", "--dry-run"]
        )

        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert "greeting.txt" in lines
        assert "greeting.txt.tt" not in lines
        assert not dest.exists()

    def test_duplicate_output_fails(self, source, tmp_path):
        result = runner.invoke(
            app, ["build", str(source), "--dest", str(tmp_path / "out")]
        )
        # public/version.js exists and replace is off
        assert result.exit_code == 1

    def test_invalid_output_regex(self, source, tmp_path):
        result = runner.invoke(
            app,
            ["build", str(source), "--dest", str(tmp_path / "out"), "--output-regex", "nope"],
        )
        assert result.exit_code == 2

    def test_unknown_finder(self, source, tmp_path):
        result = runner.invoke(
            app,
            ["build", str(source), "--dest", str(tmp_path / "out"), "--finder", "Missing"],
        )
        assert result.exit_code == 1

    def test_missing_source(self, tmp_path):
        result = runner.invoke(app, ["build", str(tmp_path / "nope")])
        assert result.exit_code == 2


class TestRender:
    """Tests for the render command."""

    def test_render(self, source):
        result = runner.invoke(
            app, ["render", str(source / "greeting.txt.tt"), "--var", "name=You"]
        )
        assert result.exit_code == 0, result.output
        assert result.stdout == "Hello You"

    def test_render_metadata(self, source):
        result = runner.invoke(
            app,
            ["render", str(source / "public" / "version.js.tt"), "--version", "9.9"],
        )
        assert result.exit_code == 0, result.output
        assert result.stdout == "v = '9.9';\n"

    def test_render_syntax_error(self, tmp_path):
        template = tmp_path / "bad.tt"
        template.write_text("[% IF x %]")
        result = runner.invoke(app, ["render", str(template)])
        assert result.exit_code == 1

    def test_render_missing_template(self, tmp_path):
        result = runner.invoke(app, ["render", str(tmp_path / "missing.tt")])
        assert result.exit_code == 2
