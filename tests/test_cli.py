"""Tests for the flowversion command line interface."""

import json

import pytest
from click.testing import CliRunner

from flowversion.app import AppContext
from flowversion.main import cli


@pytest.fixture
def run(tmp_path, monkeypatch):
    """Invoke the CLI from an empty working directory."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.delenv("FALLBACK_BRANCH", raising=False)
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli, list(args), obj=AppContext())

    return _run


class TestResolve:
    def test_json(self, run, repo_builder):
        builder = repo_builder().commit().tag("v1.4.0").branch("develop").commit(7)
        result = run("resolve", "-C", str(builder.path), "--json")
        assert result.exit_code == 0, result.output
        record = json.loads(result.output)
        assert record["VERSION_STRING"] == "1.5-alpha.7"
        assert record["VERSION_BRANCH"] == "develop"
        assert record["VERSION_FULLHASH"] == builder.head_sha
        assert record["VERSION_SUCCESS"] is True

    def test_text(self, run, repo_builder):
        builder = repo_builder().commit().tag("v1.4.2").commit(3)
        result = run("resolve", "--directory", str(builder.path))
        assert result.exit_code == 0, result.output
        assert "Version:   1.4.2-3" in result.output
        assert "Branch:    master" in result.output
        assert "Flag:      (none)" in result.output

    def test_markdown(self, run, repo_builder):
        builder = repo_builder().commit().tag("v1.4.0")
        result = run("resolve", "-C", str(builder.path), "--md")
        assert result.exit_code == 0, result.output
        assert "| Version | `1.4` |" in result.output

    def test_env(self, run, repo_builder):
        builder = repo_builder().commit().tag("v1.4.0").make_dirty()
        result = run("resolve", "-C", str(builder.path), "--format", "env")
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert "VERSION_STRING=1.4" in lines
        assert "VERSION_FLAG=" in lines
        assert "VERSION_ISDIRTY=1" in lines
        assert "VERSION_SUCCESS=1" in lines

    def test_custom_version_option(self, run, repo_builder):
        builder = repo_builder().commit().tag("v0.1.0")
        result = run("resolve", "-C", str(builder.path), "--custom-version", "80.11.4", "--json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["VERSION_STRING"] == "80.11.4"

    def test_invalid_custom_version(self, run, repo_builder):
        builder = repo_builder().commit()
        result = run("resolve", "-C", str(builder.path), "--custom-version", "latest")
        assert result.exit_code != 0
        assert "Invalid custom_version" in result.output

    def test_fallback_branch_option(self, run, repo_builder):
        builder = repo_builder().commit().tag("v1.4.0").commit().detach()
        result = run(
            "resolve", "-C", str(builder.path), "--fallback-branch", "develop", "--json"
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["VERSION_STRING"] == "1.5-alpha.1"

    def test_configured_targets(self, run, repo_builder):
        builder = repo_builder().commit().tag("v1.4.0")
        with open(".flowversion.yaml", "w") as f:
            f.write(
                "targets:\n"
                f"  app:\n    directory: {builder.path}\n"
                f"  legacy:\n    directory: {builder.path}\n    custom_version: 80.11.4\n"
            )
        result = run("resolve", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["app"]["VERSION_STRING"] == "1.4"
        assert data["legacy"]["VERSION_STRING"] == "80.11.4"

        result = run("resolve", "legacy", "--format", "env")
        assert "LEGACY_VERSION_STRING=80.11.4" in result.output.splitlines()

    def test_unknown_target(self, run):
        result = run("resolve", "missing")
        assert result.exit_code != 0
        assert "Unknown target 'missing'" in result.output

    def test_missing_config_file(self, run):
        result = run("--config", "missing.yaml", "resolve")
        assert result.exit_code != 0
        assert "Config file not found" in result.output


class TestString:
    def test_prints_version_string(self, run, repo_builder):
        builder = repo_builder().commit().tag("v1.4.0").branch("release/2.0").commit(3)
        result = run("string", "-C", str(builder.path))
        assert result.exit_code == 0, result.output
        assert result.output.strip().splitlines()[-1] == "2.0-rc.3"


class TestArchiveCommands:
    def test_init_archive(self, run, repo_builder):
        builder = repo_builder().commit()
        with open(".flowversion.yaml", "w") as f:
            f.write(f"directory: {builder.path}\n")
        result = run("init-archive")
        assert result.exit_code == 0, result.output
        assert (builder.path / ".flowversion-export").exists()
        assert "export-subst" in (builder.path / ".gitattributes").read_text()

    def test_export_record(self, run, repo_builder, tmp_path):
        builder = repo_builder().commit().tag("v1.4.0").commit(2)
        output = tmp_path / "record.json"
        with open(".flowversion.yaml", "w") as f:
            f.write(f"directory: {builder.path}\n")
        result = run("export-record", "--output", str(output))
        assert result.exit_code == 0, result.output
        assert "Wrote 1.4-2" in result.output
        data = json.loads(output.read_text())
        assert data["VERSION_STRING"] == "1.4-2"
        assert data["VERSION_SUCCESS"] is True


class TestSingleTarget:
    def write_targets(self, *directories):
        with open(".flowversion.yaml", "w") as f:
            f.write("targets:\n")
            for index, directory in enumerate(directories):
                f.write(f"  app{index}:\n    directory: {directory}\n")

    def test_export_record_uses_target_directory(self, run, repo_builder):
        builder = repo_builder().commit().tag("v1.4.0").commit(2)
        self.write_targets(builder.path)
        result = run("export-record")
        assert result.exit_code == 0, result.output
        record = builder.path / ".flowversion-archive.json"
        assert record.exists()
        assert json.loads(record.read_text())["VERSION_STRING"] == "1.4-2"

    def test_string_with_single_target(self, run, repo_builder):
        builder = repo_builder().commit().tag("v1.4.0")
        self.write_targets(builder.path)
        result = run("string")
        assert result.exit_code == 0, result.output
        assert result.output.strip().splitlines()[-1] == "1.4"

    def test_several_targets_need_a_name(self, run, repo_builder):
        first = repo_builder("first").commit().tag("v1.4.0")
        second = repo_builder("second").commit().tag("v2.0.0")
        self.write_targets(first.path, second.path)

        result = run("string")
        assert result.exit_code != 0
        assert "app0, app1" in result.output

        result = run("string", "app1")
        assert result.exit_code == 0, result.output
        assert result.output.strip().splitlines()[-1] == "2.0"
