"""Tests for the command line interface."""

import pytest
from click.testing import CliRunner

from terradep.cli.main import cli

BACKEND = """
terraform {{
  backend "s3" {{
    bucket = "b"
    key    = "{key}"
    region = "eu-west-3"
  }}
}}
"""

REMOTE_STATE = """
data "terraform_remote_state" "{name}" {{
  backend = "s3"
  config = {{
    bucket = "b"
    key    = "{key}"
  }}
}}
"""


@pytest.fixture
def infra(tmp_path):
    """foundation and app, app depends on foundation."""
    (tmp_path / "infra" / "foundation").mkdir(parents=True)
    (tmp_path / "infra" / "foundation" / "main.tf").write_text(BACKEND.format(key="net/state"))
    (tmp_path / "infra" / "app").mkdir(parents=True)
    (tmp_path / "infra" / "app" / "main.tf").write_text(
        BACKEND.format(key="app/state") + REMOTE_STATE.format(name="net", key="net/state")
    )
    return tmp_path / "infra"


@pytest.fixture
def runner():
    return CliRunner()


class TestGraphCommand:
    """Tests for the graph command."""

    def test_dot_to_stdout(self, runner, infra):
        """Test DOT output is written to stdout."""
        result = runner.invoke(cli, ["graph", "--dir", str(infra)])

        assert result.exit_code == 0, result.output
        assert "digraph terradep {" in result.output
        assert 'label="s3://b/app/state"' in result.output
        assert 'label="s3://b/net/state"' in result.output
        assert "n0 -> n1;" in result.output

    def test_format(self, runner, infra):
        """Test another output format."""
        result = runner.invoke(cli, ["graph", "-d", str(infra), "--format", "mermaid"])

        assert result.exit_code == 0, result.output
        assert "flowchart LR" in result.output

    def test_s3_region_flag(self, runner, infra):
        """Test the region flag changes the states."""
        result = runner.invoke(cli, ["graph", "-d", str(infra), "--s3-region"])

        assert result.exit_code == 0, result.output
        assert "s3://b/app/state?region=eu-west-3" in result.output

    def test_out_file(self, runner, infra, tmp_path):
        """Test output is written to a new file."""
        out = tmp_path / "graph.dot"

        result = runner.invoke(cli, ["graph", "-d", str(infra), "--out", str(out)])

        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("digraph terradep {")

    def test_out_file_exists(self, runner, infra, tmp_path):
        """Test an existing file is not overwritten without --force."""
        out = tmp_path / "graph.dot"
        out.write_text("keep me")

        result = runner.invoke(cli, ["graph", "-d", str(infra), "--out", str(out)])

        assert result.exit_code == 1
        assert out.read_text() == "keep me"

    def test_out_file_force(self, runner, infra, tmp_path):
        """Test --force overwrites an existing file."""
        out = tmp_path / "graph.dot"
        out.write_text("old")

        result = runner.invoke(cli, ["graph", "-d", str(infra), "-o", str(out), "--force"])

        assert result.exit_code == 0, result.output
        assert "digraph terradep" in out.read_text()

    def test_out_file_unwritable(self, runner, infra, tmp_path):
        """Test a file that cannot be written is reported."""
        out = tmp_path / "missing" / "graph.dot"

        result = runner.invoke(cli, ["graph", "-d", str(infra), "-o", str(out)])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "graph.dot" in result.output
        assert not isinstance(result.exception, OSError)

    def test_dry_run(self, runner, infra, tmp_path):
        """Test --dry-run writes nothing."""
        out = tmp_path / "graph.dot"

        result = runner.invoke(cli, ["graph", "-d", str(infra), "-o", str(out), "--dry-run"])

        assert result.exit_code == 0, result.output
        assert not out.exists()
        assert "digraph" not in result.output

    def test_several_dirs(self, runner, infra):
        """Test graphs of several directories are merged."""
        result = runner.invoke(
            cli, ["graph", "-d", str(infra / "app"), "-d", str(infra / "foundation"), "--format", "jsonl"]
        )

        assert result.exit_code == 0, result.output
        assert '{"name": "s3://b/app/state", "children": [{"name": "s3://b/net/state"}]}' in result.output

    def test_missing_dir(self, runner, tmp_path):
        """Test a missing directory fails."""
        result = runner.invoke(cli, ["graph", "-d", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_dir_required(self, runner):
        """Test --dir is required."""
        result = runner.invoke(cli, ["graph"])

        assert result.exit_code == 2

    def test_duplicate_state(self, runner, infra):
        """Test two deployments with the same backend fail."""
        (infra / "copy").mkdir()
        (infra / "copy" / "main.tf").write_text(BACKEND.format(key="net/state"))

        result = runner.invoke(cli, ["graph", "-d", str(infra)])

        assert result.exit_code == 1
        assert "same state" in result.output

    def test_exclude(self, runner, infra):
        """Test --exclude skips a directory."""
        (infra / "copy").mkdir()
        (infra / "copy" / "main.tf").write_text(BACKEND.format(key="net/state"))

        result = runner.invoke(cli, ["graph", "-d", str(infra), "--exclude", "copy"])

        assert result.exit_code == 0, result.output

    def test_config_file(self, runner, infra, tmp_path):
        """Test settings from the configuration file."""
        config = tmp_path / "terradep.yml"
        config.write_text("s3:\n  include_region: true\n")

        result = runner.invoke(cli, ["--config", str(config), "graph", "-d", str(infra)])

        assert result.exit_code == 0, result.output
        assert "?region=eu-west-3" in result.output

    def test_flag_overrides_config_file(self, runner, infra, tmp_path):
        """Test an explicit flag wins over the configuration file."""
        config = tmp_path / "terradep.yml"
        config.write_text("s3:\n  include_region: true\n")

        result = runner.invoke(
            cli, ["--config", str(config), "graph", "-d", str(infra), "--no-s3-region"]
        )

        assert result.exit_code == 0, result.output
        assert "?region=" not in result.output

    def test_log_file(self, runner, infra, tmp_path):
        """Test logs are written to the given file."""
        log = tmp_path / "terradep.log"

        result = runner.invoke(cli, ["--log-file", str(log), "-v", "graph", "-d", str(infra)])

        assert result.exit_code == 0, result.output
        assert "loading deployment from path" in log.read_text()

    def test_log_file_unwritable(self, runner, infra, tmp_path):
        """Test a log file that cannot be opened is reported."""
        log = tmp_path / "missing" / "terradep.log"

        result = runner.invoke(cli, ["--log-file", str(log), "graph", "-d", str(infra)])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "terradep.log" in result.output
        assert not isinstance(result.exception, OSError)


class TestDeploymentsCommand:
    """Tests for the deployments command."""

    def test_table(self, runner, infra):
        """Test deployments are tabulated."""
        result = runner.invoke(cli, ["deployments", "-d", str(infra / "app")])

        assert result.exit_code == 0, result.output
        assert "Terraform Deployments" in result.output
        assert "s3://b/app/state" in result.output
        assert "external" in result.output

    def test_no_deployments(self, runner, tmp_path):
        """Test an empty tree."""
        result = runner.invoke(cli, ["deployments", "-d", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "No deployments found" in result.output


def test_version(runner):
    """Test --version."""
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "terradep" in result.output
