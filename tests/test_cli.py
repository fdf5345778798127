"""Tests for the cronguard CLI."""

from pathlib import Path

from typer.testing import CliRunner

from cronguard import __version__
from cronguard.cli import app

runner = CliRunner()


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestBackoffCommand:
    """Tests for `cronguard backoff`."""

    def test_default_schedule(self):
        result = runner.invoke(app, ["backoff"])
        assert result.exit_code == 0
        for delay in ("1000", "2000", "4000"):
            assert delay in result.output
        assert "8000" not in result.output

    def test_capped_schedule(self):
        result = runner.invoke(
            app, ["backoff", "--max-retries", "6", "--base-delay", "1000", "--max-delay", "5000"]
        )
        assert result.exit_code == 0
        assert "5000" in result.output
        assert "8000" not in result.output

    def test_zero_retries(self):
        result = runner.invoke(app, ["backoff", "--max-retries", "0"])
        assert result.exit_code == 0
        assert "No retries" in result.output

    def test_invalid_settings(self):
        result = runner.invoke(app, ["backoff", "--base-delay", "5000", "--max-delay", "1000"])
        assert result.exit_code == 1
        assert "Invalid retry settings" in result.output


class TestValidateCommand:
    """Tests for `cronguard validate`."""

    def test_valid_config(self, sample_yaml_config: Path):
        result = runner.invoke(app, ["validate", str(sample_yaml_config)])
        assert result.exit_code == 0
        assert "news-batch" in result.output

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["validate", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 2
        assert "File not found" in result.output

    def test_yaml_syntax_error(self, tmp_path: Path):
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("name: [unclosed\n")
        result = runner.invoke(app, ["validate", str(config_path)])
        assert result.exit_code == 2
        assert "YAML syntax error" in result.output

    def test_invalid_content(self, tmp_path: Path):
        config_path = tmp_path / "invalid.yaml"
        config_path.write_text("name: x\nretry:\n  max_retries: -1\n")
        result = runner.invoke(app, ["validate", str(config_path)])
        assert result.exit_code == 1
        assert "retry.max_retries" in result.output

    def test_non_utf8_file(self, tmp_path: Path):
        config_path = tmp_path / "binary.yaml"
        config_path.write_bytes(b"\xff\xfe\x00name")
        result = runner.invoke(app, ["validate", str(config_path)])
        assert result.exit_code == 2
        assert "Cannot read config" in result.output

    def test_directory_path(self, tmp_path: Path):
        result = runner.invoke(app, ["validate", str(tmp_path)])
        assert result.exit_code == 2
        assert "Cannot read config" in result.output
