"""Tests for the presets CLI commands."""

import json

import yaml
from typer.testing import CliRunner

from sqlpolish.cli.commands.presets import presets_app
from sqlpolish.cli.main import app


class TestPresetsListCommand:
    """Test the 'sqlpolish presets list' command."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_list_presets(self):
        """Test the preset table."""
        result = self.runner.invoke(presets_app, ["list"])
        assert result.exit_code == 0
        assert "Available presets (5)" in result.output
        assert "ssms" in result.output
        assert "compact" in result.output

    def test_list_presets_quiet_mode(self):
        """Test names-only output."""
        result = self.runner.invoke(presets_app, ["list", "--quiet"])
        assert result.exit_code == 0
        assert result.output.split() == [
            "compact",
            "default",
            "leading_commas",
            "lowercase",
            "ssms",
        ]

    def test_list_through_main_app(self):
        """Test that the group is mounted on the main app."""
        result = self.runner.invoke(app, ["presets", "list", "-q"])
        assert result.exit_code == 0
        assert "default" in result.output


class TestPresetsShowCommand:
    """Test the 'sqlpolish presets show' command."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_show_yaml(self):
        """Test the default YAML output."""
        result = self.runner.invoke(presets_app, ["show", "ssms"])
        assert result.exit_code == 0
        options = yaml.safe_load(result.output)
        assert options["use_as_keyword"] is True
        assert options["join_keyword_style"] == "full"
        assert options["indent_size"] == 4

    def test_show_json(self):
        """Test JSON output."""
        result = self.runner.invoke(presets_app, ["show", "lowercase", "--format", "json"])
        assert result.exit_code == 0
        options = json.loads(result.output)
        assert options["keyword_case"] == "lower"
        assert options["comma_position"] == "trailing"

    def test_show_unknown_preset(self):
        """Test a missing preset."""
        result = self.runner.invoke(presets_app, ["show", "ssm"])
        assert result.exit_code == 1
        assert "Preset 'ssm' not found" in result.output
        assert "Did you mean: ssms" in result.output

    def test_show_unsupported_format(self):
        """Test an unknown output format."""
        result = self.runner.invoke(presets_app, ["show", "default", "--format", "xml"])
        assert result.exit_code == 1
        assert "Unsupported output format" in result.output
