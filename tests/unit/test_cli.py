"""
Unit tests for CLI commands.
"""
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from lightspeed.cli import _handle_command, app
from lightspeed.enums import AttachmentType

runner = CliRunner()


class TestVersionCommand:
    """Tests for version command."""

    def test_version_displays_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Lightspeed version 0.1.0" in result.stdout


class TestResolveCommand:
    """Tests for resolve command."""

    def test_resource_page(self):
        result = runner.invoke(app, ["resolve", "/k8s/ns/default/deployments/web"])

        assert result.exit_code == 0
        assert "Deployment" in result.stdout
        assert "web" in result.stdout
        assert "default" in result.stdout

    def test_alert_page(self):
        result = runner.invoke(app, ["resolve", "/monitoring/alerts/42", "--query", "alertname=Watchdog"])

        assert result.exit_code == 0
        assert "Alert" in result.stdout
        assert "Watchdog" in result.stdout

    def test_nothing_in_view(self):
        result = runner.invoke(app, ["resolve", "/dashboards"])

        assert result.exit_code == 1


class TestChatCommands:
    """Tests for slash commands in the chat loop."""

    def test_attach_uses_alias(self):
        panel = MagicMock()
        panel.attach_error = None
        panel.toggle_attachment.return_value = True

        _handle_command(panel, "/attach status")

        panel.toggle_attachment.assert_called_once_with(AttachmentType.YAML_STATUS)

    def test_navigate_splits_query(self):
        panel = MagicMock()

        _handle_command(panel, "/navigate /monitoring/alerts/1?alertname=Watchdog")

        panel.navigate.assert_called_once_with("/monitoring/alerts/1", "alertname=Watchdog")

    def test_new_chat(self):
        panel = MagicMock()

        _handle_command(panel, "/new")

        panel.new_chat.assert_called_once()

    @patch("lightspeed.cli.asyncio.run")
    def test_feedback(self, mock_run):
        panel = MagicMock()
        feedback = panel.feedback.return_value
        mock_run.return_value = True

        _handle_command(panel, "/feedback 1 down wrong namespace")

        panel.feedback.assert_called_with(1)
        feedback.thumbs_down.assert_called_once()
        feedback.set_text.assert_called_once_with("wrong namespace")
