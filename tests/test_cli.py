"""Tests for the command-line entry point."""

from unittest.mock import MagicMock, patch

import pytest

import switchbot_exporter.cli as cli
from switchbot_exporter.app import App
from switchbot_exporter.exceptions import SwitchBotApiException


def _clear_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.delenv("SWITCHBOT_OPENTOKEN", raising=False)
    monkeypatch.delenv("SWITCHBOT_SECRETKEY", raising=False)


class TestCreateParser:
    """Tests for the argument parser."""

    def test_defaults(self):
        args = cli.create_parser().parse_args([])

        assert args.listen_address == ":8080"
        assert args.open_token == ""
        assert args.secret_key == ""
        assert args.log_level == "INFO"

    def test_dotted_flags(self):
        args = cli.create_parser().parse_args(
            [
                "--web.listen-address=127.0.0.1:9000",
                "--switchbot.open-token=token",
                "--switchbot.secret-key=secret",
                "--log.level=DEBUG",
            ]
        )

        assert args.listen_address == "127.0.0.1:9000"
        assert args.open_token == "token"
        assert args.secret_key == "secret"
        assert args.log_level == "DEBUG"


class TestMain:
    """Tests for startup failures that must stop the process."""

    def test_missing_credentials_exit_with_code_1(self, monkeypatch: pytest.MonkeyPatch):
        _clear_credentials(monkeypatch)
        monkeypatch.setattr("sys.argv", ["switchbot-exporter"])
        create_app = MagicMock()
        monkeypatch.setattr(cli, "create_app", create_app)

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 1
        create_app.assert_not_called()

    def test_initial_load_failure_exits_with_code_1(self, monkeypatch: pytest.MonkeyPatch):
        _clear_credentials(monkeypatch)
        monkeypatch.setattr(
            "sys.argv",
            ["switchbot-exporter", "--switchbot.open-token=t", "--switchbot.secret-key=s"],
        )
        monkeypatch.setattr(
            cli, "create_app", MagicMock(side_effect=SwitchBotApiException("unauthorized"))
        )
        serve = MagicMock()
        monkeypatch.setattr(cli, "serve", serve)

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 1
        serve.assert_not_called()

    def test_exit_code_comes_from_serve(self, monkeypatch: pytest.MonkeyPatch):
        _clear_credentials(monkeypatch)
        monkeypatch.setattr(
            "sys.argv",
            ["switchbot-exporter", "--switchbot.open-token=t", "--switchbot.secret-key=s"],
        )
        monkeypatch.setattr(cli, "create_app", MagicMock())
        monkeypatch.setattr(cli, "serve", MagicMock(return_value=0))

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 0


class TestServe:
    """Tests for the production server runner."""

    def test_listen_failure_returns_1(self, app: App, test_settings):
        production_settings = test_settings.model_copy(update={"flask_env": "production"})

        with patch.object(app.container.lifecycle_coordinator(), "initialize"), \
             patch.object(app.container.reload_coordinator(), "initialize"), \
             patch.object(cli, "create_server", side_effect=OSError("address in use")):
            assert cli.serve(app, production_settings) == 1

    def test_shutdown_closes_server_and_returns_0(self, app: App, test_settings):
        production_settings = test_settings.model_copy(update={"flask_env": "production"})
        lifecycle_coordinator = app.container.lifecycle_coordinator()
        server = MagicMock()
        server.run.side_effect = lambda: lifecycle_coordinator.shutdown()

        with patch.object(lifecycle_coordinator, "initialize"), \
             patch.object(app.container.reload_coordinator(), "initialize"), \
             patch.object(cli, "create_server", return_value=server):
            assert cli.serve(app, production_settings) == 0

        server.close.assert_called_once()
        assert not app.container.reload_coordinator().is_running

    def test_non_production_uses_flask_dev_server(self, app: App, test_settings):
        with patch.object(app.container.lifecycle_coordinator(), "initialize"), \
             patch.object(app.container.reload_coordinator(), "initialize"), \
             patch.object(app, "run") as run, \
             patch.object(cli, "create_server") as create_server:
            assert cli.serve(app, test_settings) == 0

        run.assert_called_once_with(host="127.0.0.1", port=0, debug=True, use_reloader=False)
        create_server.assert_not_called()
