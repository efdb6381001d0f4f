"""
Tests for configuration loading and the command-line front end.
"""

from pathlib import Path

import pytest

from bookingclient.cli import build_config, build_parser, run_command
from bookingclient.config import DEFAULT_API_BASE_URL, ClientConfig


class TestClientConfig:
    def test_defaults(self, monkeypatch):
        for name in ("BOOKING_API_BASE_URL", "BOOKING_AUTH_BASE_URL", "BOOKING_TIMEOUT", "BOOKING_LOGOUT_ON_401"):
            monkeypatch.delenv(name, raising=False)

        config = ClientConfig.from_env()

        assert config.api_base_url == DEFAULT_API_BASE_URL
        assert config.timeout == 15.0
        assert config.logout_on_unauthorized

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BOOKING_API_BASE_URL", "http://gateway:8080/")
        monkeypatch.setenv("BOOKING_TOKEN_FILE", str(tmp_path / "s.json"))
        monkeypatch.setenv("BOOKING_TIMEOUT", "3")
        monkeypatch.setenv("BOOKING_LOGOUT_ON_401", "no")
        monkeypatch.setenv("BOOKING_LOG_LEVEL", "debug")

        config = ClientConfig.from_env()

        assert config.api_base_url == "http://gateway:8080"
        assert config.token_file == tmp_path / "s.json"
        assert config.timeout == 3.0
        assert not config.logout_on_unauthorized
        assert config.log_level == "DEBUG"

    def test_invalid_timeout_falls_back(self, monkeypatch):
        monkeypatch.setenv("BOOKING_TIMEOUT", "soon")
        assert ClientConfig.from_env().timeout == 15.0

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValueError):
            ClientConfig(timeout=0)


class TestParser:
    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("BOOKING_API_BASE_URL", "http://env:1")
        args = build_parser().parse_args(
            ["--api-url", "http://flag:2", "--token-file", "/tmp/x.json", "--log-level", "warning", "whoami"]
        )

        config = build_config(args)

        assert config.api_base_url == "http://flag:2"
        assert config.token_file == Path("/tmp/x.json")
        assert config.log_level == "WARNING"

    def test_reserve_items(self):
        args = build_parser().parse_args(
            ["reserve", "--branch", "1", "--start", "a", "--end", "b", "--item", "5", "--item", "6:2"]
        )
        assert args.item == ["5", "6:2"]

    def test_admin_subcommands(self):
        args = build_parser().parse_args(["admin-requests", "approve", "4"])
        assert args.admin_action == "approve"
        assert args.request_id == 4


class TestRunCommand:
    """Commands against the fake platform."""

    async def test_branches(self, client, capsys):
        args = build_parser().parse_args(["branches"])

        assert await run_command(client, args) == 0
        assert "Centro" in capsys.readouterr().out

    async def test_login_then_whoami(self, client, capsys):
        await run_command(client, build_parser().parse_args(["login", "alice", "--password", "secret"]))
        await run_command(client, build_parser().parse_args(["whoami"]))

        out = capsys.readouterr().out
        assert "Logged in as alice" in out
        assert "ROLE_USER" in out

    async def test_gated_command_redirects(self, client, capsys, token_factory):
        client.session.login(token_factory(["ROLE_USER"], 7), "alice")

        assert await run_command(client, build_parser().parse_args(["my-branches"])) == 1
        assert "redirecting to /" in capsys.readouterr().out

    async def test_login_only_command_when_anonymous(self, client, capsys):
        assert await run_command(client, build_parser().parse_args(["reservations"])) == 1
        assert "redirecting to /login" in capsys.readouterr().out

    async def test_admin_list(self, client, platform, capsys, token_factory):
        client.session.login(token_factory(["ROLE_ADMIN"], 1), "root")
        platform.all_provider_requests = [{"id": 4, "userId": 10, "status": "PENDING"}]

        assert await run_command(client, build_parser().parse_args(["admin-requests", "list"])) == 0
        assert "#4" in capsys.readouterr().out
