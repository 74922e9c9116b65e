"""Tests for the command-line launcher."""

import json
from unittest.mock import patch

from snake_channel.cli import _build_parser, _config_from_args, main
from snake_channel.config import ServerConfig


class TestCLIParser:
    def test_no_command_returns_1(self):
        assert main([]) == 1

    def test_serve_defaults(self):
        args = _build_parser().parse_args(["serve"])
        assert args.command == "serve"
        assert args.config is None
        assert args.tick_ms is None
        assert _config_from_args(args) == ServerConfig()

    def test_serve_flags_override_config_file(self, tmp_path):
        path = tmp_path / "cfg.json"
        ServerConfig(grid_size=32, port=9000).save(path)
        args = _build_parser().parse_args([
            "serve", "--config", str(path), "--tick-ms", "100", "--seed", "3",
        ])
        cfg = _config_from_args(args)
        assert cfg.grid_size == 32
        assert cfg.port == 9000
        assert cfg.tick_interval_ms == 100
        assert cfg.seed == 3


class TestCLICommands:
    def test_write_config(self, tmp_path):
        out = tmp_path / "server.json"
        assert main(["write-config", str(out)]) == 0
        assert json.loads(out.read_text())["grid_size"] == 16

    def test_serve_invokes_uvicorn(self):
        with patch("uvicorn.run") as run:
            assert main(["serve", "--port", "8123", "--grid-size", "32"]) == 0
        run.assert_called_once()
        _, kwargs = run.call_args
        assert kwargs["port"] == 8123
        assert kwargs["host"] == "127.0.0.1"

    def test_serve_rejects_bad_config(self):
        with patch("uvicorn.run") as run:
            assert main(["serve", "--grid-size", "100"]) == 2
        run.assert_not_called()
