"""Command-line launcher for the Snake Channel server."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from snake_channel.config import ServerConfig

logger = logging.getLogger(__name__)

# CLI flag name -> ServerConfig field.
_FLAG_MAP = {
    "host": "host",
    "port": "port",
    "tick_ms": "tick_interval_ms",
    "grid_size": "grid_size",
    "snake_length": "initial_snake_length",
    "seed": "seed",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snake-channel",
        description="Authoritative multiplayer snake session server.",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- serve ---
    serve_p = sub.add_parser("serve", help="Run the session server.")
    serve_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON config file; flags override its values.",
    )
    serve_p.add_argument("--host", type=str, default=None)
    serve_p.add_argument("--port", type=int, default=None)
    serve_p.add_argument(
        "--tick-ms", type=int, default=None,
        help="Tick period and receive timeout in milliseconds.",
    )
    serve_p.add_argument("--grid-size", type=int, default=None)
    serve_p.add_argument("--snake-length", type=int, default=None)
    serve_p.add_argument("--seed", type=int, default=None)

    # --- write-config ---
    write_p = sub.add_parser(
        "write-config", help="Write the default config as JSON.",
    )
    write_p.add_argument("output", help="Destination path.")

    return parser


def _config_from_args(args: argparse.Namespace) -> ServerConfig:
    config = ServerConfig.load(args.config) if args.config else ServerConfig()
    overrides = {
        cfg_name: getattr(args, cli_name)
        for cli_name, cfg_name in _FLAG_MAP.items()
        if getattr(args, cli_name, None) is not None
    }
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from snake_channel.server.app import create_app

    try:
        config = _config_from_args(args)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    logger.info(
        "Serving on %s:%d (grid %d, tick %d ms).",
        config.host, config.port, config.grid_size, config.tick_interval_ms,
    )
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=args.log_level.lower(),
    )
    return 0


def _run_write_config(args: argparse.Namespace) -> int:
    ServerConfig().save(args.output)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``snake-channel`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "serve": _run_serve,
        "write-config": _run_write_config,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
