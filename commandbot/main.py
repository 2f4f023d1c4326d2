"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
from pathlib import Path
from typing import Sequence

from .chat_adapters.slack_adapter import SlackAdapter
from .core import Bot, CommandBotError, Config, ConfigError, TransportError, load_config
from .core.commands.sample import SampleCommandHandler

LOGGER = logging.getLogger(__name__)


def cli(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="commandbot",
        description="commandbot - answer pattern-based chat commands from your masters",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config-dir", help="Directory holding .env and bot.yaml")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", parents=[common], help="Connect and serve commands (default)")
    run_parser.add_argument(
        "--no-sample-commands",
        action="store_true",
        help="Only register the built-in help command",
    )

    init_parser = subparsers.add_parser("init", parents=[common], help="Write template configuration files")
    init_parser.add_argument("--account", help="Bot account id")
    init_parser.add_argument("--masters", help="Comma separated master ids")
    init_parser.add_argument("--public", action="store_true", help="Let non-masters use public commands")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing files")

    args = parser.parse_args(argv)

    if args.command == "init":
        # Import here to keep the daemon path light
        from .commands import run_init_command

        return run_init_command(args)

    with_samples = not getattr(args, "no_sample_commands", False)
    try:
        asyncio.run(_run_async(getattr(args, "config_dir", None), with_samples))
    except ConfigError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return 1
    except TransportError as exc:
        LOGGER.error("Transport failure: %s", exc)
        return 1
    except CommandBotError as exc:
        LOGGER.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user")
        return 130
    return 0


def build_bot(config: Config, with_samples: bool = True) -> Bot:
    if not config.slack_app_token:
        raise ConfigError("SLACK_APP_TOKEN is not set")
    bot = Bot(config, SlackAdapter(app_token=config.slack_app_token))
    if with_samples:
        SampleCommandHandler().register(bot.registry)
    return bot


async def _run_async(config_dir: str | Path | None, with_samples: bool) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(config_dir)

    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)
    logging.getLogger().setLevel(log_level)

    bot = build_bot(config, with_samples)
    LOGGER.info(
        "Loaded %s with %s master(s) and %s command pattern(s)",
        bot.name,
        len(bot.masters),
        len(bot.registry),
    )

    loop = asyncio.get_running_loop()
    shutdown_tasks = []

    def _request_shutdown() -> None:
        LOGGER.info("Shutdown requested")
        shutdown_tasks.append(loop.create_task(bot.disconnect()))

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_shutdown)
        except NotImplementedError:
            # Windows event loops before 3.11 do not support signal handlers.
            pass

    try:
        await bot.connect()
    finally:
        if shutdown_tasks:
            await asyncio.gather(*shutdown_tasks, return_exceptions=True)
        elif bot.transport.is_connected():
            try:
                await bot.disconnect()
            except TransportError:
                LOGGER.warning("Failed to notify masters during shutdown", exc_info=True)
    LOGGER.info("Shutdown complete")


if __name__ == "__main__":
    raise SystemExit(cli())
