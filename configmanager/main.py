#!/usr/bin/env python3
"""
Configuration Manager Runner

Loads a YAML config, starts a manager against the remote service and
keeps polling until SIGINT/SIGTERM.

Usage:
    configmanager --config config.yaml
    configmanager --config config.yaml --once     # print snapshot and exit
"""

import argparse
import asyncio
import json
import signal
import sys

from configmanager.client.app_config import AppConfigurationClient
from configmanager.common.config import ManagerConfig, find_config_path, load_config_file
from configmanager.common.exceptions import ConfigManagerError
from configmanager.common.logging_setup import ServiceLoggerAdapter, get_service_logger
from configmanager.manager.builder import ConfigManagerBuilder
from configmanager.manager.parser import ParsedEntry


class Runner:
    """Owns the client and manager for the lifetime of the process."""

    def __init__(self, config: ManagerConfig, logger: ServiceLoggerAdapter):
        self.config = config
        self.logger = logger
        self._shutdown_event = asyncio.Event()

    def _on_update(self, entries: list[ParsedEntry]) -> None:
        keys = [entry.key for entry in entries]
        self.logger.info(
            f"{self.config.name}: configuration updated ({len(entries)} entries)",
            extra={"manager": self.config.name, "keys": keys},
        )

    def _builder(self, client: AppConfigurationClient) -> ConfigManagerBuilder:
        return (
            ConfigManagerBuilder.create_config_manager(client)
            .set_filters(self.config.filters)
            .set_polling_interval(self.config.polling_interval_s)
            .set_sentinel_config_key(self.config.sentinel)
            .set_logger(self.logger)
            .set_on_update_listener(self._on_update)
        )

    async def run_once(self) -> list[dict]:
        """Single refresh without polling."""
        async with AppConfigurationClient.from_settings(self.config.client) as client:
            manager = await self._builder(client).set_polling_interval(None).start(self.config.name)
            return [entry.to_dict() for entry in manager.get_configurations()]

    async def run(self) -> None:
        async with AppConfigurationClient.from_settings(self.config.client) as client:
            async with await self._builder(client).start(self.config.name) as manager:
                if not manager.is_polling:
                    self.logger.info("Polling disabled, initial refresh complete")
                    return

                self._setup_signal_handlers()
                await self._shutdown_event.wait()

        self.logger.info("Configuration manager stopped")

    def _setup_signal_handlers(self) -> None:
        """Setup graceful shutdown signal handlers"""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self._handle_shutdown)
            except NotImplementedError:
                # Windows doesn't support add_signal_handler
                signal.signal(sig, lambda s, f: self._handle_shutdown())

    def _handle_shutdown(self) -> None:
        self.logger.info("Received shutdown signal")
        self._shutdown_event.set()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Poll remote configuration and feature flags"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to configuration file (default: $CONFIGMANAGER_CONFIG or config.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override the configured log level (DEBUG, INFO, ...)"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Refresh once, print the snapshot as JSON and exit"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config_file(args.config or find_config_path())
    except ConfigManagerError as e:
        print(e.message, file=sys.stderr)
        return 2

    logger = get_service_logger(
        "runner",
        log_level=args.log_level or config.logging.level,
        json_format=config.logging.json_format,
    )
    runner = Runner(config, logger)

    try:
        if args.once:
            entries = asyncio.run(runner.run_once())
            print(json.dumps(entries, indent=2, default=str))
        else:
            asyncio.run(runner.run())
    except ConfigManagerError as e:
        logger.error(f"Runner failed: {e.message}")
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped by user")

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
