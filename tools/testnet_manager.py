#!/usr/bin/env python3
"""
Async SCION testnet manager.

Reads a testnet configuration, compiles it into the runtime model and
keeps the runtime listeners up until interrupted.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from scionsim.config import ConfigLoader
from scionsim.errors import ScionSimError
from scionsim.runtime import RuntimeSpec, ScionSimRuntime, compile_config, start_runtime

logger = logging.getLogger("scionsim.manager")

LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class AsyncTestnetManager:
    """Manager for the testnet runtime lifecycle."""

    def __init__(self, config_path: str | Path = "config.json"):
        self.config_path = Path(config_path)
        self.config_loader = ConfigLoader(self.config_path)
        self.spec: RuntimeSpec | None = None
        self.runtime: ScionSimRuntime | None = None
        self.running = False

    def load_config(self) -> RuntimeSpec:
        """Load and compile the configuration; any error aborts the load."""
        config = self.config_loader.load()
        self.spec = compile_config(config)
        return self.spec

    async def start(self) -> None:
        if self.spec is None:
            self.load_config()
        self.runtime = await start_runtime(self.spec)
        self.running = True

    async def stop(self) -> None:
        self.running = False
        if self.runtime:
            await self.runtime.stop()
            self.runtime = None
            logger.info("Runtime stopped")

    async def run(self) -> None:
        """Run manager loop until interrupted."""
        self.load_config()
        await self.start()
        logger.info("SCION testnet setup complete.")

        try:
            while self.running:
                await asyncio.sleep(1)
        finally:
            await self.stop()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="scionsim-configurator",
        description="Configure and run the SCION testnet simulator from a JSON file",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.json",
        help="Path to the configuration file",
    )
    parser.add_argument(
        "--log",
        dest="log_level",
        default="info",
        choices=sorted(LOG_LEVELS),
        help="Log level",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=LOG_LEVELS[args.log_level],
        format="[%(levelname)s] %(message)s",
    )

    manager = AsyncTestnetManager(args.config)
    try:
        asyncio.run(manager.run())
    except KeyboardInterrupt:
        logger.info("Received shutdown signal, stopping...")
    except OSError as e:
        logger.error("Failed to read config file %s: %s", args.config, e)
        return 1
    except ScionSimError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
