"""
Command line entry point.

Usage:
    hyprgrid PRESET POSITION
    hyprgrid --apply PRESET:POSITION
    hyprgrid --reset | --config | --test
"""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from pubsub import pub

from . import __version__
from .compositor import HyprctlClient
from .config import ConfigError, load_config
from .manager import GridManager

logger = logging.getLogger(__name__)

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hyprgrid",
        description="Window grid manager for Hyprland",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("preset", nargs="?", help="Preset name")
    parser.add_argument("position", nargs="?", help="Position code within the preset")
    parser.add_argument(
        "-a", "--apply", metavar="PRESET:POSITION",
        help="Apply a window position from a preset",
    )
    parser.add_argument(
        "-r", "--reset", action="store_true", help="Reset window state and clear rules"
    )
    parser.add_argument(
        "-c", "--config", action="store_true", help="Print current configuration"
    )
    parser.add_argument(
        "-t", "--test", action="store_true",
        help="Test all grid positions by cycling through them",
    )
    parser.add_argument("--config-file", type=Path, help="Read configuration from this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def debug_event_logger(topic=pub.AUTO_TOPIC, **kwargs):
    """Log all events published on the event bus."""
    data_str = ", ".join(f"{k}={v}" for k, v in kwargs.items() if k != "topic")
    logger.debug(f"EVENT: {topic.getName()} | {data_str}")


def setup_logging(level_name: str, verbose: bool = False):
    level = logging.DEBUG if verbose else LEVELS.get(level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv: Optional[List[str]] = None, client=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config_file)
    except ConfigError as e:
        setup_logging("error")
        logger.error(f"Failed to load configuration: {e}")
        return 1

    setup_logging(config.advanced.log_level, args.verbose)

    if os.getenv("HYPRGRID_DEBUG"):
        pub.subscribe(debug_event_logger, pub.ALL_TOPICS)

    manager = GridManager(bus=pub, client=client or HyprctlClient(), config=config)

    if args.config:
        print(manager.config_json())
        return 0

    if not manager.initialize():
        logger.error("Failed to initialize grid manager")
        return 1

    if args.reset:
        return 0 if manager.reset_window_state() else 1

    if args.apply:
        parts = args.apply.split(":")
        if len(parts) != 2:
            logger.error("Invalid apply format. Use preset:position")
            return 1
        return 0 if manager.apply_position_by_code(parts[0], parts[1]) else 1

    if args.test:
        return 0 if manager.test_all_positions() else 1

    if args.preset and args.position:
        return 0 if manager.apply_position_by_code(args.preset, args.position) else 1

    logger.error("Invalid format. Use: hyprgrid <preset> <position>")
    logger.error("Example: hyprgrid default top-left")
    return 1


if __name__ == "__main__":
    sys.exit(main())
