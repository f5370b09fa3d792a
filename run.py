#!/usr/bin/env python3
"""
Story Registry - scenario runner

Usage:
    python run.py --scenario scenarios/demo.yaml
    python run.py --scenario s.yaml --checkpoint state.json   # save final state
    python run.py --scenario s.yaml --resume state.json       # continue from saved state
    python run.py --scenario s.yaml --events events.jsonl     # write the event log
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from src.config import get_validated_config, load_config
from src.registry import EventLogger, RegistryHost, StoryRegistry
from src.registry.checkpoint import restore_registry, save_checkpoint
from src.registry.scenario import load_scenario, run_scenario

# Load environment variables
load_dotenv()

logger = logging.getLogger("story_registry")


def _json_default(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.hex()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def main(argv: list[str] | None = None) -> int:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Replay a scenario against a story registry"
    )
    parser.add_argument(
        "--config", default="config/config.yaml", help="Path to config file"
    )
    parser.add_argument("--scenario", required=True, help="Scenario YAML file")
    parser.add_argument(
        "--checkpoint",
        type=str,
        default=None,
        help="Save the final registry state to this file",
    )
    parser.add_argument(
        "--resume",
        type=str,
        nargs="?",
        const="checkpoint.json",
        default=None,
        help="Resume from checkpoint file (default: checkpoint.json)",
    )
    parser.add_argument("--events", type=str, default=None, help="Override the events JSONL file")
    parser.add_argument("--quiet", action="store_true", help="Only print failures")
    args: argparse.Namespace = parser.parse_args(argv)

    load_config(args.config)
    config = get_validated_config()
    logging.basicConfig(
        level=config.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    event_logger = EventLogger.from_config(config.logging)
    if args.events:
        event_logger = EventLogger(
            output_file=args.events,
            buffer_size=config.logging.buffer_size,
            default_recent=config.logging.default_recent,
        )

    registry: StoryRegistry | None = None
    if args.resume:
        registry = restore_registry(args.resume, config=config.registry, event_logger=event_logger)
        if registry is None:
            logger.warning("Checkpoint file '%s' not found. Starting fresh.", args.resume)
    if registry is None:
        registry = StoryRegistry(config=config.registry, event_logger=event_logger)

    scenario = load_scenario(args.scenario)
    outcomes = run_scenario(scenario, RegistryHost(registry))

    failures = 0
    for outcome in outcomes:
        if not outcome["result"]["success"]:
            failures += 1
        elif args.quiet:
            continue
        print(json.dumps(outcome, default=_json_default))

    logger.info(
        "Replayed %d calls (%d failed); %d tokens minted",
        len(outcomes), failures, registry.settings.next_token_id,
    )

    if args.checkpoint:
        path = save_checkpoint(registry, args.checkpoint, reason="scenario_complete")
        logger.info("Checkpoint saved to %s", path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
