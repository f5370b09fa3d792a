"""Checkpoint save/load for registry state.

- Version 1: settings, tokens, royalties, milestones, owner index, intents
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, TypedDict

from ..config_schema import RegistryConfig
from .logger import EventLogger
from .story_registry import StoryRegistry

# Current checkpoint format version
CHECKPOINT_VERSION = 1


class CheckpointData(TypedDict):
    """Structure of a checkpoint file."""

    version: int
    state: dict[str, Any]
    reason: str
    timestamp: str


def save_checkpoint(registry: StoryRegistry, checkpoint_file: str | Path, reason: str) -> Path:
    """Save registry state to a checkpoint file.

    Uses atomic write (temp file + rename) so an interrupted save leaves
    the previous checkpoint intact.

    Args:
        registry: The registry to checkpoint
        checkpoint_file: Destination path
        reason: Why the checkpoint was taken (e.g., "scenario_complete")

    Returns:
        Path to the saved checkpoint file
    """
    path = Path(checkpoint_file)
    checkpoint: CheckpointData = {
        "version": CHECKPOINT_VERSION,
        "state": registry.export_state(),
        "reason": reason,
        "timestamp": datetime.now().isoformat(),
    }

    temp_file = path.with_name(path.name + ".tmp")
    with open(temp_file, "w") as f:
        json.dump(checkpoint, f, indent=2)

    # os.replace is atomic on POSIX
    os.replace(temp_file, path)
    return path


def load_checkpoint(checkpoint_file: str | Path) -> CheckpointData | None:
    """Load a checkpoint file.

    Returns:
        CheckpointData if the file exists, None otherwise.

    Raises:
        ValueError: If the checkpoint version is not supported.
    """
    path = Path(checkpoint_file)
    if not path.exists():
        return None

    with open(path) as f:
        data: dict[str, Any] = json.load(f)

    version = data.get("version")
    if version != CHECKPOINT_VERSION:
        raise ValueError(f"Unsupported checkpoint version: {version!r}")

    return {
        "version": version,
        "state": data["state"],
        "reason": data.get("reason", ""),
        "timestamp": data.get("timestamp", ""),
    }


def restore_registry(
    checkpoint_file: str | Path,
    config: RegistryConfig | None = None,
    event_logger: EventLogger | None = None,
) -> StoryRegistry | None:
    """Rebuild a registry from a checkpoint file, or None if it is missing."""
    checkpoint = load_checkpoint(checkpoint_file)
    if checkpoint is None:
        return None
    return StoryRegistry.from_state(checkpoint["state"], config=config, event_logger=event_logger)
