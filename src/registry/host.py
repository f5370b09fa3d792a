"""Registry host - supplies caller identity and height to each call.

The registry never reads ambient context. A host wraps one registry,
keeps the current height, and dispatches operations by name so that
scenario files and other front ends can drive it.

Usage:
    host = RegistryHost(StoryRegistry())
    host.call("register_verifier", "ST1ADMIN", verifier="ST2VERIFIER")
    result = host.call("mint", "ST1ALICE", height=5, story_hash="01" * 32, ...)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .story_registry import StoryRegistry

logger = logging.getLogger(__name__)


@dataclass
class HostOperation:
    """An operation the host can dispatch."""
    name: str
    handler: Callable[..., dict[str, Any]]
    description: str


class RegistryHost:
    """Drives a StoryRegistry with explicit callers and a monotonic height."""

    registry: StoryRegistry
    height: int
    operations: dict[str, HostOperation]

    def __init__(self, registry: StoryRegistry, start_height: int = 0) -> None:
        self.registry = registry
        self.height = start_height
        self.operations = {}

        self.register_operation(
            "register_verifier", registry.register_verifier,
            "Register the verifier (once)",
        )
        self.register_operation(
            "set_mint_fee", registry.set_mint_fee,
            "Change the mint fee (needs a verifier)",
        )
        self.register_operation(
            "set_royalty_rate", registry.set_royalty_rate,
            "Change the default royalty rate (needs a verifier)",
        )
        self.register_operation("mint", registry.mint, "Mint a story token")
        self.register_operation(
            "update_metadata", registry.update_metadata,
            "Replace a token's metadata and art URI",
        )
        self.register_operation(
            "transfer", registry.transfer,
            "Transfer a token, charging the royalty to the new owner",
        )
        self.register_operation(
            "add_milestone", registry.add_milestone,
            "Record a milestone on a token",
        )

    def register_operation(
        self,
        name: str,
        handler: Callable[..., dict[str, Any]],
        description: str = "",
    ) -> None:
        self.operations[name] = HostOperation(name=name, handler=handler, description=description)

    def list_operations(self) -> list[dict[str, str]]:
        return [{"name": op.name, "description": op.description} for op in self.operations.values()]

    def advance(self, height: int | None = None) -> int:
        """Move to ``height``, or one past the current height if None.

        Raises:
            ValueError: If ``height`` is below the current height.
        """
        if height is None:
            self.height += 1
        elif height < self.height:
            raise ValueError(f"Height cannot go backwards: {height} < {self.height}")
        else:
            self.height = height
        return self.height

    def call(self, operation: str, caller: str, height: int | None = None, **args: Any) -> dict[str, Any]:
        """Run one registry operation as ``caller``.

        A hex string story_hash is decoded to bytes. Invalid hex is passed
        through unchanged so the registry reports it as a bad hash.

        Raises:
            KeyError: If the operation is unknown.
            ValueError: If ``height`` is below the current height.
        """
        op = self.operations.get(operation)
        if op is None:
            raise KeyError(f"Unknown operation '{operation}'. Known: {sorted(self.operations)}")

        current = self.advance(height)
        story_hash = args.get("story_hash")
        if isinstance(story_hash, str):
            try:
                args["story_hash"] = bytes.fromhex(story_hash)
            except ValueError:
                logger.debug("story_hash %r is not hex; passing it through", story_hash)

        result = op.handler(caller, current, **args)
        logger.debug("%s by %s at %d -> success=%s", operation, caller, current, result["success"])
        return result
