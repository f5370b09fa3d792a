"""Scenario files - scripted call sequences replayed through a RegistryHost.

A scenario is YAML:

    start_height: 0
    calls:
      - op: register_verifier
        caller: ST1ADMIN
        args: {verifier: ST2VERIFIER}
      - op: mint
        caller: ST1ALICE
        height: 10
        args:
          story_hash: "0101...01"   # 32 bytes as hex
          art_uri: ipfs://art
          ...

Calls without a height run one past the previous call.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field

from ..config_schema import StrictModel
from .host import RegistryHost


class ScenarioCall(StrictModel):
    """One operation in a scenario."""

    op: str = Field(description="Host operation name")
    caller: str = Field(min_length=1, description="Identity making the call")
    height: int | None = Field(default=None, ge=0, description="Height of the call")
    args: dict[str, Any] = Field(default_factory=dict)


class Scenario(StrictModel):
    """A sequence of calls against a fresh or restored registry."""

    start_height: int = Field(default=0, ge=0)
    calls: list[ScenarioCall] = Field(default_factory=list)


def load_scenario(path: str | Path) -> Scenario:
    """Load and validate a scenario file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If the scenario is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return Scenario.model_validate(raw)


def run_scenario(scenario: Scenario, host: RegistryHost) -> list[dict[str, Any]]:
    """Replay every call; returns one entry per call, in order.

    Entries hold the call's op, caller, height and result. Domain failures
    are results, not exceptions; host errors (unknown op, height going
    backwards) propagate.
    """
    if host.height < scenario.start_height:
        host.advance(scenario.start_height)

    outcomes: list[dict[str, Any]] = []
    for call in scenario.calls:
        result = host.call(call.op, call.caller, call.height, **call.args)
        outcomes.append({
            "op": call.op,
            "caller": call.caller,
            "height": host.height,
            "result": result,
        })
    return outcomes
