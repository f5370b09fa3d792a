"""End-to-end behavior of the story registry across operation sequences.

Covers the supply cap, authorization gate, immutable fields, royalty
snapshots and ownership index consistency, plus the reference
mint/transfer/milestone flows.
"""

from __future__ import annotations

import random
from typing import Any

import pytest

from src.config_schema import RegistryConfig
from src.registry.errors import ErrorKind
from src.registry.models import TransferIntent
from src.registry.story_registry import StoryRegistry

MINTER = "ST1TEST"
VERIFIER = "ST2TEST"

IMMUTABLE_FIELDS = ("story_hash", "recovery_goal", "milestone_count", "currency", "location", "group_id")


class TestSupplyCap:
    """Once next_token_id reaches max_tokens every mint fails unchanged."""

    @pytest.mark.parametrize("cap", [0, 1, 3])
    def test_cap_holds(self, mint_args: dict[str, Any], cap: int) -> None:
        registry = StoryRegistry(config=RegistryConfig(max_tokens=cap))
        registry.register_verifier(MINTER, 0, VERIFIER)

        for height in range(cap):
            assert registry.mint(MINTER, height, **mint_args)["success"]
        assert registry.settings.next_token_id == cap
        frozen = registry.export_state()

        for height in range(cap, cap + 5):
            result = registry.mint(MINTER, height, **mint_args)
            assert result["error"] == ErrorKind.MAX_TOKENS_EXCEEDED
            assert registry.export_state() == frozen


class TestAuthorizationGate:
    """Gated operations fail with NOT_AUTHORIZED iff no verifier exists."""

    def test_gate(self, registry: StoryRegistry, mint_args: dict[str, Any]) -> None:
        assert registry.mint(MINTER, 1, **mint_args)["error"] == ErrorKind.NOT_AUTHORIZED
        assert registry.set_mint_fee(MINTER, 1, 10)["error"] == ErrorKind.NOT_AUTHORIZED
        assert registry.set_royalty_rate(MINTER, 1, 5)["error"] == ErrorKind.NOT_AUTHORIZED

        assert registry.register_verifier(MINTER, 2, VERIFIER)["success"]

        assert registry.mint(MINTER, 3, **mint_args)["success"]
        assert registry.set_mint_fee(MINTER, 3, 10)["success"]
        assert registry.set_royalty_rate(MINTER, 3, 5)["success"]

    def test_register_exactly_once(self, registry: StoryRegistry) -> None:
        results = [registry.register_verifier(f"caller{i}", i, f"ver{i}") for i in range(5)]

        assert results[0]["success"]
        assert all(r["error"] == ErrorKind.ALREADY_AUTHORIZED for r in results[1:])
        assert registry.settings.verifier_contract == "ver0"


class TestImmutability:
    """Updates and transfers never touch the fields fixed at mint."""

    def test_random_sequence(self, verified_registry: StoryRegistry, mint_args: dict[str, Any]) -> None:
        rng = random.Random(7)
        owners = ["a", "b", "c"]
        verified_registry.mint("a", 0, **{**mint_args, "group_id": 4, "currency": "BTC"})
        original = verified_registry.get_token(0)

        for height in range(1, 60):
            owner = verified_registry.get_token(0).owner
            if rng.random() < 0.5:
                verified_registry.update_metadata(owner, height, 0, f"meta {height}", f"ipfs://{height}")
            else:
                verified_registry.transfer(owner, height, 0, rng.choice(owners))

            token = verified_registry.get_token(0)
            for field in IMMUTABLE_FIELDS:
                assert getattr(token, field) == getattr(original, field)


class TestRoyaltySnapshot:
    """Changing the default rate only affects later mints."""

    def test_snapshot(self, verified_registry: StoryRegistry, mint_args: dict[str, Any]) -> None:
        verified_registry.mint(MINTER, 1, **mint_args)
        verified_registry.set_royalty_rate(MINTER, 2, 15)
        verified_registry.mint(MINTER, 3, **mint_args)

        assert verified_registry.get_royalty(0).rate == 10
        assert verified_registry.get_royalty(1).rate == 15


class TestOwnershipIndex:
    """After a transfer the id leaves the old list and appears once in the new."""

    def test_consistency(self, verified_registry: StoryRegistry, mint_args: dict[str, Any]) -> None:
        rng = random.Random(11)
        people = ["a", "b", "c", "d"]
        for i, person in enumerate(people):
            verified_registry.mint(person, i, **mint_args)

        for height in range(10, 80):
            token_id = rng.randrange(4)
            old_owner = verified_registry.get_token(token_id).owner
            new_owner = rng.choice(people)
            assert verified_registry.transfer(old_owner, height, token_id, new_owner)["success"]

            if new_owner != old_owner:
                assert token_id not in verified_registry.get_tokens_by_owner(old_owner)
            assert verified_registry.get_tokens_by_owner(new_owner).count(token_id) == 1

        listed = sorted(t for p in people for t in verified_registry.get_tokens_by_owner(p))
        assert listed == [0, 1, 2, 3]


class TestReferenceFlows:
    def test_mint_records_fee(self, registry: StoryRegistry, mint_args: dict[str, Any]) -> None:
        registry.register_verifier(MINTER, 0, VERIFIER)

        result = registry.mint(MINTER, 1, **mint_args)

        assert result == {"success": True, "value": 0}
        assert registry.transfer_intents[0].amount == 500
        assert registry.transfer_intents[0].sender == MINTER
        assert registry.transfer_intents[0].recipient == VERIFIER

    def test_short_hash(self, verified_registry: StoryRegistry, mint_args: dict[str, Any]) -> None:
        result = verified_registry.mint(MINTER, 1, **{**mint_args, "story_hash": bytes(31)})

        assert result["error"] == ErrorKind.INVALID_STORY_HASH
        assert verified_registry.tokens == {}
        assert verified_registry.settings.next_token_id == 0

    def test_transfer_royalty(self, minted_registry: StoryRegistry) -> None:
        assert minted_registry.transfer(MINTER, 2, 0, "B")["success"]

        assert minted_registry.transfer_intents[-1] == TransferIntent(
            kind="royalty", amount=50, sender="B", recipient=MINTER, token_id=0, height=2
        )
        assert minted_registry.get_token(0).owner == "B"

    def test_milestones(self, minted_registry: StoryRegistry) -> None:
        assert minted_registry.add_milestone(MINTER, 2, 0, 5, "desc", True)["success"] is False
        assert minted_registry.add_milestone(MINTER, 2, 0, 0, "desc", True)["success"]

        milestone = minted_registry.get_milestone(0, 0)
        assert milestone.description == "desc"
        assert milestone.achieved is True

    def test_royalty_rate_setter(self, verified_registry: StoryRegistry) -> None:
        assert verified_registry.set_royalty_rate(MINTER, 1, 25)["error"] == ErrorKind.INVALID_ROYALTY_RATE
        assert verified_registry.set_royalty_rate(MINTER, 1, 15)["success"]
        assert verified_registry.settings.royalty_rate == 15
