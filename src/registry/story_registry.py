"""Story Registry - mint, transfer and track story tokens

The registry is a synchronous state machine. Every operation takes the
calling identity and the current height explicitly and returns a tagged
result:

    {"success": True, "value": ...}
    {"success": False, "error": ErrorKind.<KIND>, "message": ..., ...}

Operations check everything before they change anything, so a failed
call leaves every store untouched. One lock per registry serializes
operations.

Fees and royalties are not paid here. Each is recorded as a
TransferIntent on ``transfer_intents`` for an external settler.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from enum import Enum
from typing import Any

from ..config import get_validated_config
from ..config_schema import RegistryConfig
from .errors import ErrorKind, ok, registry_error
from .logger import EventLogger
from .models import Milestone, RegistrySettings, Royalty, Token, TransferIntent
from .owner_index import OwnerIndex
from .validation import (
    check_milestone_index,
    check_mint_fee,
    check_mint_fields,
    check_royalty_rate,
    check_update_fields,
)

logger = logging.getLogger(__name__)


class StoryRegistry:
    """
    Single-authority registry of story tokens.

    Stores:
    - settings: next id, supply cap, mint fee, default royalty rate, verifier
    - tokens: token id -> Token
    - royalties: token id -> Royalty (snapshotted at mint)
    - milestones: (token id, index) -> Milestone (sparse)
    - owner_index: owner -> token ids, capped
    - transfer_intents: fee and royalty payments in the order they were asked for

    Minting and the fee/rate setters need a registered verifier. The
    setters only check that one exists, not that the caller is it.
    """

    settings: RegistrySettings
    tokens: dict[int, Token]
    royalties: dict[int, Royalty]
    milestones: dict[tuple[int, int], Milestone]
    owner_index: OwnerIndex
    transfer_intents: list[TransferIntent]
    event_logger: EventLogger | None
    _config: RegistryConfig
    _lock: threading.Lock

    def __init__(
        self,
        config: RegistryConfig | None = None,
        event_logger: EventLogger | None = None,
    ) -> None:
        """
        Args:
            config: Registry config (uses global if not provided)
            event_logger: Optional event log for successful operations
        """
        self._config = config or get_validated_config().registry
        self.settings = RegistrySettings.from_config(self._config)
        self.tokens = {}
        self.royalties = {}
        self.milestones = {}
        self.owner_index = OwnerIndex(cap=self._config.owner_index_cap)
        self.transfer_intents = []
        self.event_logger = event_logger
        self._lock = threading.Lock()

    @property
    def config(self) -> RegistryConfig:
        return self._config

    def _log_event(self, event_type: str, caller: str, height: int, **data: Any) -> None:
        """Log a committed operation. A failed write never undoes or hides the result."""
        if self.event_logger is None:
            return
        try:
            self.event_logger.log(event_type, {"caller": caller, "height": height, **data})
        except OSError as e:
            logger.warning("Could not write %s event at height %d: %s", event_type, height, e)

    def _reject(self, operation: str, kind: ErrorKind, message: str, **details: Any) -> dict[str, Any]:
        logger.debug("%s rejected (%s): %s", operation, kind.value, message)
        return registry_error(kind, message, **details)

    # ========== Authorization and settings ==========

    def register_verifier(self, caller: str, height: int, verifier: str) -> dict[str, Any]:
        """Register the verifier. Succeeds once per registry."""
        with self._lock:
            if self.settings.verifier_contract is not None:
                return self._reject(
                    "register_verifier",
                    ErrorKind.ALREADY_AUTHORIZED,
                    f"Verifier already registered as '{self.settings.verifier_contract}'",
                )
            if not isinstance(verifier, str) or not verifier:
                return self._reject(
                    "register_verifier",
                    ErrorKind.INVALID_UPDATE_PARAM,
                    f"Verifier must be a non-empty identity, got {verifier!r}",
                )
            self.settings.verifier_contract = verifier
            self._log_event("verifier_registered", caller, height, verifier=verifier)
            logger.info("Verifier registered: %s", verifier)
            return ok(True)

    def set_mint_fee(self, caller: str, height: int, new_fee: int) -> dict[str, Any]:
        """Replace the mint fee. Any non-negative amount is accepted."""
        with self._lock:
            if not self.settings.is_authorized:
                return self._reject(
                    "set_mint_fee", ErrorKind.NOT_AUTHORIZED,
                    "No verifier registered; the mint fee cannot change",
                )
            kind = check_mint_fee(new_fee)
            if kind is not None:
                return self._reject(
                    "set_mint_fee", kind, f"Mint fee must be a non-negative integer, got {new_fee!r}"
                )
            old_fee = self.settings.mint_fee
            self.settings.mint_fee = new_fee
            self._log_event("mint_fee_set", caller, height, old_fee=old_fee, new_fee=new_fee)
            return ok(True)

    def set_royalty_rate(self, caller: str, height: int, new_rate: int) -> dict[str, Any]:
        """Replace the default royalty rate used by future mints.

        The rate bound is checked before the verifier gate.
        """
        with self._lock:
            kind = check_royalty_rate(new_rate, self._config.max_royalty_rate)
            if kind is not None:
                return self._reject(
                    "set_royalty_rate", kind,
                    f"Royalty rate must be between 0 and {self._config.max_royalty_rate}, "
                    f"got {new_rate!r}",
                    max_rate=self._config.max_royalty_rate,
                )
            if not self.settings.is_authorized:
                return self._reject(
                    "set_royalty_rate", ErrorKind.NOT_AUTHORIZED,
                    "No verifier registered; the royalty rate cannot change",
                )
            old_rate = self.settings.royalty_rate
            self.settings.royalty_rate = new_rate
            self._log_event("royalty_rate_set", caller, height, old_rate=old_rate, new_rate=new_rate)
            return ok(True)

    # ========== Tokens ==========

    def mint(
        self,
        caller: str,
        height: int,
        story_hash: bytes,
        art_uri: str,
        metadata: str,
        recovery_goal: str,
        milestone_count: int,
        currency: str,
        location: str,
        group_id: int | None = None,
    ) -> dict[str, Any]:
        """Mint a token owned by ``caller``. Returns the new token id.

        Checks run in a fixed order: supply cap, then fields, then the
        verifier gate. The mint fee is recorded as an intent from the
        caller to the verifier.
        """
        if isinstance(currency, Enum):
            currency = currency.value
        with self._lock:
            settings = self.settings
            if settings.next_token_id >= settings.max_tokens:
                return self._reject(
                    "mint", ErrorKind.MAX_TOKENS_EXCEEDED,
                    f"Supply cap of {settings.max_tokens} tokens reached",
                    max_tokens=settings.max_tokens,
                )
            kind = check_mint_fields(
                self._config.limits,
                self._config.currencies,
                story_hash,
                art_uri,
                metadata,
                recovery_goal,
                milestone_count,
                currency,
                location,
            )
            if kind is not None:
                return self._reject("mint", kind, f"Mint argument rejected: {kind.value}")
            if not settings.is_authorized:
                return self._reject(
                    "mint", ErrorKind.NOT_AUTHORIZED, "No verifier registered; minting is disabled"
                )

            token_id = settings.next_token_id
            fee_intent = TransferIntent(
                kind="mint_fee",
                amount=settings.mint_fee,
                sender=caller,
                recipient=settings.verifier_contract,
                token_id=token_id,
                height=height,
            )
            token = Token(
                owner=caller,
                story_hash=bytes(story_hash),
                art_uri=art_uri,
                metadata=metadata,
                recovery_goal=recovery_goal,
                milestone_count=milestone_count,
                timestamp=height,
                status=True,
                currency=currency,
                location=location,
                group_id=group_id,
            )
            royalty = Royalty(rate=settings.royalty_rate, beneficiary=caller)
            owned = self.owner_index.with_appended(caller, token_id)

            self.transfer_intents.append(fee_intent)
            self.tokens[token_id] = token
            self.royalties[token_id] = royalty
            self.owner_index.put(caller, owned)
            settings.next_token_id += 1

            self._log_event(
                "token_minted", caller, height,
                token_id=token_id, fee=fee_intent.amount, royalty_rate=royalty.rate,
            )
            return ok(token_id)

    def update_metadata(
        self,
        caller: str,
        height: int,
        token_id: int,
        new_metadata: str,
        new_art_uri: str,
    ) -> dict[str, Any]:
        """Replace a token's metadata and art URI. Owner only."""
        with self._lock:
            token = self.tokens.get(token_id)
            if token is None:
                return self._reject(
                    "update_metadata", ErrorKind.TOKEN_NOT_FOUND,
                    f"Token {token_id} does not exist", token_id=token_id,
                )
            if token.owner != caller:
                return self._reject(
                    "update_metadata", ErrorKind.NOT_AUTHORIZED,
                    f"Only the owner of token {token_id} can update it", token_id=token_id,
                )
            kind = check_update_fields(self._config.limits, new_metadata, new_art_uri)
            if kind is not None:
                return self._reject(
                    "update_metadata", kind,
                    f"Metadata must be at most {self._config.limits.metadata_max} characters and "
                    f"art URI 1-{self._config.limits.art_uri_max} characters",
                )

            self.tokens[token_id] = replace(
                token, metadata=new_metadata, art_uri=new_art_uri, timestamp=height
            )
            self._log_event("metadata_updated", caller, height, token_id=token_id)
            return ok(True)

    def transfer(self, caller: str, height: int, token_id: int, new_owner: str) -> dict[str, Any]:
        """Move a token to ``new_owner``.

        The new owner is charged the royalty: current mint fee times the
        token's snapshotted rate, floored, paid to the original minter.
        """
        with self._lock:
            token = self.tokens.get(token_id)
            if token is None:
                return self._reject(
                    "transfer", ErrorKind.TOKEN_NOT_FOUND,
                    f"Token {token_id} does not exist", token_id=token_id,
                )
            if token.owner != caller:
                return self._reject(
                    "transfer", ErrorKind.NOT_AUTHORIZED,
                    f"Only the owner of token {token_id} can transfer it", token_id=token_id,
                )
            royalty = self.royalties.get(token_id)
            if royalty is None:
                return self._reject(
                    "transfer", ErrorKind.ROYALTY_NOT_SET,
                    f"Token {token_id} has no royalty terms", token_id=token_id,
                )

            amount = self.settings.mint_fee * royalty.rate // 100
            royalty_intent = TransferIntent(
                kind="royalty",
                amount=amount,
                sender=new_owner,
                recipient=royalty.beneficiary,
                token_id=token_id,
                height=height,
            )
            moved = self.owner_index.with_moved(caller, new_owner, token_id)
            if token_id not in moved[new_owner]:
                logger.warning(
                    "Owner index for %s is full; token %d is not listed", new_owner, token_id
                )

            self.transfer_intents.append(royalty_intent)
            self.tokens[token_id] = replace(token, owner=new_owner)
            for owner, token_ids in moved.items():
                self.owner_index.put(owner, token_ids)

            self._log_event(
                "token_transferred", caller, height,
                token_id=token_id, new_owner=new_owner, royalty=amount,
                beneficiary=royalty.beneficiary,
            )
            return ok(True)

    def add_milestone(
        self,
        caller: str,
        height: int,
        token_id: int,
        index: int,
        description: str,
        achieved: bool,
    ) -> dict[str, Any]:
        """Record or overwrite milestone ``index`` of a token. Owner only."""
        with self._lock:
            token = self.tokens.get(token_id)
            if token is None:
                return self._reject(
                    "add_milestone", ErrorKind.TOKEN_NOT_FOUND,
                    f"Token {token_id} does not exist", token_id=token_id,
                )
            if token.owner != caller:
                return self._reject(
                    "add_milestone", ErrorKind.NOT_AUTHORIZED,
                    f"Only the owner of token {token_id} can record milestones", token_id=token_id,
                )
            kind = check_milestone_index(index, token.milestone_count)
            if kind is not None:
                return self._reject(
                    "add_milestone", kind,
                    f"Milestone index must be in [0, {token.milestone_count}), got {index!r}",
                    token_id=token_id,
                )

            self.milestones[(token_id, index)] = Milestone(
                description=description, achieved=bool(achieved), timestamp=height
            )
            self._log_event(
                "milestone_recorded", caller, height,
                token_id=token_id, index=index, achieved=bool(achieved),
            )
            return ok(True)

    # ========== Queries ==========

    def get_token(self, token_id: int) -> Token | None:
        with self._lock:
            return self.tokens.get(token_id)

    def get_token_count(self) -> dict[str, Any]:
        """Number of tokens ever minted (there is no burn)."""
        with self._lock:
            return ok(self.settings.next_token_id)

    def get_royalty(self, token_id: int) -> Royalty | None:
        with self._lock:
            return self.royalties.get(token_id)

    def get_milestone(self, token_id: int, index: int) -> Milestone | None:
        with self._lock:
            return self.milestones.get((token_id, index))

    def get_milestones(self, token_id: int) -> dict[int, Milestone]:
        """Recorded milestones of a token, keyed and ordered by index."""
        with self._lock:
            found = {idx: m for (tid, idx), m in self.milestones.items() if tid == token_id}
        return dict(sorted(found.items()))

    def get_tokens_by_owner(self, owner: str) -> list[int]:
        with self._lock:
            return self.owner_index.get(owner)

    def get_settings(self) -> RegistrySettings:
        """A copy of the current settings."""
        with self._lock:
            return replace(self.settings)

    # ========== State export ==========

    def export_state(self) -> dict[str, Any]:
        """Everything needed to rebuild this registry, as JSON-safe data."""
        with self._lock:
            return {
                "settings": self.settings.to_dict(),
                "tokens": {str(tid): t.to_dict() for tid, t in self.tokens.items()},
                "royalties": {str(tid): r.to_dict() for tid, r in self.royalties.items()},
                "milestones": [
                    {"token_id": tid, "index": idx, **m.to_dict()}
                    for (tid, idx), m in self.milestones.items()
                ],
                "owner_index": self.owner_index.to_dict(),
                "transfer_intents": [i.to_dict() for i in self.transfer_intents],
            }

    @classmethod
    def from_state(
        cls,
        state: dict[str, Any],
        config: RegistryConfig | None = None,
        event_logger: EventLogger | None = None,
    ) -> "StoryRegistry":
        """Rebuild a registry from export_state() output."""
        registry = cls(config=config, event_logger=event_logger)
        registry.settings = RegistrySettings(**state["settings"])
        registry.tokens = {int(tid): Token.from_dict(t) for tid, t in state["tokens"].items()}
        registry.royalties = {int(tid): Royalty(**r) for tid, r in state["royalties"].items()}
        registry.milestones = {
            (m["token_id"], m["index"]): Milestone(
                description=m["description"], achieved=m["achieved"], timestamp=m["timestamp"]
            )
            for m in state["milestones"]
        }
        registry.owner_index = OwnerIndex.from_dict(
            state["owner_index"], cap=registry.config.owner_index_cap
        )
        registry.transfer_intents = [TransferIntent(**i) for i in state["transfer_intents"]]
        return registry
