"""Registry records: tokens, royalties, milestones, transfer intents, settings.

Token, Royalty, Milestone and TransferIntent are frozen. Changes go
through ``dataclasses.replace`` so a half-built record is never stored.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Literal

from ..config_schema import RegistryConfig


class Currency(str, Enum):
    """Currencies a token can be denominated in by default."""

    STX = "STX"
    BTC = "BTC"
    USD = "USD"


IntentKind = Literal["mint_fee", "royalty"]


@dataclass(frozen=True)
class Token:
    """One minted story asset."""

    owner: str
    story_hash: bytes
    art_uri: str
    metadata: str
    recovery_goal: str
    milestone_count: int
    timestamp: int
    status: bool
    currency: str
    location: str
    group_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["story_hash"] = self.story_hash.hex()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        fields = dict(data)
        fields["story_hash"] = bytes.fromhex(fields["story_hash"])
        return cls(**fields)


@dataclass(frozen=True)
class Royalty:
    """Royalty terms fixed when the token is minted."""

    rate: int
    beneficiary: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Milestone:
    """A progress checkpoint recorded against one token index."""

    description: str
    achieved: bool
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TransferIntent:
    """A fee or royalty payment the registry asked for but did not settle.

    recipient is None only if a mint fee was recorded with no verifier,
    which the mint gate prevents.
    """

    kind: IntentKind
    amount: int
    sender: str
    recipient: str | None
    token_id: int
    height: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RegistrySettings:
    """Mutable registry-wide parameters, owned by exactly one registry."""

    next_token_id: int = 0
    max_tokens: int = 10000
    mint_fee: int = 500
    royalty_rate: int = 10
    verifier_contract: str | None = None

    @classmethod
    def from_config(cls, config: RegistryConfig) -> "RegistrySettings":
        return cls(
            max_tokens=config.max_tokens,
            mint_fee=config.mint_fee,
            royalty_rate=config.royalty_rate,
        )

    @property
    def is_authorized(self) -> bool:
        return self.verifier_contract is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
