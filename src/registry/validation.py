"""Field checks for minting and metadata updates.

Each check returns the ErrorKind of the first violated constraint, or
None when everything is valid. Checks never touch registry state.
"""

from __future__ import annotations

from typing import Any

from ..config_schema import FieldLimits
from .errors import ErrorKind


def _bounded_str(value: Any, max_len: int, allow_empty: bool = True) -> bool:
    if not isinstance(value, str):
        return False
    if not allow_empty and not value:
        return False
    return len(value) <= max_len


def _is_int(value: Any) -> bool:
    # bool is an int subclass; True is not a milestone count
    return isinstance(value, int) and not isinstance(value, bool)


def check_mint_fields(
    limits: FieldLimits,
    currencies: list[str],
    story_hash: Any,
    art_uri: Any,
    metadata: Any,
    recovery_goal: Any,
    milestone_count: Any,
    currency: Any,
    location: Any,
) -> ErrorKind | None:
    """Validate mint arguments in the order callers rely on.

    Order: story hash, art URI, metadata, recovery goal, milestone count,
    currency, location. The first failure wins.
    """
    if not isinstance(story_hash, (bytes, bytearray)) or len(story_hash) != limits.story_hash_length:
        return ErrorKind.INVALID_STORY_HASH
    if not _bounded_str(art_uri, limits.art_uri_max, allow_empty=False):
        return ErrorKind.INVALID_ART_URI
    if not _bounded_str(metadata, limits.metadata_max):
        return ErrorKind.INVALID_METADATA
    if not _bounded_str(recovery_goal, limits.recovery_goal_max):
        return ErrorKind.INVALID_RECOVERY_GOAL
    if not _is_int(milestone_count) or not (
        limits.milestone_count_min <= milestone_count <= limits.milestone_count_max
    ):
        return ErrorKind.INVALID_MILESTONE_COUNT
    if currency not in currencies:
        return ErrorKind.INVALID_CURRENCY
    if not _bounded_str(location, limits.location_max):
        return ErrorKind.INVALID_LOCATION
    return None


def check_update_fields(limits: FieldLimits, new_metadata: Any, new_art_uri: Any) -> ErrorKind | None:
    """Validate a metadata update. Both failures map to INVALID_UPDATE_PARAM."""
    if not _bounded_str(new_metadata, limits.metadata_max):
        return ErrorKind.INVALID_UPDATE_PARAM
    if not _bounded_str(new_art_uri, limits.art_uri_max, allow_empty=False):
        return ErrorKind.INVALID_UPDATE_PARAM
    return None


def check_milestone_index(index: Any, milestone_count: int) -> ErrorKind | None:
    """Index must fall inside [0, milestone_count).

    Negative indices are rejected too; Python ints have no unsigned type
    to rule them out at the call boundary.
    """
    if not _is_int(index) or index < 0 or index >= milestone_count:
        return ErrorKind.INVALID_MILESTONE
    return None


def check_royalty_rate(rate: Any, max_rate: int) -> ErrorKind | None:
    if not _is_int(rate) or rate < 0 or rate > max_rate:
        return ErrorKind.INVALID_ROYALTY_RATE
    return None


def check_mint_fee(fee: Any) -> ErrorKind | None:
    if not _is_int(fee) or fee < 0:
        return ErrorKind.INVALID_UPDATE_PARAM
    return None
