"""Ownership index - per-owner token id lists with a fixed cap.

Lists keep insertion order. Appending to a full list drops the new id
instead of evicting an old one, so the first ``cap`` ids are kept.

The index is not thread-safe by itself; StoryRegistry holds its lock
around every call.
"""

from __future__ import annotations


class OwnerIndex:
    """Maps an owner identity to the token ids they hold, oldest first."""

    cap: int
    _lists: dict[str, list[int]]

    def __init__(self, cap: int = 100) -> None:
        self.cap = cap
        self._lists = {}

    def get(self, owner: str) -> list[int]:
        """Token ids held by ``owner`` (a copy; empty if unknown)."""
        return list(self._lists.get(owner, []))

    def with_appended(self, owner: str, token_id: int) -> list[int]:
        """The list ``owner`` would have after appending ``token_id``."""
        return (self._lists.get(owner, []) + [token_id])[: self.cap]

    def with_removed(self, owner: str, token_id: int) -> list[int]:
        """The list ``owner`` would have after removing ``token_id``."""
        return [tid for tid in self._lists.get(owner, []) if tid != token_id]

    def with_moved(self, sender: str, receiver: str, token_id: int) -> dict[str, list[int]]:
        """Both lists after moving ``token_id`` from sender to receiver.

        A transfer to oneself moves the id to the end of the same list.
        """
        sender_ids = self.with_removed(sender, token_id)
        base = sender_ids if receiver == sender else self._lists.get(receiver, [])
        return {sender: sender_ids, receiver: (base + [token_id])[: self.cap]}

    def put(self, owner: str, token_ids: list[int]) -> None:
        self._lists[owner] = token_ids

    def to_dict(self) -> dict[str, list[int]]:
        return {owner: list(ids) for owner, ids in self._lists.items()}

    @classmethod
    def from_dict(cls, data: dict[str, list[int]], cap: int = 100) -> "OwnerIndex":
        index = cls(cap=cap)
        for owner, ids in data.items():
            index.put(owner, [int(tid) for tid in ids])
        return index
