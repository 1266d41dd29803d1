"""Fake PD client for testing."""

from __future__ import annotations

from typing import Callable

from pd_scaler.core.errors import PDApiError

GET_MEMBERS = "get_members"
GET_LEADER = "get_leader"
TRANSFER_LEADER = "transfer_leader"
DELETE_MEMBER = "delete_member"


class FakePDClient:
    """Simulates a PD cluster's membership.

    A reaction registered with add_reaction replaces the default behaviour of
    an action; it receives the call argument and its return value (or raised
    error) is what the client returns. Every call is logged in ``calls``.
    """

    def __init__(self, members: list[str] | None = None, leader: str | None = None):
        self.members: list[str] = list(members or [])
        self.leader = leader if leader is not None else (self.members[0] if self.members else "")
        self.calls: list[tuple[str, str | None]] = []
        self._reactions: dict[str, Callable] = {}

    def add_reaction(self, action: str, reaction: Callable) -> None:
        self._reactions[action] = reaction

    def _react(self, action: str, arg: str | None = None):
        self.calls.append((action, arg))
        reaction = self._reactions.get(action)
        if reaction is None:
            return False, None
        return True, reaction(arg)

    def get_members(self) -> list[dict]:
        handled, result = self._react(GET_MEMBERS)
        if handled:
            return result
        return [{"name": name} for name in self.members]

    def get_leader(self) -> dict:
        handled, result = self._react(GET_LEADER)
        if handled:
            return result
        return {"name": self.leader}

    def transfer_leader(self, name: str) -> None:
        handled, _ = self._react(TRANSFER_LEADER, name)
        if handled:
            return
        if name not in self.members:
            raise PDApiError(f"member {name} not found", status_code=404)
        self.leader = name

    def delete_member(self, name: str) -> None:
        handled, _ = self._react(DELETE_MEMBER, name)
        if handled:
            return
        if name in self.members:
            self.members.remove(name)

    def actions(self) -> list[str]:
        return [action for action, _ in self.calls]
