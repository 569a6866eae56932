"""Interfaces of the collaborators the engine delegates to."""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class TokenLedger(Protocol):
    def balance(self, identity: str) -> int:
        ...

    def transfer(self, from_: str, to: str, amount: int) -> None:
        ...


class Authorizer(Protocol):
    def require_authorization(self, identity: str) -> None:
        ...


class EventSink(Protocol):
    def publish(self, topic: str, payload: Mapping[str, Any]) -> None:
        ...
