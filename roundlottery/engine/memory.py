"""In-process collaborators: used for tests, replays and event buffering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .errors import AuthorizationError, TransferError
from .ports import EventSink


class InMemoryTokenLedger:
    def __init__(self, balances: Optional[Mapping[str, int]] = None) -> None:
        self._balances: Dict[str, int] = dict(balances or {})
        self.transfers: List[tuple] = []

    def balance(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def mint(self, identity: str, amount: int) -> None:
        self._balances[identity] = self.balance(identity) + amount

    def transfer(self, from_: str, to: str, amount: int) -> None:
        if amount < 0:
            raise TransferError(f"cannot transfer a negative amount ({amount})")
        available = self.balance(from_)
        if available < amount:
            raise TransferError(f"{from_} holds {available}, cannot transfer {amount}")
        self._balances[from_] = available - amount
        self._balances[to] = self.balance(to) + amount
        self.transfers.append((from_, to, amount))


class StaticAuthorizer:
    """Authorizes a fixed set of identities."""

    def __init__(self, identities: Iterable[str] = ()) -> None:
        self._identities = frozenset(identities)

    def require_authorization(self, identity: str) -> None:
        if identity is None or identity not in self._identities:
            raise AuthorizationError(identity)


@dataclass(frozen=True)
class PublishedEvent:
    topic: str
    payload: Mapping[str, Any]


class RecordingEventSink:
    def __init__(self) -> None:
        self.events: List[PublishedEvent] = []

    def publish(self, topic: str, payload: Mapping[str, Any]) -> None:
        self.events.append(PublishedEvent(topic, dict(payload)))

    def topics(self) -> List[str]:
        return [event.topic for event in self.events]

    def forward_to(self, sink: EventSink) -> None:
        for event in self.events:
            sink.publish(event.topic, event.payload)
        self.events.clear()
