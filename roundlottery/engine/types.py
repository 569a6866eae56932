from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

Ticket = Tuple[int, ...]
DrawResult = Tuple[int, ...]


class RoundState(IntEnum):
    INITIALIZED = 1
    ACTIVE = 2
    FINISHED = 3


@dataclass(frozen=True)
class RoundConfig:
    """Validated parameters of one round.

    ``thresholds`` is exposed as a read-only mapping so that a draw can only
    rescale its own working copy, never the configuration itself.
    """

    round_id: int
    ticket_price: int
    number_of_numbers: int
    max_range: int
    thresholds: Mapping[int, int]
    min_players_count: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "thresholds", MappingProxyType(dict(self.thresholds)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_id": self.round_id,
            "ticket_price": self.ticket_price,
            "number_of_numbers": self.number_of_numbers,
            "max_range": self.max_range,
            "thresholds": dict(self.thresholds),
            "min_players_count": self.min_players_count,
        }


@dataclass
class LotteryContext:
    """The single global lottery record every operation reads and mutates."""

    admin: Optional[str] = None
    token: Optional[str] = None
    state: Optional[RoundState] = None
    round_id: int = 0
    config: Optional[RoundConfig] = None
    tickets: Dict[str, List[Ticket]] = field(default_factory=dict)
    results: Dict[int, DrawResult] = field(default_factory=dict)

    @property
    def initialized(self) -> bool:
        return self.state is not None

    @property
    def participant_count(self) -> int:
        return len(self.tickets)

    @property
    def ticket_count(self) -> int:
        return sum(len(entries) for entries in self.tickets.values())

    def snapshot(self) -> "LotteryContext":
        return LotteryContext(
            admin=self.admin,
            token=self.token,
            state=self.state,
            round_id=self.round_id,
            config=self.config,
            tickets={owner: list(entries) for owner, entries in self.tickets.items()},
            results=dict(self.results),
        )


@dataclass(frozen=True)
class DrawReport:
    round_id: int
    seed: int
    numbers: DrawResult
    pool_balance: int
    winners: Mapping[int, Tuple[str, ...]]
    thresholds: Mapping[int, int]
    prizes: Mapping[str, int]
    total_paid: int
