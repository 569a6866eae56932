from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class RoundStatus(IntEnum):
    INITIALIZED = 1
    ACTIVE = 2
    FINISHED = 3


@dataclass(frozen=True)
class RoundSnapshot:
    initialized: bool
    round_id: int
    status: Optional[RoundStatus]
    participant_count: int
    ticket_count: int
    min_players_count: int

    @property
    def ready_for_draw(self) -> bool:
        return (
            self.status == RoundStatus.ACTIVE
            and self.participant_count >= self.min_players_count
        )
