from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, validator

MAX_SEED = 2**64


class RoundConfigRequest(BaseModel):
    ticket_price: int = Field(..., description="Price of one ticket in token base units.")
    number_of_numbers: int = Field(..., description="How many numbers a ticket and a draw hold.")
    max_range: int = Field(..., description="Numbers are picked from 1..max_range.")
    thresholds: Dict[int, int] = Field(..., description="Match count -> percent of the pool per winner.")
    min_players_count: int = Field(0, ge=0)


class InitializeRequest(RoundConfigRequest):
    admin: str
    token: str


class TicketPurchaseRequest(BaseModel):
    numbers: List[int] = Field(..., description="Exactly number_of_numbers values in 1..max_range.")


class DrawRequest(BaseModel):
    seed: int = Field(..., ge=0, description="Caller supplied seed; the draw is a function of it.")

    @validator("seed")
    def seed_fits_u64(cls, value: int) -> int:
        if value >= MAX_SEED:
            raise ValueError("seed must fit in 64 bits")
        return value


class DepositRequest(BaseModel):
    amount: int = Field(..., gt=0)


class RoundCreatedResponse(BaseModel):
    round_id: int


class TicketPurchaseResponse(BaseModel):
    round_id: int
    participant: str
    ticket_count: int


class ParticipantTicketsResponse(BaseModel):
    round_id: int
    participant: str
    tickets: List[List[int]]


class DrawResponse(BaseModel):
    round_id: int
    seed: str
    winning_numbers: List[int]
    pool_balance: int
    total_paid: int
    winners: Dict[int, List[str]]
    thresholds: Dict[int, int]
    prizes: Dict[str, int]


class ResultsResponse(BaseModel):
    round_id: int
    winning_numbers: List[int]


class AuditResponse(BaseModel):
    round_id: int
    seed: str
    generator: str
    recorded: List[int]
    replayed: List[int]
    verified: bool


class PoolBalanceResponse(BaseModel):
    pool_identity: str
    balance: int


class BalanceResponse(BaseModel):
    identity: str
    balance: int


class RoundSummaryResponse(BaseModel):
    initialized: bool
    state: Optional[str] = None
    round_id: int
    participant_count: int
    ticket_count: int
    config: Optional[dict] = None
