from __future__ import annotations

import datetime as dt
import json
from typing import Dict, List, Optional

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class LotteryStateRow(Base):
    """Singleton row (id=1) holding the global lottery record."""

    __tablename__ = "lottery_state"

    id = Column(Integer, primary_key=True, default=1)
    admin = Column(String(128), nullable=True)
    token = Column(String(128), nullable=True)
    state = Column(Integer, nullable=True)
    round_id = Column(Integer, nullable=False, default=0)
    ticket_price = Column(BigInteger, nullable=True)
    number_of_numbers = Column(Integer, nullable=True)
    max_range = Column(Integer, nullable=True)
    thresholds = Column(Text, nullable=True)
    min_players_count = Column(Integer, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def set_thresholds(self, thresholds: Dict[int, int]) -> None:
        self.thresholds = json.dumps({str(tier): pct for tier, pct in thresholds.items()})

    def get_thresholds(self) -> Dict[int, int]:
        if not self.thresholds:
            return {}
        return {int(tier): int(pct) for tier, pct in json.loads(self.thresholds).items()}


class TicketRow(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    round_id = Column(Integer, nullable=False, index=True)
    participant = Column(String(128), nullable=False, index=True)
    numbers = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def set_numbers(self, numbers: List[int]) -> None:
        self.numbers = json.dumps(list(numbers))

    def get_numbers(self) -> List[int]:
        return json.loads(self.numbers)

    def to_dict(self) -> dict:
        return {
            "round_id": self.round_id,
            "participant": self.participant,
            "numbers": self.get_numbers(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class DrawRow(Base):
    __tablename__ = "draws"

    round_id = Column(Integer, primary_key=True)
    winning_numbers = Column(Text, nullable=False)
    seed = Column(String(80), nullable=True)
    generator = Column(String(32), nullable=True)
    number_of_numbers = Column(Integer, nullable=True)
    max_range = Column(Integer, nullable=True)
    pool_balance = Column(BigInteger, nullable=True)
    total_paid = Column(BigInteger, nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def set_numbers(self, numbers: List[int]) -> None:
        self.winning_numbers = json.dumps(list(numbers))

    def get_numbers(self) -> List[int]:
        return json.loads(self.winning_numbers)

    def get_seed(self) -> Optional[int]:
        return int(self.seed) if self.seed is not None else None

    def to_dict(self) -> dict:
        return {
            "round_id": self.round_id,
            "winning_numbers": self.get_numbers(),
            "seed": self.seed,
            "generator": self.generator,
            "pool_balance": self.pool_balance,
            "total_paid": self.total_paid,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
        }


class PayoutRow(Base):
    __tablename__ = "payouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    round_id = Column(Integer, nullable=False, index=True)
    participant = Column(String(128), nullable=False)
    amount = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("round_id", "participant", name="uq_payout_round_participant"),)

    def to_dict(self) -> dict:
        return {"round_id": self.round_id, "participant": self.participant, "amount": self.amount}


class AccountRow(Base):
    """Balance held by an identity on the SQL token ledger."""

    __tablename__ = "accounts"

    identity = Column(String(128), primary_key=True)
    balance = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
