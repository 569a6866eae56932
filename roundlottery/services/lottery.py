"""Transactional application service around :class:`LotteryEngine`.

Each public method is one unit of work: load the lottery context, run the
engine operation, save the context and commit. Any exception rolls the whole
transaction back, ledger transfers on the SQL backend included. Events are
held back until the transaction has committed.

Mutating transactions run one at a time: a service-wide lock covers writers
in this process and the lottery state row is loaded ``FOR UPDATE`` so
backends that support row locks serialize writers across processes too.
"""

from __future__ import annotations

import logging
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..db import SessionScope
from ..engine import (
    Authorizer,
    DrawReport,
    EventSink,
    LotteryContext,
    LotteryEngine,
    RecordingEventSink,
    TokenLedger,
    draw_numbers,
    get_generator,
)
from ..engine.errors import ErrorCode, lottery_error
from .accounts import SqlTokenLedger
from .events import LoggingEventSink
from .repository import LotteryRepository

LedgerFactory = Callable[[Session], TokenLedger]

logger = logging.getLogger("roundlottery.service")


@dataclass(frozen=True)
class DrawAudit:
    round_id: int
    seed: int
    generator: str
    recorded: Tuple[int, ...]
    replayed: Tuple[int, ...]

    @property
    def verified(self) -> bool:
        return self.recorded == self.replayed


class LotteryService:
    def __init__(
        self,
        session_scope: SessionScope,
        *,
        pool_identity: str,
        generator_key: str = "sha256",
        ledger_factory: Optional[LedgerFactory] = None,
        event_sink: Optional[EventSink] = None,
    ) -> None:
        self._session_scope = session_scope
        self._pool_identity = pool_identity
        self._generator_key = generator_key
        self._generator = get_generator(generator_key)
        self._ledger_factory = ledger_factory or SqlTokenLedger
        self._event_sink = event_sink or LoggingEventSink()
        self._write_lock = threading.RLock()

    @property
    def pool_identity(self) -> str:
        return self._pool_identity

    @property
    def generator_key(self) -> str:
        return self._generator_key

    @contextmanager
    def _transaction(
        self, authorizer: Authorizer, mutate: bool = True
    ) -> Iterator[Tuple[LotteryEngine, LotteryContext, LotteryRepository]]:
        events = RecordingEventSink()
        with ExitStack() as stack:
            if mutate:
                stack.enter_context(self._write_lock)
            session = stack.enter_context(self._session_scope())
            repository = LotteryRepository(session)
            ctx = repository.load(for_update=mutate)
            engine = LotteryEngine(
                self._ledger_factory(session),
                authorizer,
                events,
                pool_identity=self._pool_identity,
                generator=self._generator,
            )
            yield engine, ctx, repository
            if mutate:
                repository.save(ctx)
        events.forward_to(self._event_sink)

    def initialize(
        self,
        authorizer: Authorizer,
        admin: str,
        token: str,
        ticket_price: int,
        number_of_numbers: int,
        max_range: int,
        thresholds: Mapping[int, int],
        min_players_count: int,
    ) -> int:
        with self._transaction(authorizer) as (engine, ctx, _):
            return engine.initialize(
                ctx, admin, token, ticket_price, number_of_numbers, max_range, thresholds, min_players_count
            )

    def register(self, authorizer: Authorizer, identity: str) -> None:
        with self._transaction(authorizer, mutate=False) as (engine, ctx, _):
            engine.register(ctx, identity)

    def create_round(
        self,
        authorizer: Authorizer,
        ticket_price: int,
        number_of_numbers: int,
        max_range: int,
        thresholds: Mapping[int, int],
        min_players_count: int,
    ) -> int:
        with self._transaction(authorizer) as (engine, ctx, _):
            return engine.create_round(
                ctx, ticket_price, number_of_numbers, max_range, thresholds, min_players_count
            )

    def buy_ticket(self, authorizer: Authorizer, participant: str, ticket: Sequence[int]) -> Tuple[int, int]:
        """Buy one ticket; returns ``(round_id, participant_ticket_count)``."""
        with self._transaction(authorizer) as (engine, ctx, repository):
            engine.buy_ticket(ctx, participant, ticket)
            repository.add_ticket(ctx.round_id, participant, ctx.tickets[participant][-1])
            return ctx.round_id, repository.count_tickets(ctx.round_id, participant)

    def pool_balance(self, authorizer: Authorizer) -> int:
        with self._transaction(authorizer, mutate=False) as (engine, ctx, _):
            return engine.pool_balance(ctx)

    def check_results(self, authorizer: Authorizer, round_id: int) -> Tuple[int, ...]:
        with self._transaction(authorizer, mutate=False) as (engine, ctx, _):
            return engine.check_results(ctx, round_id)

    def execute_draw(self, authorizer: Authorizer, seed: int) -> DrawReport:
        with self._transaction(authorizer) as (engine, ctx, repository):
            config = ctx.config
            report = engine.execute_draw(ctx, seed)
            repository.save(ctx)
            repository.record_draw(report, self._generator_key, config)
        logger.info("Round %s settled: paid %s of %s", report.round_id, report.total_paid, report.pool_balance)
        return report

    def current_round(self) -> Dict[str, Any]:
        with self._session_scope() as session:
            ctx = LotteryRepository(session).load()
        summary: Dict[str, Any] = {
            "initialized": ctx.initialized,
            "state": ctx.state.name if ctx.state is not None else None,
            "round_id": ctx.round_id,
            "participant_count": ctx.participant_count,
            "ticket_count": ctx.ticket_count,
            "config": ctx.config.to_dict() if ctx.config is not None else None,
        }
        return summary

    def participant_tickets(self, participant: str, round_id: Optional[int] = None) -> Tuple[int, List[List[int]]]:
        """Tickets of ``participant`` in ``round_id``, the current round by default."""
        with self._session_scope() as session:
            repository = LotteryRepository(session)
            if round_id is None:
                round_id = repository.load().round_id
            tickets = repository.list_tickets(round_id, participant)
            return round_id, [ticket.get_numbers() for ticket in tickets]

    def payouts(self, round_id: int) -> List[Dict[str, Any]]:
        with self._session_scope() as session:
            repository = LotteryRepository(session)
            if repository.get_draw(round_id) is None:
                raise lottery_error(ErrorCode.WRONG_LOTTERY_NUMBER, f"no result recorded for round {round_id}")
            return [payout.to_dict() for payout in repository.list_payouts(round_id)]

    def verify_draw(self, round_id: int) -> DrawAudit:
        """Replay a recorded draw from its stored seed and generator."""
        with self._session_scope() as session:
            draw = LotteryRepository(session).get_draw(round_id)
            if draw is None:
                raise lottery_error(ErrorCode.WRONG_LOTTERY_NUMBER, f"no result recorded for round {round_id}")
            seed = draw.get_seed()
            if seed is None or draw.generator is None:
                raise RuntimeError(f"round {round_id} has no recorded seed to replay")
            outcome = draw_numbers(
                get_generator(draw.generator), draw.max_range, draw.number_of_numbers, seed
            )
            return DrawAudit(
                round_id=round_id,
                seed=seed,
                generator=draw.generator,
                recorded=tuple(draw.get_numbers()),
                replayed=outcome.numbers,
            )

    def deposit(self, identity: str, amount: int) -> int:
        """Credit ``identity`` on the SQL ledger (operator funding)."""
        with self._session_scope() as session:
            ledger = self._ledger_factory(session)
            if not isinstance(ledger, SqlTokenLedger):
                raise RuntimeError("deposits are only available on the sql token backend")
            return ledger.deposit(identity, amount)
