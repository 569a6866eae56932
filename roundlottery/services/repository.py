from __future__ import annotations

from typing import List, Mapping, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..engine import DrawReport, LotteryContext, RoundConfig, RoundState
from ..models import DrawRow, LotteryStateRow, PayoutRow, TicketRow

STATE_ROW_ID = 1


class LotteryRepository:
    """Loads and saves the :class:`LotteryContext` inside one session.

    Tickets of finished rounds stay in the table as history; the context only
    ever carries the current round's ledger. Tickets are written one row per
    purchase through :meth:`add_ticket`, never by diffing the context.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _state_row(self) -> Optional[LotteryStateRow]:
        return self._session.get(LotteryStateRow, STATE_ROW_ID)

    def load(self, for_update: bool = False) -> LotteryContext:
        row = self._session.get(LotteryStateRow, STATE_ROW_ID, with_for_update=for_update)
        if row is None:
            return LotteryContext()

        ctx = LotteryContext(
            admin=row.admin,
            token=row.token,
            state=RoundState(row.state) if row.state is not None else None,
            round_id=row.round_id or 0,
        )
        if row.number_of_numbers is not None:
            ctx.config = RoundConfig(
                round_id=row.round_id,
                ticket_price=row.ticket_price,
                number_of_numbers=row.number_of_numbers,
                max_range=row.max_range,
                thresholds=row.get_thresholds(),
                min_players_count=row.min_players_count,
            )

        tickets = self._session.scalars(
            select(TicketRow).where(TicketRow.round_id == ctx.round_id).order_by(TicketRow.id)
        )
        for ticket in tickets:
            ctx.tickets.setdefault(ticket.participant, []).append(tuple(ticket.get_numbers()))

        draws = self._session.scalars(select(DrawRow).order_by(DrawRow.round_id))
        for draw in draws:
            ctx.results[draw.round_id] = tuple(draw.get_numbers())
        return ctx

    def save(self, ctx: LotteryContext) -> None:
        if not ctx.initialized:
            return

        row = self._state_row()
        if row is None:
            row = LotteryStateRow(id=STATE_ROW_ID)
            self._session.add(row)
        row.admin = ctx.admin
        row.token = ctx.token
        row.state = int(ctx.state)
        row.round_id = ctx.round_id
        if ctx.config is not None:
            row.ticket_price = ctx.config.ticket_price
            row.number_of_numbers = ctx.config.number_of_numbers
            row.max_range = ctx.config.max_range
            row.set_thresholds(dict(ctx.config.thresholds))
            row.min_players_count = ctx.config.min_players_count

        self._save_results(ctx.results)
        self._session.flush()

    def add_ticket(self, round_id: int, participant: str, numbers) -> TicketRow:
        ticket = TicketRow(round_id=round_id, participant=participant)
        ticket.set_numbers(list(numbers))
        self._session.add(ticket)
        return ticket

    def count_tickets(self, round_id: int, participant: str) -> int:
        self._session.flush()
        return self._session.scalar(
            select(func.count(TicketRow.id)).where(
                TicketRow.round_id == round_id, TicketRow.participant == participant
            )
        )

    def _save_results(self, results: Mapping[int, tuple]) -> None:
        stored = set(self._session.scalars(select(DrawRow.round_id)))
        for round_id, numbers in results.items():
            if round_id in stored:
                continue
            draw = DrawRow(round_id=round_id)
            draw.set_numbers(list(numbers))
            self._session.add(draw)

    def record_draw(self, report: DrawReport, generator_key: str, config: RoundConfig) -> DrawRow:
        self._session.flush()
        draw = self._session.get(DrawRow, report.round_id)
        if draw is None:
            draw = DrawRow(round_id=report.round_id)
            draw.set_numbers(list(report.numbers))
            self._session.add(draw)
        draw.seed = str(report.seed)
        draw.generator = generator_key
        draw.number_of_numbers = config.number_of_numbers
        draw.max_range = config.max_range
        draw.pool_balance = report.pool_balance
        draw.total_paid = report.total_paid

        for participant, amount in report.prizes.items():
            if amount > 0:
                self._session.add(
                    PayoutRow(round_id=report.round_id, participant=participant, amount=amount)
                )
        self._session.flush()
        return draw

    def get_draw(self, round_id: int) -> Optional[DrawRow]:
        return self._session.get(DrawRow, round_id)

    def list_payouts(self, round_id: int) -> List[PayoutRow]:
        return list(
            self._session.scalars(
                select(PayoutRow).where(PayoutRow.round_id == round_id).order_by(PayoutRow.id)
            )
        )

    def list_tickets(self, round_id: int, participant: Optional[str] = None) -> List[TicketRow]:
        stmt = select(TicketRow).where(TicketRow.round_id == round_id)
        if participant is not None:
            stmt = stmt.where(TicketRow.participant == participant)
        return list(self._session.scalars(stmt.order_by(TicketRow.id)))
