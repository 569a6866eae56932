"""Round lifecycle and draw orchestration."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from .draw import draw_numbers
from .errors import ErrorCode, lottery_error
from .payout import disburse
from .ports import Authorizer, EventSink, TokenLedger
from .prizes import compute_prizes, renormalize
from .rng import NumberGenerator, get_generator
from .rounds import validate_round_config
from .types import DrawReport, DrawResult, LotteryContext, RoundConfig, RoundState
from .winners import classify

ROUND_CREATED_TOPIC = "new_lottery_created"

logger = logging.getLogger("roundlottery.engine")


class LotteryEngine:
    """Runs lottery operations against an explicit :class:`LotteryContext`.

    Every public method checks all of its preconditions before it writes to
    the context or calls the ledger, so a rejected call leaves the context
    exactly as it was. Atomicity across ledger failures in the middle of a
    payout is the hosting transaction's job.
    """

    def __init__(
        self,
        ledger: TokenLedger,
        authorizer: Authorizer,
        events: EventSink,
        *,
        pool_identity: str,
        generator: Optional[NumberGenerator] = None,
    ) -> None:
        self._ledger = ledger
        self._authorizer = authorizer
        self._events = events
        self._pool_identity = pool_identity
        self._generator = generator or get_generator()

    @property
    def generator(self) -> NumberGenerator:
        return self._generator

    def initialize(
        self,
        ctx: LotteryContext,
        admin: str,
        token: str,
        ticket_price: int,
        number_of_numbers: int,
        max_range: int,
        thresholds: Mapping[int, int],
        min_players_count: int,
    ) -> int:
        self._authorizer.require_authorization(admin)
        if ctx.initialized:
            raise lottery_error(ErrorCode.ALREADY_INITIALIZED)

        # Validate before touching the context so a bad first round leaves it uninitialized.
        validate_round_config(
            ctx.round_id + 1, ticket_price, number_of_numbers, max_range, thresholds, min_players_count
        )

        ctx.admin = admin
        ctx.token = token
        ctx.state = RoundState.INITIALIZED
        logger.info("Lottery initialized with admin=%s token=%s", admin, token)
        return self.create_round(
            ctx, ticket_price, number_of_numbers, max_range, thresholds, min_players_count
        )

    def register(self, ctx: LotteryContext, identity: str) -> None:
        self._authorizer.require_authorization(identity)

    def create_round(
        self,
        ctx: LotteryContext,
        ticket_price: int,
        number_of_numbers: int,
        max_range: int,
        thresholds: Mapping[int, int],
        min_players_count: int,
    ) -> int:
        if not ctx.initialized:
            raise lottery_error(ErrorCode.NOT_INITIALIZED)
        self._authorizer.require_authorization(ctx.admin)
        if ctx.state == RoundState.ACTIVE:
            raise lottery_error(ErrorCode.ALREADY_ACTIVE, f"round {ctx.round_id} is still active")

        round_id = ctx.round_id + 1
        config = validate_round_config(
            round_id, ticket_price, number_of_numbers, max_range, thresholds, min_players_count
        )

        ctx.round_id = round_id
        ctx.config = config
        ctx.tickets = {}
        ctx.state = RoundState.ACTIVE

        payload = config.to_dict()
        self._events.publish(ROUND_CREATED_TOPIC, payload)
        logger.info("Round %s created: %s", round_id, payload)
        return round_id

    def buy_ticket(self, ctx: LotteryContext, participant: str, ticket: Sequence[int]) -> int:
        self._authorizer.require_authorization(participant)
        config = self._require_active(ctx)

        if len(ticket) != config.number_of_numbers:
            raise lottery_error(
                ErrorCode.NOT_ENOUGH_OR_TOO_MANY_NUMBERS,
                f"ticket has {len(ticket)} numbers, expected {config.number_of_numbers}",
            )
        for number in ticket:
            if number < 1 or number > config.max_range:
                raise lottery_error(
                    ErrorCode.INVALID_NUMBERS, f"{number} is outside 1..{config.max_range}"
                )

        # Strictly greater: a balance equal to the price is rejected.
        if self._ledger.balance(participant) <= config.ticket_price:
            raise lottery_error(ErrorCode.INSUFFICIENT_FUNDS)

        self._ledger.transfer(participant, self._pool_identity, config.ticket_price)

        entries = ctx.tickets.setdefault(participant, [])
        entries.append(tuple(int(number) for number in ticket))
        logger.debug("Round %s: %s bought ticket #%s", config.round_id, participant, len(entries))
        return len(entries)

    def pool_balance(self, ctx: LotteryContext) -> int:
        if not ctx.initialized:
            raise lottery_error(ErrorCode.NOT_INITIALIZED)
        self._authorizer.require_authorization(ctx.admin)
        return self._ledger.balance(self._pool_identity)

    def check_results(self, ctx: LotteryContext, round_id: int) -> DrawResult:
        if not ctx.results:
            raise lottery_error(ErrorCode.NO_LOTTERY_RESULTS_AVAILABLE)
        if round_id not in ctx.results:
            raise lottery_error(ErrorCode.WRONG_LOTTERY_NUMBER, f"no result recorded for round {round_id}")
        return ctx.results[round_id]

    def execute_draw(self, ctx: LotteryContext, seed: int) -> DrawReport:
        config = self._require_active(ctx)
        self._authorizer.require_authorization(ctx.admin)

        if ctx.participant_count < config.min_players_count:
            raise lottery_error(
                ErrorCode.MIN_PARTICIPANTS_NOT_SATISFIED,
                f"{ctx.participant_count} participants, {config.min_players_count} required",
            )
        if seed < 0:
            raise lottery_error(ErrorCode.INVALID_SEED, f"seed must not be negative, got {seed}")

        pool = self._ledger.balance(self._pool_identity)
        outcome = draw_numbers(self._generator, config.max_range, config.number_of_numbers, seed)
        winners = classify(outcome.numbers, ctx.tickets, config.thresholds)
        working = renormalize(winners, config.thresholds)
        prizes = compute_prizes(winners, working, pool)
        total_paid = disburse(self._ledger, self._events, self._pool_identity, prizes, config.round_id)

        ctx.results[config.round_id] = outcome.numbers
        ctx.state = RoundState.FINISHED
        logger.info(
            "Round %s drawn %s with seed %s: pool=%s paid=%s winners=%s",
            config.round_id,
            outcome.numbers,
            seed,
            pool,
            total_paid,
            {tier: len(addresses) for tier, addresses in winners.items()},
        )
        return DrawReport(
            round_id=config.round_id,
            seed=seed,
            numbers=outcome.numbers,
            pool_balance=pool,
            winners={tier: tuple(addresses) for tier, addresses in winners.items()},
            thresholds=working,
            prizes=prizes,
            total_paid=total_paid,
        )

    @staticmethod
    def _require_active(ctx: LotteryContext) -> RoundConfig:
        if not ctx.initialized:
            raise lottery_error(ErrorCode.NOT_INITIALIZED)
        if ctx.state != RoundState.ACTIVE or ctx.config is None:
            raise lottery_error(ErrorCode.NOT_ACTIVE)
        return ctx.config
