import unittest
from typing import Sequence, Tuple

from roundlottery.engine import (
    PRIZE_WON_TOPIC,
    ROUND_CREATED_TOPIC,
    AuthorizationError,
    ErrorCategory,
    ErrorCode,
    InMemoryTokenLedger,
    LotteryContext,
    LotteryEngine,
    LotteryError,
    RecordingEventSink,
    RoundState,
    StaticAuthorizer,
)
from roundlottery.engine.errors import InvalidRequestError

POOL = "pool"
ROUND = dict(ticket_price=10, number_of_numbers=3, max_range=10, thresholds={3: 50}, min_players_count=1)


class FixedDrawGenerator:
    """Draws ``numbers`` in slot order whatever the seed."""

    key = "fixed"

    def __init__(self, numbers: Sequence[int]) -> None:
        self._numbers = list(numbers)

    def initial_state(self, seed: int) -> int:
        return seed

    def next_in_range(self, state: int, max_range: int) -> Tuple[int, int]:
        return self._numbers[state % len(self._numbers)], state


class LotteryEngineTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.ledger = InMemoryTokenLedger({"alice": 100, "bob": 100, "carol": 10})
        self.events = RecordingEventSink()
        self.engine = self._engine(StaticAuthorizer({"admin", "alice", "bob", "carol"}))
        self.ctx = LotteryContext()

    def _engine(self, authorizer) -> LotteryEngine:
        return LotteryEngine(
            self.ledger,
            authorizer,
            self.events,
            pool_identity=POOL,
            generator=FixedDrawGenerator([1, 2, 3]),
        )

    def _initialize(self, **overrides) -> int:
        params = dict(ROUND, **overrides)
        return self.engine.initialize(self.ctx, "admin", "TOKEN", **params)

    def assertLotteryError(self, code: ErrorCode, func, *args, **kwargs) -> LotteryError:
        with self.assertRaises(LotteryError) as caught:
            func(*args, **kwargs)
        self.assertEqual(caught.exception.code, code)
        return caught.exception


class InitializeTests(LotteryEngineTestCase):
    def test_initialize_opens_first_round(self) -> None:
        round_id = self._initialize()

        self.assertEqual(round_id, 1)
        self.assertEqual(self.ctx.state, RoundState.ACTIVE)
        self.assertEqual(self.ctx.admin, "admin")
        self.assertEqual(self.ctx.token, "TOKEN")
        self.assertEqual(self.ctx.config.round_id, 1)
        self.assertEqual(self.events.topics(), [ROUND_CREATED_TOPIC])
        self.assertEqual(self.events.events[0].payload["thresholds"], {3: 50})

    def test_initialize_twice_is_rejected(self) -> None:
        self._initialize()
        error = self.assertLotteryError(ErrorCode.ALREADY_INITIALIZED, self._initialize)
        self.assertEqual(error.category, ErrorCategory.SETUP)

    def test_authorization_is_checked_before_initialized_state(self) -> None:
        self._initialize()
        engine = self._engine(StaticAuthorizer({"alice"}))
        with self.assertRaises(AuthorizationError):
            engine.initialize(self.ctx, "admin", "TOKEN", **ROUND)

    def test_invalid_first_round_leaves_lottery_uninitialized(self) -> None:
        before = self.ctx.snapshot()
        self.assertLotteryError(ErrorCode.INVALID_TICKET_PRICE, self._initialize, ticket_price=0)
        self.assertEqual(self.ctx, before)
        self.assertFalse(self.ctx.initialized)
        self.assertEqual(self.events.events, [])


class CreateRoundTests(LotteryEngineTestCase):
    def test_create_round_requires_initialization(self) -> None:
        self.assertLotteryError(ErrorCode.NOT_INITIALIZED, self.engine.create_round, self.ctx, **ROUND)

    def test_create_round_requires_admin(self) -> None:
        self._initialize()
        engine = self._engine(StaticAuthorizer({"alice"}))
        with self.assertRaises(AuthorizationError):
            engine.create_round(self.ctx, **ROUND)

    def test_create_round_while_active_is_rejected(self) -> None:
        self._initialize()
        self.assertLotteryError(ErrorCode.ALREADY_ACTIVE, self.engine.create_round, self.ctx, **ROUND)

    def test_validation_order(self) -> None:
        self._initialize(min_players_count=0)
        self.engine.execute_draw(self.ctx, 0)
        cases = [
            (ErrorCode.MAX_RANGE_TOO_LOW, dict(number_of_numbers=5, max_range=3, thresholds={}, ticket_price=0)),
            (ErrorCode.NUMBER_OF_NUMBERS_TOO_LOW, dict(number_of_numbers=1, thresholds={}, ticket_price=0)),
            (ErrorCode.NUMBER_OF_THRESHOLDS_TOO_LOW, dict(thresholds={}, ticket_price=0)),
            (ErrorCode.INVALID_TICKET_PRICE, dict(ticket_price=0, thresholds={3: 500})),
            (ErrorCode.INVALID_THRESHOLDS, dict(thresholds={3: 101})),
            (ErrorCode.INVALID_THRESHOLDS, dict(thresholds={2: 60, 3: 60})),
            (ErrorCode.INVALID_THRESHOLDS, dict(thresholds={4: 50})),
            (ErrorCode.INVALID_THRESHOLDS, dict(thresholds={0: 50})),
            (ErrorCode.INVALID_THRESHOLDS, dict(thresholds={2: 0, 3: 50})),
        ]
        for code, overrides in cases:
            with self.subTest(code=code.name, overrides=overrides):
                params = dict(ROUND, **overrides)
                before = self.ctx.snapshot()
                self.assertLotteryError(code, self.engine.create_round, self.ctx, **params)
                self.assertEqual(self.ctx, before)

    def test_round_ids_strictly_increase(self) -> None:
        ids = [self._initialize(min_players_count=0)]
        for _ in range(3):
            self.engine.execute_draw(self.ctx, 0)
            ids.append(self.engine.create_round(self.ctx, **dict(ROUND, min_players_count=0)))
        self.assertEqual(ids, [1, 2, 3, 4])

    def test_new_round_clears_ticket_ledger(self) -> None:
        self._initialize()
        self.engine.buy_ticket(self.ctx, "alice", [4, 5, 6])
        self.engine.execute_draw(self.ctx, 0)

        self.engine.create_round(self.ctx, **ROUND)

        self.assertEqual(self.ctx.tickets, {})
        self.assertEqual(self.ctx.participant_count, 0)


class BuyTicketTests(LotteryEngineTestCase):
    def test_purchase_moves_price_into_pool(self) -> None:
        self._initialize()

        count = self.engine.buy_ticket(self.ctx, "alice", [1, 2, 3])

        self.assertEqual(count, 1)
        self.assertEqual(self.ledger.balance("alice"), 90)
        self.assertEqual(self.engine.pool_balance(self.ctx), 10)
        self.assertEqual(self.ctx.tickets, {"alice": [(1, 2, 3)]})

    def test_count_is_per_participant(self) -> None:
        self._initialize()
        self.engine.buy_ticket(self.ctx, "alice", [1, 2, 3])
        self.engine.buy_ticket(self.ctx, "bob", [1, 2, 3])
        self.assertEqual(self.engine.buy_ticket(self.ctx, "alice", [4, 5, 6]), 2)
        self.assertEqual(self.ctx.participant_count, 2)
        self.assertEqual(self.ctx.ticket_count, 3)

    def test_wrong_length_is_rejected_regardless_of_content(self) -> None:
        self._initialize()
        for ticket in ([1, 2], [1, 2, 3, 4], [], [0, 99], [11, 12, 13, 14]):
            with self.subTest(ticket=ticket):
                self.assertLotteryError(
                    ErrorCode.NOT_ENOUGH_OR_TOO_MANY_NUMBERS, self.engine.buy_ticket, self.ctx, "alice", ticket
                )
        self.assertEqual(self.ledger.balance("alice"), 100)

    def test_numbers_outside_range_are_rejected(self) -> None:
        self._initialize()
        for ticket in ([0, 1, 2], [1, 2, 11]):
            with self.subTest(ticket=ticket):
                self.assertLotteryError(ErrorCode.INVALID_NUMBERS, self.engine.buy_ticket, self.ctx, "alice", ticket)

    def test_repeated_numbers_are_accepted(self) -> None:
        self._initialize()
        self.assertEqual(self.engine.buy_ticket(self.ctx, "alice", [7, 7, 7]), 1)

    def test_balance_equal_to_price_is_insufficient(self) -> None:
        self._initialize()
        error = self.assertLotteryError(
            ErrorCode.INSUFFICIENT_FUNDS, self.engine.buy_ticket, self.ctx, "carol", [1, 2, 3]
        )
        self.assertEqual(error.category, ErrorCategory.FUNDS)
        self.assertEqual(self.ledger.balance("carol"), 10)
        self.assertEqual(self.ctx.tickets, {})

    def test_purchase_requires_participant_authorization(self) -> None:
        self._initialize()
        engine = self._engine(StaticAuthorizer({"admin"}))
        with self.assertRaises(AuthorizationError):
            engine.buy_ticket(self.ctx, "alice", [1, 2, 3])

    def test_purchase_outside_active_round_is_rejected(self) -> None:
        self.assertLotteryError(ErrorCode.NOT_INITIALIZED, self.engine.buy_ticket, self.ctx, "alice", [1, 2, 3])
        self._initialize(min_players_count=0)
        self.engine.execute_draw(self.ctx, 0)
        self.assertLotteryError(ErrorCode.NOT_ACTIVE, self.engine.buy_ticket, self.ctx, "alice", [1, 2, 3])


class ExecuteDrawTests(LotteryEngineTestCase):
    def test_single_winner_scenario(self) -> None:
        self._initialize()
        self.engine.buy_ticket(self.ctx, "alice", [1, 2, 3])

        report = self.engine.execute_draw(self.ctx, 0)

        self.assertEqual(report.numbers, (1, 2, 3))
        self.assertEqual(report.pool_balance, 10)
        self.assertEqual(dict(report.winners), {3: ("alice",)})
        self.assertEqual(dict(report.prizes), {"alice": 5})
        self.assertEqual(report.total_paid, 5)
        self.assertEqual(self.ctx.state, RoundState.FINISHED)
        self.assertEqual(self.engine.check_results(self.ctx, 1), (1, 2, 3))
        self.assertEqual(self.ledger.balance("alice"), 95)
        self.assertEqual(self.ledger.balance(POOL), 5)
        self.assertEqual(self.events.topics(), [ROUND_CREATED_TOPIC, PRIZE_WON_TOPIC])
        self.assertEqual(
            self.events.events[-1].payload, {"round_id": 1, "participant": "alice", "amount": 5}
        )

    def test_two_winners_share_the_pool(self) -> None:
        self._initialize()
        self.engine.buy_ticket(self.ctx, "alice", [1, 2, 3])
        self.engine.buy_ticket(self.ctx, "bob", [3, 1, 2])

        report = self.engine.execute_draw(self.ctx, 0)

        self.assertEqual(dict(report.thresholds), {3: 50})
        self.assertEqual(dict(report.prizes), {"alice": 10, "bob": 10})
        self.assertEqual(report.total_paid, 20)
        self.assertEqual(self.ledger.balance(POOL), 0)

    def test_oversubscribed_draw_rescales_without_touching_config(self) -> None:
        self._initialize(thresholds={2: 40, 3: 60})
        self.engine.buy_ticket(self.ctx, "alice", [1, 2, 3])
        self.engine.buy_ticket(self.ctx, "bob", [1, 2, 9])
        self.engine.buy_ticket(self.ctx, "bob", [2, 3, 9])

        report = self.engine.execute_draw(self.ctx, 0)

        # weighted: 60 + 2 * 40 = 140 -> tier 3: 60*100//140 = 42, tier 2: (80*100//140)//2 = 28
        self.assertEqual(dict(report.thresholds), {2: 28, 3: 42})
        self.assertEqual(dict(report.prizes), {"alice": 12, "bob": 16})
        self.assertLessEqual(report.total_paid, report.pool_balance)
        self.assertEqual(dict(self.ctx.config.thresholds), {2: 40, 3: 60})

    def test_draw_without_enough_participants_is_rejected(self) -> None:
        self._initialize(min_players_count=2)
        self.engine.buy_ticket(self.ctx, "alice", [1, 2, 3])
        self.engine.buy_ticket(self.ctx, "alice", [4, 5, 6])
        before = self.ctx.snapshot()

        error = self.assertLotteryError(ErrorCode.MIN_PARTICIPANTS_NOT_SATISFIED, self.engine.execute_draw, self.ctx, 0)

        self.assertEqual(error.category, ErrorCategory.LIFECYCLE)
        self.assertEqual(self.ctx, before)
        self.assertEqual(self.ledger.balance(POOL), 20)

    def test_draw_immediately_after_create_round_needs_participants(self) -> None:
        for minimum in (1, 2, 5):
            with self.subTest(min_players_count=minimum):
                ctx = LotteryContext()
                self.engine.initialize(ctx, "admin", "TOKEN", **dict(ROUND, min_players_count=minimum))
                self.assertLotteryError(ErrorCode.MIN_PARTICIPANTS_NOT_SATISFIED, self.engine.execute_draw, ctx, 0)

    def test_draw_requires_admin(self) -> None:
        self._initialize(min_players_count=0)
        engine = self._engine(StaticAuthorizer({"alice"}))
        with self.assertRaises(AuthorizationError):
            engine.execute_draw(self.ctx, 0)
        self.assertEqual(self.ctx.state, RoundState.ACTIVE)

    def test_negative_seed_is_rejected(self) -> None:
        self._initialize(min_players_count=0)
        with self.assertRaises(InvalidRequestError) as caught:
            self.engine.execute_draw(self.ctx, -1)
        self.assertEqual(caught.exception.code, ErrorCode.INVALID_SEED)
        self.assertEqual(caught.exception.category, ErrorCategory.VALIDATION)
        self.assertEqual(self.ctx.results, {})

    def test_draw_outside_active_round_is_rejected(self) -> None:
        self.assertLotteryError(ErrorCode.NOT_INITIALIZED, self.engine.execute_draw, self.ctx, 0)
        self._initialize(min_players_count=0)
        self.engine.execute_draw(self.ctx, 0)
        self.assertLotteryError(ErrorCode.NOT_ACTIVE, self.engine.execute_draw, self.ctx, 0)

    def test_results_are_retrievable_by_their_own_round_only(self) -> None:
        self.assertLotteryError(ErrorCode.NO_LOTTERY_RESULTS_AVAILABLE, self.engine.check_results, self.ctx, 1)
        self._initialize(min_players_count=0)
        self.engine.execute_draw(self.ctx, 0)
        self.engine.create_round(self.ctx, **dict(ROUND, min_players_count=0))

        self.assertEqual(self.engine.check_results(self.ctx, 1), (1, 2, 3))
        error = self.assertLotteryError(ErrorCode.WRONG_LOTTERY_NUMBER, self.engine.check_results, self.ctx, 2)
        self.assertEqual(error.category, ErrorCategory.LOOKUP)

    def test_pool_balance_requires_admin(self) -> None:
        self.assertLotteryError(ErrorCode.NOT_INITIALIZED, self.engine.pool_balance, self.ctx)
        self._initialize()
        engine = self._engine(StaticAuthorizer({"alice"}))
        with self.assertRaises(AuthorizationError):
            engine.pool_balance(self.ctx)


class RegisterTests(LotteryEngineTestCase):
    def test_register_only_checks_authorization(self) -> None:
        before = self.ctx.snapshot()
        self.engine.register(self.ctx, "alice")
        self.assertEqual(self.ctx, before)
        with self.assertRaises(AuthorizationError):
            self.engine.register(self.ctx, "mallory")


if __name__ == "__main__":
    unittest.main()
