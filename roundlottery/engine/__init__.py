"""Round lifecycle, draw and prize computation for the lottery."""

from .draw import DrawOutcome, draw_numbers
from .errors import (
    AuthorizationError,
    ErrorCategory,
    ErrorCode,
    LotteryError,
    TransferError,
    lottery_error,
)
from .lottery import ROUND_CREATED_TOPIC, LotteryEngine
from .memory import InMemoryTokenLedger, RecordingEventSink, StaticAuthorizer
from .payout import PRIZE_WON_TOPIC, disburse
from .ports import Authorizer, EventSink, TokenLedger
from .prizes import allocate, compute_prizes, renormalize, total_weighted_percentage
from .rng import DEFAULT_GENERATOR_KEY, DEFAULT_GENERATORS, NumberGenerator, get_generator
from .rounds import validate_round_config
from .types import DrawReport, LotteryContext, RoundConfig, RoundState
from .winners import classify, count_matches

__all__ = [
    "AuthorizationError",
    "Authorizer",
    "DEFAULT_GENERATORS",
    "DEFAULT_GENERATOR_KEY",
    "DrawOutcome",
    "DrawReport",
    "ErrorCategory",
    "ErrorCode",
    "EventSink",
    "InMemoryTokenLedger",
    "LotteryContext",
    "LotteryEngine",
    "LotteryError",
    "NumberGenerator",
    "PRIZE_WON_TOPIC",
    "ROUND_CREATED_TOPIC",
    "RecordingEventSink",
    "RoundConfig",
    "RoundState",
    "StaticAuthorizer",
    "TokenLedger",
    "TransferError",
    "allocate",
    "classify",
    "compute_prizes",
    "count_matches",
    "disburse",
    "draw_numbers",
    "get_generator",
    "lottery_error",
    "renormalize",
    "total_weighted_percentage",
    "validate_round_config",
]
