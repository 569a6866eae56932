from __future__ import annotations

from typing import Mapping

from .errors import ErrorCode, lottery_error
from .types import RoundConfig

MIN_NUMBER_OF_NUMBERS = 2


def validate_round_config(
    round_id: int,
    ticket_price: int,
    number_of_numbers: int,
    max_range: int,
    thresholds: Mapping[int, int],
    min_players_count: int,
) -> RoundConfig:
    """Check round parameters in a fixed order and build the config.

    The first failing check wins, so callers always see the same error for
    the same bad input.
    """
    if max_range < number_of_numbers:
        raise lottery_error(
            ErrorCode.MAX_RANGE_TOO_LOW,
            f"max_range {max_range} is lower than number_of_numbers {number_of_numbers}",
        )
    if number_of_numbers < MIN_NUMBER_OF_NUMBERS:
        raise lottery_error(
            ErrorCode.NUMBER_OF_NUMBERS_TOO_LOW,
            f"number_of_numbers must be at least {MIN_NUMBER_OF_NUMBERS}",
        )
    if not thresholds:
        raise lottery_error(ErrorCode.NUMBER_OF_THRESHOLDS_TOO_LOW, "at least one threshold is required")
    if ticket_price <= 0:
        raise lottery_error(ErrorCode.INVALID_TICKET_PRICE, "ticket_price must be positive")

    normalized = {int(tier): int(percentage) for tier, percentage in thresholds.items()}
    total = sum(normalized.values())
    if not 1 <= total <= 100:
        raise lottery_error(
            ErrorCode.INVALID_THRESHOLDS, f"threshold percentages sum to {total}, expected 1..100"
        )
    for tier, percentage in normalized.items():
        if tier < 1 or tier > number_of_numbers:
            raise lottery_error(
                ErrorCode.INVALID_THRESHOLDS, f"threshold {tier} is outside 1..{number_of_numbers}"
            )
        if not 1 <= percentage <= 100:
            raise lottery_error(
                ErrorCode.INVALID_THRESHOLDS, f"threshold {tier} pays {percentage}%, expected 1..100"
            )

    return RoundConfig(
        round_id=round_id,
        ticket_price=ticket_price,
        number_of_numbers=number_of_numbers,
        max_range=max_range,
        thresholds=normalized,
        min_players_count=min_players_count,
    )
