"""Prize allocation: tier percentages to per-participant amounts.

All arithmetic is integer floor division. Whatever the flooring loses stays
in the pool; nothing here sweeps it to anyone.
"""

from __future__ import annotations

from typing import Dict, Mapping, Sequence

POOL_PERCENT_CAP = 100


def total_weighted_percentage(
    winners: Mapping[int, Sequence[str]],
    thresholds: Mapping[int, int],
) -> int:
    return sum(thresholds[tier] * len(addresses) for tier, addresses in winners.items())


def renormalize(
    winners: Mapping[int, Sequence[str]],
    thresholds: Mapping[int, int],
) -> Dict[int, int]:
    """Return the working thresholds for one draw.

    When the winners' weighted percentage fits in the pool the copy is
    returned unchanged. Otherwise tiers without winners are dropped and each
    remaining tier's allotment is scaled against the 100% cap and split
    evenly between its winners.
    """
    working = dict(thresholds)
    total = total_weighted_percentage(winners, working)
    if total <= POOL_PERCENT_CAP:
        return working

    for tier in list(working):
        if tier not in winners:
            del working[tier]
            continue
        count = len(winners[tier])
        allotment = count * working[tier] * POOL_PERCENT_CAP // total
        working[tier] = allotment // count
    return working


def compute_prizes(
    winners: Mapping[int, Sequence[str]],
    thresholds: Mapping[int, int],
    pool_balance: int,
) -> Dict[str, int]:
    prizes: Dict[str, int] = {}
    for tier, addresses in winners.items():
        prize = pool_balance * thresholds[tier] // POOL_PERCENT_CAP
        for address in addresses:
            prizes[address] = prizes.get(address, 0) + prize
    return prizes


def allocate(
    winners: Mapping[int, Sequence[str]],
    thresholds: Mapping[int, int],
    pool_balance: int,
) -> Dict[str, int]:
    """Owed amount per participant for ``pool_balance`` split across ``winners``."""
    return compute_prizes(winners, renormalize(winners, thresholds), pool_balance)
