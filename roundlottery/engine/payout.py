from __future__ import annotations

import logging
from typing import Mapping

from .ports import EventSink, TokenLedger

PRIZE_WON_TOPIC = "won_prize"

logger = logging.getLogger("roundlottery.engine")


def disburse(
    ledger: TokenLedger,
    events: EventSink,
    pool_identity: str,
    prizes: Mapping[str, int],
    round_id: int,
) -> int:
    """Pay every positive prize from the pool once, in prize-map order."""
    total_paid = 0
    for participant, amount in prizes.items():
        if amount <= 0:
            continue
        ledger.transfer(pool_identity, participant, amount)
        total_paid += amount
        logger.debug("Round %s paid %s to %s", round_id, amount, participant)
        events.publish(
            PRIZE_WON_TOPIC,
            {"round_id": round_id, "participant": participant, "amount": amount},
        )
    return total_paid
