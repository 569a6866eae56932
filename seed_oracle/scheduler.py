from __future__ import annotations

import asyncio
import json
import logging
import pathlib
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence

from .config import OracleSettings
from .seedsource import SeedSource
from .types import RoundSnapshot


class LotteryClientProtocol(Protocol):
    async def get_current_round(self) -> RoundSnapshot:
        ...

    async def submit_seed(self, seed: int) -> Mapping[str, Any]:
        ...


@dataclass
class SchedulerResult:
    round_id: int
    beacon_round: str
    seed: int
    winning_numbers: Sequence[int]


class OracleStateStore:
    """Remembers the last beacon round so one output never seeds two draws."""

    def __init__(self, path: str) -> None:
        self._path = pathlib.Path(path)

    def load_last_beacon_round(self) -> Optional[str]:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return None
        return data.get("last_beacon_round")

    def save_last_beacon_round(self, beacon_round: str) -> None:
        payload = {"last_beacon_round": beacon_round}
        self._path.write_text(json.dumps(payload), encoding="utf-8")


class OracleScheduler:
    def __init__(
        self,
        settings: OracleSettings,
        seedsource: SeedSource,
        client: LotteryClientProtocol,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._settings = settings
        self._seedsource = seedsource
        self._client = client
        self._state = OracleStateStore(settings.state_file)
        self._last_beacon_round = self._state.load_last_beacon_round()
        self._logger = logger or logging.getLogger("roundlottery.oracle")

    async def run_forever(self) -> None:
        interval = self._settings.poll_interval_seconds
        self._logger.info("Seed oracle loop started; poll interval=%s", interval)
        try:
            while True:
                try:
                    result = await self._attempt_submission()
                    if result is not None and self._settings.submit_only_once:
                        self._logger.info("Submit-once flag set; exiting loop.")
                        return
                except Exception as exc:
                    self._logger.exception("Oracle iteration failed: %s", exc)
                await asyncio.sleep(interval)
        finally:
            await self._seedsource.close()

    async def run_once(self) -> Optional[SchedulerResult]:
        try:
            return await self._attempt_submission()
        finally:
            await self._seedsource.close()

    async def _attempt_submission(self) -> Optional[SchedulerResult]:
        snapshot = await self._client.get_current_round()
        if not snapshot.initialized:
            self._logger.info("Lottery not initialized yet; waiting.")
            return None
        if not snapshot.ready_for_draw:
            self._logger.info(
                "Round %s not ready for a draw (status=%s, participants=%s/%s); waiting.",
                snapshot.round_id,
                snapshot.status.name if snapshot.status is not None else None,
                snapshot.participant_count,
                snapshot.min_players_count,
            )
            return None

        seed_data = await self._seedsource.fetch_latest()
        if self._last_beacon_round == seed_data.beacon_round:
            self._logger.debug("Beacon round %s already used; skipping.", seed_data.beacon_round)
            return None

        seed = seed_data.seed()
        self._logger.info(
            "Submitting seed for round %s from beacon round %s",
            snapshot.round_id,
            seed_data.beacon_round,
        )
        response = await self._client.submit_seed(seed)
        winning_numbers = tuple(int(n) for n in response.get("winning_numbers", ()))
        self._logger.info("Round %s drawn: %s", snapshot.round_id, winning_numbers)

        self._last_beacon_round = seed_data.beacon_round
        self._state.save_last_beacon_round(seed_data.beacon_round)

        return SchedulerResult(
            round_id=snapshot.round_id,
            beacon_round=seed_data.beacon_round,
            seed=seed,
            winning_numbers=winning_numbers,
        )
