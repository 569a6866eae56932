from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional

import requests

from .config import OracleSettings
from .types import RoundSnapshot, RoundStatus


class LotteryApiError(RuntimeError):
    """The lottery API answered with an error payload."""

    def __init__(self, status_code: int, payload: Mapping[str, Any]) -> None:
        self.status_code = status_code
        self.payload = dict(payload)
        self.error = str(payload.get("error", "unknown"))
        super().__init__(f"lottery API returned {status_code}: {self.error}")


class LotteryClient:
    """Wrapper around the roundlottery HTTP API."""

    def __init__(self, settings: OracleSettings, session: Optional[requests.Session] = None) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"X-Lottery-Identity": self._settings.admin_identity}
        if self._settings.admin_api_key:
            headers["X-Admin-Token"] = self._settings.admin_api_key
        return headers

    def _url(self, path: str) -> str:
        return f"{self._settings.lottery_api_url}{path}"

    @staticmethod
    def _json_or_raise(resp: requests.Response) -> Mapping[str, Any]:
        try:
            payload = resp.json()
        except ValueError:
            payload = {"error": resp.text or resp.reason}
        if resp.status_code >= 400:
            raise LotteryApiError(resp.status_code, payload if isinstance(payload, Mapping) else {})
        if not isinstance(payload, Mapping):
            raise ValueError("Lottery API returned non-object payload")
        return payload

    async def get_current_round(self) -> RoundSnapshot:
        return await asyncio.to_thread(self._sync_get_current_round)

    def _sync_get_current_round(self) -> RoundSnapshot:
        resp = self._session.get(
            self._url("/rounds/current"), timeout=self._settings.request_timeout_seconds
        )
        payload = self._json_or_raise(resp)
        config = payload.get("config") or {}
        state = payload.get("state")
        return RoundSnapshot(
            initialized=bool(payload.get("initialized")),
            round_id=int(payload.get("round_id") or 0),
            status=RoundStatus[state] if state else None,
            participant_count=int(payload.get("participant_count") or 0),
            ticket_count=int(payload.get("ticket_count") or 0),
            min_players_count=int(config.get("min_players_count") or 0),
        )

    async def submit_seed(self, seed: int) -> Mapping[str, Any]:
        if seed < 0:
            raise ValueError("seed must be non-negative")
        return await asyncio.to_thread(self._sync_submit_seed, int(seed))

    def _sync_submit_seed(self, seed: int) -> Mapping[str, Any]:
        resp = self._session.post(
            self._url("/admin/api/draws"),
            json={"seed": seed},
            headers=self._headers(),
            timeout=self._settings.request_timeout_seconds,
        )
        return self._json_or_raise(resp)
