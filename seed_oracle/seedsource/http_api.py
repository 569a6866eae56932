from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping

import requests

from .base import SeedData, SeedSource


@dataclass(frozen=True)
class HttpBeaconSeedSourceConfig:
    """Where the beacon lives and which fields of its JSON to read."""

    url: str
    round_key: str = "round"
    randomness_key: str = "randomness"
    timeout_seconds: int = 10


class HttpBeaconSeedSource(SeedSource):
    """Fetch randomness from a JSON HTTP beacon (drand style)."""

    def __init__(self, config: HttpBeaconSeedSourceConfig) -> None:
        self._config = config

    async def fetch_latest(self) -> SeedData:
        response_json = await asyncio.to_thread(
            self._get_json, self._config.url, self._config.timeout_seconds
        )
        return self._parse_payload(response_json)

    @staticmethod
    def _get_json(url: str, timeout_seconds: int) -> Mapping[str, Any]:
        resp = requests.get(url, timeout=timeout_seconds)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, Mapping):
            raise ValueError("Beacon returned non-object payload")
        return data

    def _parse_payload(self, payload: Mapping[str, Any]) -> SeedData:
        cfg = self._config
        try:
            beacon_round = str(payload[cfg.round_key])
        except KeyError as exc:
            raise ValueError(f"Missing round field: {cfg.round_key}") from exc

        try:
            raw = payload[cfg.randomness_key]
        except KeyError as exc:
            raise ValueError(f"Missing randomness field: {cfg.randomness_key}") from exc

        return SeedData(beacon_round=beacon_round, randomness=self._parse_randomness(raw))

    @staticmethod
    def _parse_randomness(raw: Any) -> bytes:
        if not isinstance(raw, str):
            raise ValueError("randomness must be a hex string")
        text = raw[2:] if raw.lower().startswith("0x") else raw
        if not text:
            raise ValueError("randomness field empty")
        try:
            return bytes.fromhex(text)
        except ValueError as exc:
            raise ValueError("randomness is not valid hex") from exc
