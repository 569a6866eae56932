from __future__ import annotations

import abc
from dataclasses import dataclass

SEED_MODULUS = 2**64


@dataclass(frozen=True)
class SeedData:
    """One beacon output, normalized."""

    beacon_round: str
    randomness: bytes

    def seed(self) -> int:
        """Randomness as a big-endian integer reduced into the seed range."""
        return int.from_bytes(self.randomness, "big") % SEED_MODULUS


class SeedSource(abc.ABC):
    """Abstract randomness provider."""

    @abc.abstractmethod
    async def fetch_latest(self) -> SeedData:
        """Return the newest beacon output.

        Implementations should raise `RuntimeError` or `ValueError` if
        remote data is unavailable or malformed.
        """

    async def close(self) -> None:
        """Optional hook for sources that hold connections."""
        return None
