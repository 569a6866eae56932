"""Pluggable, stateless number generators used by the draw.

A generator never keeps state between calls: the caller owns the state value,
hands it to :meth:`NumberGenerator.next_in_range` and receives the advanced
state back together with the sampled value. This keeps draws replayable from
nothing but the seed and the generator key.
"""

from __future__ import annotations

import hashlib
import random
from typing import Any, Dict, NamedTuple, Protocol, Tuple


class NumberGenerator(Protocol):
    key: str

    def initial_state(self, seed: int) -> Any:
        ...

    def next_in_range(self, state: Any, max_range: int) -> Tuple[int, Any]:
        ...


class CounterState(NamedTuple):
    seed: int
    counter: int


class Sha256CounterGenerator:
    """Hash ``"{seed}:{counter}"`` with SHA-256 and reduce it into range."""

    key = "sha256"

    def initial_state(self, seed: int) -> CounterState:
        return CounterState(int(seed), 0)

    def next_in_range(self, state: CounterState, max_range: int) -> Tuple[int, CounterState]:
        if max_range < 1:
            raise ValueError("max_range must be at least 1")
        payload = f"{state.seed}:{state.counter}".encode("ascii")
        digest = hashlib.sha256(payload).digest()
        value = int.from_bytes(digest, "big") % max_range + 1
        return value, CounterState(state.seed, state.counter + 1)


class MersenneTwisterGenerator:
    """Python's ``random.Random`` with its state carried outside the object."""

    key = "mt19937"

    def initial_state(self, seed: int) -> Tuple[Any, ...]:
        return random.Random(int(seed)).getstate()

    def next_in_range(self, state: Tuple[Any, ...], max_range: int) -> Tuple[int, Tuple[Any, ...]]:
        if max_range < 1:
            raise ValueError("max_range must be at least 1")
        rng = random.Random()
        rng.setstate(state)
        value = rng.randint(1, max_range)
        return value, rng.getstate()


class GeneratorRegistry:
    """Mapping of generator keys to generator instances."""

    def __init__(self) -> None:
        self._generators: Dict[str, NumberGenerator] = {}

    def register(self, generator: NumberGenerator, *, replace: bool = False) -> None:
        if not replace and generator.key in self._generators:
            raise ValueError(f"Generator '{generator.key}' is already registered")
        self._generators[generator.key] = generator

    def get(self, key: str) -> NumberGenerator:
        try:
            return self._generators[key]
        except KeyError as exc:
            raise KeyError(f"Unknown number generator '{key}'") from exc

    def available(self) -> Dict[str, NumberGenerator]:
        return dict(self._generators)


DEFAULT_GENERATOR_KEY = Sha256CounterGenerator.key

DEFAULT_GENERATORS = GeneratorRegistry()
DEFAULT_GENERATORS.register(Sha256CounterGenerator())
DEFAULT_GENERATORS.register(MersenneTwisterGenerator())


def get_generator(key: str = DEFAULT_GENERATOR_KEY) -> NumberGenerator:
    return DEFAULT_GENERATORS.get(key)


__all__ = [
    "CounterState",
    "DEFAULT_GENERATORS",
    "DEFAULT_GENERATOR_KEY",
    "GeneratorRegistry",
    "MersenneTwisterGenerator",
    "NumberGenerator",
    "Sha256CounterGenerator",
    "get_generator",
]
