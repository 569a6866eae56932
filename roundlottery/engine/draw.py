from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple

from .rng import NumberGenerator
from .types import DrawResult


@dataclass(frozen=True)
class DrawOutcome:
    """Drawn numbers plus the final generator state of every slot."""

    numbers: DrawResult
    slot_states: Tuple[Any, ...]
    samples: int


def draw_numbers(
    generator: NumberGenerator,
    max_range: int,
    number_of_numbers: int,
    seed: int,
) -> DrawOutcome:
    """Draw ``number_of_numbers`` distinct values in ``[1, max_range]``.

    Slot ``n`` gets its own generator state seeded with ``seed + n`` and keeps
    sampling from it until a value not drawn by an earlier slot comes up.
    The result is a deterministic function of ``seed`` and ``generator``.
    """
    if number_of_numbers < 0:
        raise ValueError("number_of_numbers must not be negative")
    if max_range < number_of_numbers:
        raise ValueError("max_range must be at least number_of_numbers")

    numbers: List[int] = []
    states: List[Any] = []
    samples = 0
    for n in range(number_of_numbers):
        state = generator.initial_state(seed + n)
        while True:
            value, state = generator.next_in_range(state, max_range)
            samples += 1
            if not 1 <= value <= max_range:
                raise ValueError(
                    f"generator {generator.key!r} returned {value} outside [1, {max_range}]"
                )
            if value not in numbers:
                numbers.append(value)
                break
        states.append(state)

    return DrawOutcome(numbers=tuple(numbers), slot_states=tuple(states), samples=samples)
