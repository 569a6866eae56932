from __future__ import annotations

from typing import Dict, List, Mapping, Sequence


def count_matches(drawn: Sequence[int], ticket: Sequence[int]) -> int:
    # Membership per drawn value: a number repeated on the ticket counts once.
    return sum(1 for number in drawn if number in ticket)


def classify(
    drawn: Sequence[int],
    tickets: Mapping[str, Sequence[Sequence[int]]],
    tiers: Mapping[int, int],
) -> Dict[int, List[str]]:
    """Group participants by the match count of each of their tickets.

    Only match counts present in ``tiers`` are kept. A participant appears
    once per winning ticket, so multiplicity is preserved.
    """
    winners: Dict[int, List[str]] = {}
    for participant, entries in tickets.items():
        for ticket in entries:
            matches = count_matches(drawn, ticket)
            if matches not in tiers:
                continue
            winners.setdefault(matches, []).append(participant)
    return winners
