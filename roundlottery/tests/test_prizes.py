import random
import unittest

from roundlottery.engine import (
    allocate,
    classify,
    compute_prizes,
    count_matches,
    renormalize,
    total_weighted_percentage,
)


class WinnerClassificationTests(unittest.TestCase):
    def test_count_matches_counts_drawn_values_on_ticket(self) -> None:
        self.assertEqual(count_matches((1, 2, 3), (3, 2, 1)), 3)
        self.assertEqual(count_matches((1, 2, 3), (1, 9, 8)), 1)
        self.assertEqual(count_matches((1, 2, 3), (7, 8, 9)), 0)

    def test_repeated_ticket_number_counts_once(self) -> None:
        self.assertEqual(count_matches((1, 2, 3), (1, 1, 1)), 1)

    def test_classify_keeps_only_configured_tiers(self) -> None:
        tickets = {
            "alice": [(1, 2, 3)],
            "bob": [(1, 2, 9)],
            "carol": [(7, 8, 9)],
        }
        winners = classify((1, 2, 3), tickets, {3: 50})
        self.assertEqual(winners, {3: ["alice"]})

    def test_classify_lists_participant_once_per_winning_ticket(self) -> None:
        tickets = {"alice": [(1, 2, 3), (3, 2, 1), (4, 5, 6)]}
        winners = classify((1, 2, 3), tickets, {3: 20, 1: 5})
        self.assertEqual(winners, {3: ["alice", "alice"]})


class PrizeAllocationTests(unittest.TestCase):
    def test_single_winner_takes_tier_percentage(self) -> None:
        prizes = allocate({3: ["alice"]}, {3: 50}, 10)
        self.assertEqual(prizes, {"alice": 5})

    def test_two_winners_at_exactly_one_hundred_are_not_rescaled(self) -> None:
        winners = {3: ["alice", "bob"]}
        self.assertEqual(total_weighted_percentage(winners, {3: 50}), 100)
        self.assertEqual(renormalize(winners, {3: 50}), {3: 50})

        prizes = allocate(winners, {3: 50}, 20)
        self.assertEqual(prizes, {"alice": 10, "bob": 10})
        self.assertEqual(sum(prizes.values()), 20)

    def test_oversubscribed_tiers_are_rescaled(self) -> None:
        winners = {2: ["bob"], 3: ["alice"]}
        thresholds = {2: 60, 3: 60}

        working = renormalize(winners, thresholds)

        self.assertEqual(working, {2: 50, 3: 50})
        self.assertEqual(thresholds, {2: 60, 3: 60})
        prizes = compute_prizes(winners, working, 20)
        self.assertEqual(prizes, {"alice": 10, "bob": 10})

    def test_rescale_drops_tiers_without_winners(self) -> None:
        winners = {3: ["alice", "bob", "carol"]}
        working = renormalize(winners, {1: 10, 3: 40})
        self.assertEqual(working, {3: 33})

    def test_no_winners_pays_nothing(self) -> None:
        self.assertEqual(allocate({}, {3: 50}, 100), {})

    def test_participant_winning_twice_is_owed_both_prizes(self) -> None:
        prizes = allocate({3: ["alice"], 2: ["alice"]}, {3: 30, 2: 10}, 100)
        self.assertEqual(prizes, {"alice": 40})

    def test_allocation_never_exceeds_pool(self) -> None:
        rng = random.Random(20240601)
        participants = [f"p{i}" for i in range(8)]
        for _ in range(500):
            number_of_numbers = rng.randint(2, 6)
            tiers = rng.sample(range(1, number_of_numbers + 1), rng.randint(1, number_of_numbers))
            budget = 100
            thresholds = {}
            for tier in tiers:
                if budget < 1:
                    break
                thresholds[tier] = rng.randint(1, budget)
                budget -= thresholds[tier]
            winners = {}
            for tier in thresholds:
                picked = [rng.choice(participants) for _ in range(rng.randint(0, 5))]
                if picked:
                    winners[tier] = picked
            pool = rng.randint(0, 10_000)

            working = renormalize(winners, thresholds)
            prizes = compute_prizes(winners, working, pool)

            self.assertLessEqual(sum(prizes.values()), pool)
            if total_weighted_percentage(winners, thresholds) <= 100:
                self.assertEqual(working, thresholds)


if __name__ == "__main__":
    unittest.main()
