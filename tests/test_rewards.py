#!/usr/bin/env python3
"""
Loyalty ladder tests

PURPOSE:
    Checks tier thresholds, progress and the points earned per purchase.
"""

import unittest

from brewbarn.app.rewards import (RewardService, next_tier, points_for_purchase, points_to_next_tier,
                                  tier_for, tier_progress)
from brewbarn.data.database import SessionLocal
from brewbarn.data.models import Reward

from helpers import reset_database


class TestTierMath(unittest.TestCase):

    def test_thresholds(self):
        self.assertEqual(tier_for(0).name, "Bronze")
        self.assertEqual(tier_for(99).name, "Bronze")
        self.assertEqual(tier_for(100).name, "Silver")
        self.assertEqual(tier_for(500).name, "Gold")
        self.assertEqual(tier_for(5000).name, "Platinum")

    def test_progress(self):
        self.assertEqual(tier_progress(50), ("Silver", 50.0))
        self.assertEqual(tier_progress(300), ("Gold", 50.0))
        self.assertEqual(tier_progress(1200), ("Maximum", 100.0))
        self.assertIsNone(next_tier(1000))

    def test_points_to_next_tier(self):
        self.assertEqual(points_to_next_tier(80), 20)
        self.assertIsNone(points_to_next_tier(1000))

    def test_points_use_tier_earn_rate(self):
        self.assertEqual(points_for_purchase(13.40, "Bronze"), 13)
        self.assertEqual(points_for_purchase(10.00, "Silver"), 12)
        self.assertEqual(points_for_purchase(9.99, "Gold"), 14)
        self.assertEqual(points_for_purchase(5.00, "Platinum"), 10)

    def test_points_never_negative(self):
        self.assertEqual(points_for_purchase(-49.50, "Bronze"), 0)


class TestRewardService(unittest.TestCase):

    def setUp(self):
        reset_database(seed_menu=False)
        self.db = SessionLocal()
        self.addCleanup(self.db.close)
        self.service = RewardService(self.db)

    def test_award_uses_tier_held_before_the_order(self):
        reward = self.service.get_or_create("user-1")
        reward.points = 90
        result = self.service.award("user-1", 50.0)
        self.assertEqual(result["points_earned"], 50)
        self.assertEqual(result["points"], 140)
        self.assertEqual(result["previous_tier"], "Bronze")
        self.assertEqual(result["tier"], "Silver")
        self.assertTrue(result["upgraded"])

        result = self.service.award("user-1", 10.0)
        self.assertEqual(result["points_earned"], 12)
        self.assertFalse(result["upgraded"])

    def test_status_for_unknown_customer_starts_at_bronze(self):
        self.assertEqual(self.service.status("new-user"),
                         {"points": 0, "tier": "Bronze", "next_tier": "Silver", "progress": 0.0})
        self.assertEqual(self.db.query(Reward).count(), 0)

    def test_leaderboard_without_profile_is_named_anonymous(self):
        self.service.award("user-2", 20.0)
        board = self.service.leaderboard()
        self.assertEqual(board, [{"username": "Anonymous User", "points": 20, "tier": "Bronze",
                                  "is_anonymous": False}])


if __name__ == '__main__':
    unittest.main()
