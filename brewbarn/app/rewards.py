"""Loyalty ladder: tiers, progress and points earned per order."""
import math
from typing import Dict, List, NamedTuple, Optional, Tuple

from sqlalchemy.orm import Session

from .config import Config
from ..data.models import Profile, Reward


class Tier(NamedTuple):
    name: str
    threshold: int
    earn_rate: float
    benefits: Tuple[str, ...]


TIERS: List[Tier] = [
    Tier("Bronze", 0, 1.0, ("Earn 1 point per dollar spent", "Free Classic Espresso on signup")),
    Tier("Silver", 100, 1.2, ("Earn 1.2 points per dollar spent", "Free Cappuccino monthly",
                              "Birthday reward doubled")),
    Tier("Gold", 500, 1.5, ("Earn 1.5 points per dollar spent", "Free Caramel Latte monthly",
                            "Priority ordering")),
    Tier("Platinum", 1000, 2.0, ("Earn 2 points per dollar spent", "Free Frappuccino weekly",
                                 "Exclusive seasonal items early access")),
]
TIERS_BY_NAME: Dict[str, Tier] = {t.name: t for t in TIERS}


def tier_index(points: int) -> int:
    index = 0
    for i, tier in enumerate(TIERS):
        if points >= tier.threshold:
            index = i
    return index


def tier_for(points: int) -> Tier:
    return TIERS[tier_index(points)]


def next_tier(points: int) -> Optional[Tier]:
    index = tier_index(points)
    return TIERS[index + 1] if index + 1 < len(TIERS) else None


def tier_progress(points: int) -> Tuple[str, float]:
    """(name of the next tier, percent of the way there). 'Maximum' at the top."""
    current = tier_for(points)
    upcoming = next_tier(points)
    if upcoming is None:
        return "Maximum", 100.0
    span = upcoming.threshold - current.threshold
    return upcoming.name, (points - current.threshold) / span * 100


def points_to_next_tier(points: int) -> Optional[int]:
    upcoming = next_tier(points)
    return None if upcoming is None else upcoming.threshold - points


def points_for_purchase(total: float, tier_name: str) -> int:
    tier = TIERS_BY_NAME.get(tier_name, TIERS[0])
    # float drift is rounded away before flooring
    return max(0, int(math.floor(round(total * tier.earn_rate, 6))))


class RewardService:
    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, user_id: str) -> Reward:
        reward = self.db.query(Reward).filter(Reward.user_id == user_id).first()
        if reward is None:
            reward = Reward(user_id=user_id, points=0, tier=TIERS[0].name)
            self.db.add(reward)
            self.db.flush()
        return reward

    def status(self, user_id: str) -> Dict:
        """Read-only: a customer without a reward row reads as Bronze with 0 points."""
        reward = self.db.query(Reward).filter(Reward.user_id == user_id).first()
        points = (reward.points or 0) if reward else 0
        upcoming, progress = tier_progress(points)
        tier = reward.tier if reward and reward.tier else tier_for(points).name
        return {"points": points, "tier": tier,
                "next_tier": upcoming, "progress": progress}

    def award(self, user_id: str, total: float) -> Dict:
        """Add points for a purchase; the earn rate is the tier held before it."""
        reward = self.get_or_create(user_id)
        previous_tier = reward.tier or TIERS[0].name
        earned = points_for_purchase(total, previous_tier)
        reward.points = (reward.points or 0) + earned
        reward.tier = tier_for(reward.points).name
        self.db.flush()
        return {
            "points_earned": earned,
            "points": reward.points,
            "tier": reward.tier,
            "previous_tier": previous_tier,
            "upgraded": TIERS_BY_NAME[reward.tier].threshold > TIERS_BY_NAME.get(previous_tier, TIERS[0]).threshold,
        }

    def leaderboard(self, limit: int = Config.LEADERBOARD_SIZE) -> List[Dict]:
        rows = (
            self.db.query(Reward, Profile)
            .outerjoin(Profile, Profile.id == Reward.user_id)
            .order_by(Reward.points.desc(), Reward.id)
            .limit(limit)
            .all()
        )
        board = []
        for reward, profile in rows:
            visible = profile is None or profile.show_on_leaderboard is not False
            name = profile.full_name if (visible and profile is not None and profile.full_name) else None
            board.append({
                "username": name or "Anonymous User",
                "points": reward.points or 0,
                "tier": reward.tier,
                "is_anonymous": not visible,
            })
        return board
