"""Customer profiles."""
from typing import Dict, Optional, Tuple

from sqlalchemy.orm import Session

from .errors import NotFoundError
from .rewards import RewardService
from ..data.models import Profile


class ProfileService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Profile:
        profile = self.db.get(Profile, user_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    def upsert(self, user_id: str, changes: Dict) -> Tuple[Profile, bool]:
        """Apply a partial update. Returns (profile, created)."""
        profile: Optional[Profile] = self.db.get(Profile, user_id)
        created = profile is None
        if created:
            profile = Profile(id=user_id, show_on_leaderboard=True)
            self.db.add(profile)
            # every new customer starts on the bottom rung
            RewardService(self.db).get_or_create(user_id)
        for field, value in changes.items():
            if field == "show_on_leaderboard" and value is None:
                continue
            setattr(profile, field, value)
        self.db.commit()
        self.db.refresh(profile)
        return profile, created
