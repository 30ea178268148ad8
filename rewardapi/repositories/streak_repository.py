from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from rewardapi.models.streak import UserStreak
from rewardapi.repositories.base import BaseRepository
from rewardapi.schemas.streak import StreakResponse
from rewardapi.services.streak_tracker import StreakRecord


class StreakRepository(BaseRepository[UserStreak, StreakResponse]):
    def __init__(self, db: Session):
        super().__init__(UserStreak, StreakResponse, db)

    def get_streak(self, user_id: str) -> Optional[UserStreak]:
        return self.db.query(UserStreak).filter(UserStreak.user_id == user_id).first()

    def lock_streak(self, user_id: str) -> UserStreak:
        """연속 출석 행 잠금 - 같은 사용자의 동시 체크인은 여기서 직렬화"""
        self.insert_ignore(
            {"user_id": user_id, "current_streak": 0, "longest_streak": 0},
            conflict_columns=["user_id"],
        )
        streak = self.lock_by_field("user_id", user_id)
        if streak is None:
            raise RuntimeError(f"Streak row missing after upsert for user {user_id}")
        return streak

    @staticmethod
    def to_record(streak: UserStreak) -> Optional[StreakRecord]:
        if streak.last_login_date is None:
            return None
        return StreakRecord(
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            last_login_date=streak.last_login_date,
        )

    def save_record(self, streak: UserStreak, record: StreakRecord) -> None:
        streak.current_streak = record.current_streak
        streak.longest_streak = record.longest_streak
        streak.last_login_date = record.last_login_date
        streak.streak_updated_at = datetime.now(timezone.utc)
        self.db.flush()
