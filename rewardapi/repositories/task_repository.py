from datetime import date
from typing import List, Optional, Set

from sqlalchemy import func
from sqlalchemy.orm import Session

from rewardapi.models.referral import Referral
from rewardapi.models.streak import UserStreak
from rewardapi.models.tasks import DailyTask, UserDailyTask
from rewardapi.models.video import VideoWatch
from rewardapi.repositories.base import BaseRepository
from rewardapi.schemas.tasks import DailyTaskStatus
from rewardapi.services.rules_engine import TaskProgress


class TaskRepository(BaseRepository[DailyTask, DailyTaskStatus]):
    def __init__(self, db: Session):
        super().__init__(DailyTask, DailyTaskStatus, db)

    def get_active_tasks(self) -> List[DailyTask]:
        return (
            self.db.query(DailyTask)
            .filter(DailyTask.is_active.is_(True))
            .order_by(DailyTask.id)
            .all()
        )

    def get_active_task(self, task_id: int) -> Optional[DailyTask]:
        task = self.get_model(task_id)
        if task is None or not task.is_active:
            return None
        return task

    def claimed_task_ids(self, user_id: str, task_date: date) -> Set[int]:
        rows = (
            self.db.query(UserDailyTask.task_id)
            .filter(
                UserDailyTask.user_id == user_id,
                UserDailyTask.task_date == task_date,
                UserDailyTask.reward_claimed.is_(True),
            )
            .all()
        )
        return {row.task_id for row in rows}

    def is_claimed(self, user_id: str, task_id: int, task_date: date) -> bool:
        return task_id in self.claimed_task_ids(user_id, task_date)

    def mark_claimed(self, user_id: str, task_id: int, task_date: date) -> UserDailyTask:
        completion = UserDailyTask(
            user_id=user_id,
            task_id=task_id,
            task_date=task_date,
            reward_claimed=True,
        )
        self.db.add(completion)
        self.db.flush()
        return completion

    def get_progress(self, user_id: str, today: date) -> TaskProgress:
        """태스크 적격성 판정용 진행 상황을 저장소에서 직접 다시 계산"""
        watch_count = (
            self.db.query(func.count(VideoWatch.id))
            .filter(VideoWatch.user_id == user_id, VideoWatch.watch_date == today)
            .scalar()
        )
        referral_count = (
            self.db.query(func.count(Referral.id))
            .filter(Referral.referrer_id == user_id)
            .scalar()
        )
        streak = (
            self.db.query(UserStreak).filter(UserStreak.user_id == user_id).first()
        )
        checked_in_today = bool(streak and streak.last_login_date == today)

        return TaskProgress(
            watch_count_today=int(watch_count or 0),
            referral_count=int(referral_count or 0),
            current_streak=streak.current_streak if checked_in_today else 0,
            checked_in_today=checked_in_today,
        )
