import logging
from typing import Optional

from sqlalchemy.orm import Session

from rewardapi.repositories.task_repository import TaskRepository
from rewardapi.schemas.tasks import DailyTasksResponse, DailyTaskStatus
from rewardapi.services.ledger_service import Clock
from rewardapi.services.rules_engine import task_rule_for
from rewardapi.utils.date_utils import get_day_keys

logger = logging.getLogger(__name__)


class TaskService:
    """오늘 기준 일일 태스크 목록과 진행 상황 조회 (수령은 LedgerService)"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock: Clock = clock or get_day_keys
        self.task_repo = TaskRepository(db)

    def list_tasks(self, user_id: str) -> DailyTasksResponse:
        days = self.clock()
        progress = self.task_repo.get_progress(user_id, days.today)
        claimed_ids = self.task_repo.claimed_task_ids(user_id, days.today)

        statuses = []
        for task in self.task_repo.get_active_tasks():
            rule = task_rule_for(task.task_type)
            if rule is None:
                logger.warning(f"Task {task.id} has unknown task_type {task.task_type}")
            statuses.append(
                DailyTaskStatus(
                    id=task.id,
                    title=task.title,
                    description=task.description,
                    task_type=task.task_type,
                    reward_amount=task.reward_amount,
                    progress=rule.percent(progress) if rule else 0,
                    completed=rule.is_complete(progress) if rule else False,
                    reward_claimed=task.id in claimed_ids,
                )
            )

        return DailyTasksResponse(
            date=days.today_key,
            tasks=statuses,
            completed_count=sum(1 for s in statuses if s.completed),
            total_reward=sum(s.reward_amount for s in statuses if s.reward_claimed),
        )
