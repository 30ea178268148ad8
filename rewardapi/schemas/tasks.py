from pydantic import BaseModel, Field
from typing import List, Optional


class DailyTaskStatus(BaseModel):
    """오늘 기준 태스크 진행 상태"""

    id: int
    title: str
    description: Optional[str] = None
    task_type: str
    reward_amount: int
    progress: int = Field(..., ge=0, le=100, description="진행률 (%)")
    completed: bool
    reward_claimed: bool


class DailyTasksResponse(BaseModel):
    date: str = Field(..., description="서버 기준 날짜 (YYYY-MM-DD)")
    tasks: List[DailyTaskStatus]
    completed_count: int
    total_reward: int


class TaskClaimResponse(BaseModel):
    success: bool = True
    task_id: int
    reward_amount: int
    balance: int
    message: str
