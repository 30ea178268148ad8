from pydantic import BaseModel, Field
from typing import Optional


class StreakResponse(BaseModel):
    user_id: str
    current_streak: int = 0
    longest_streak: int = 0
    last_login_date: Optional[str] = None
    days_until_bonus: int = Field(..., description="보너스까지 남은 일수")
    bonus_coins: int


class StreakCheckInResponse(BaseModel):
    state: str = Field(..., description="전이 전 상태 (NO_RECORD, ACTIVE_TODAY, CONTINUING, BROKEN)")
    streak: StreakResponse
    bonus_awarded: bool = False
    bonus_coins: int = 0
