from fastapi import APIRouter, Depends

from rewardapi.core.auth import get_current_user_id
from rewardapi.deps import get_streak_service
from rewardapi.schemas.streak import StreakCheckInResponse, StreakResponse
from rewardapi.services.streak_service import StreakService

router = APIRouter(prefix="/streak", tags=["streak"])


@router.get("", response_model=StreakResponse)
def get_my_streak(
    user_id: str = Depends(get_current_user_id),
    streak_service: StreakService = Depends(get_streak_service),
) -> StreakResponse:
    return streak_service.get_streak(user_id)


@router.post("/check-in", response_model=StreakCheckInResponse)
def check_in(
    user_id: str = Depends(get_current_user_id),
    streak_service: StreakService = Depends(get_streak_service),
) -> StreakCheckInResponse:
    """오늘 출석 - 같은 날 재호출은 state=ACTIVE_TODAY 로 변경 없음"""
    return streak_service.check_in(user_id)
