from fastapi import APIRouter, Depends, Path

from rewardapi.core.auth import get_current_user_id
from rewardapi.deps import get_ledger_service, get_task_service
from rewardapi.schemas.tasks import DailyTasksResponse, TaskClaimResponse
from rewardapi.services.ledger_service import LedgerService
from rewardapi.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=DailyTasksResponse)
def list_my_tasks(
    user_id: str = Depends(get_current_user_id),
    task_service: TaskService = Depends(get_task_service),
) -> DailyTasksResponse:
    """오늘의 태스크 목록 - 진행률은 서버 기록으로 계산"""
    return task_service.list_tasks(user_id)


@router.post("/{task_id}/claim", response_model=TaskClaimResponse)
def claim_task(
    task_id: int = Path(..., gt=0),
    user_id: str = Depends(get_current_user_id),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> TaskClaimResponse:
    """
    태스크 보상 수령

    HTTP Status:
        200: 수령 성공
        400: 완료 조건 미충족 (LEDGER_NOT_ELIGIBLE)
        404: 태스크 없음
        409: 오늘 이미 수령 (LEDGER_ALREADY_CLAIMED)
    """
    return ledger_service.claim_task_reward(user_id, task_id)
