from fastapi import APIRouter, Depends, status

from rewardapi.core.auth import get_current_user_id
from rewardapi.deps import get_withdrawal_service
from rewardapi.schemas.withdrawal import (
    WithdrawalCreateRequest,
    WithdrawalListResponse,
    WithdrawalResponse,
)
from rewardapi.services.withdrawal_service import WithdrawalService

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])


@router.post("", response_model=WithdrawalResponse, status_code=status.HTTP_201_CREATED)
def submit_withdrawal(
    request: WithdrawalCreateRequest,
    user_id: str = Depends(get_current_user_id),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalResponse:
    """
    출금 요청 - 잔액 차감은 관리자 승인 시점

    HTTP Status:
        201: 요청 생성
        400: 최소 금액 미만 또는 잔액 부족
        422: 은행 정보 누락
    """
    return withdrawal_service.submit_request(user_id, request)


@router.get("", response_model=WithdrawalListResponse)
def get_my_withdrawals(
    user_id: str = Depends(get_current_user_id),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalListResponse:
    return withdrawal_service.list_my_requests(user_id)
