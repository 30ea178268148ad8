"""
관리자 API 라우터 - 역할 헤더가 admin 인 요청만 허용

- GET  /admin/withdrawals: 출금 요청 목록 (상태 필터)
- POST /admin/withdrawals/{id}/approve: 승인 (잔액 차감)
- POST /admin/withdrawals/{id}/reject: 거절
- GET  /admin/integrity/{user_id}: 사용자 코인 정합성 검증
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from rewardapi.core.auth import require_admin
from rewardapi.deps import get_ledger_service, get_withdrawal_service
from rewardapi.models.withdrawal import WithdrawalStatus
from rewardapi.schemas.wallet import WalletIntegrityResponse
from rewardapi.schemas.withdrawal import (
    WithdrawalDecisionRequest,
    WithdrawalListResponse,
    WithdrawalResponse,
)
from rewardapi.services.ledger_service import LedgerService
from rewardapi.services.withdrawal_service import WithdrawalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/withdrawals", response_model=WithdrawalListResponse)
def list_withdrawals(
    status: Optional[WithdrawalStatus] = Query(None, description="상태 필터"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin_id: str = Depends(require_admin),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalListResponse:
    return withdrawal_service.list_requests(
        status.value if status else None, limit=limit, offset=offset
    )


@router.post("/withdrawals/{request_id}/approve", response_model=WithdrawalResponse)
def approve_withdrawal(
    request: WithdrawalDecisionRequest,
    request_id: int = Path(..., gt=0),
    admin_id: str = Depends(require_admin),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalResponse:
    """
    출금 승인 - 승인 시점 잔액으로 다시 검증

    HTTP Status:
        200: 승인 및 잔액 차감
        400: 잔액 부족 (BALANCE_001)
        404: 요청 없음
        409: 이미 처리된 요청 (WITHDRAWAL_STATUS)
    """
    logger.info(f"Admin {admin_id} approving withdrawal {request_id}")
    return withdrawal_service.approve_request(request_id, request.admin_notes)


@router.post("/withdrawals/{request_id}/reject", response_model=WithdrawalResponse)
def reject_withdrawal(
    request: WithdrawalDecisionRequest,
    request_id: int = Path(..., gt=0),
    admin_id: str = Depends(require_admin),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service),
) -> WithdrawalResponse:
    logger.info(f"Admin {admin_id} rejecting withdrawal {request_id}")
    return withdrawal_service.reject_request(request_id, request.admin_notes)


@router.get("/integrity/{user_id}", response_model=WalletIntegrityResponse)
def verify_user_integrity(
    user_id: str = Path(..., min_length=1, max_length=64),
    admin_id: str = Depends(require_admin),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> WalletIntegrityResponse:
    return ledger_service.verify_integrity(user_id)
