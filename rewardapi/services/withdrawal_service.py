"""
출금 요청 서비스

요청(pending) -> 관리자 승인(approved) | 거절(rejected) 단방향 전이.
잔액 차감은 승인 시점에 LedgerService.process_withdrawal 로 한 번만 수행되며,
요청 행 잠금과 차감은 같은 트랜잭션입니다.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from rewardapi.core.exceptions import (
    BaseAPIException,
    InvalidStatusTransitionError,
    NotFoundError,
)
from rewardapi.models.withdrawal import WithdrawalRequest, WithdrawalStatus
from rewardapi.repositories.wallet_repository import WalletRepository
from rewardapi.repositories.withdrawal_repository import WithdrawalRepository
from rewardapi.schemas.withdrawal import (
    WithdrawalCreateRequest,
    WithdrawalListResponse,
    WithdrawalResponse,
)
from rewardapi.services import rules_engine
from rewardapi.services.ledger_service import Clock, LedgerService, rejection_error
from rewardapi.services.rules_engine import WalletSnapshot

logger = logging.getLogger(__name__)


class WithdrawalService:
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.wallet_repo = WalletRepository(db)
        self.withdrawal_repo = WithdrawalRepository(db)
        self.ledger_service = LedgerService(db, clock=clock)

    def submit_request(self, user_id: str, request: WithdrawalCreateRequest) -> WithdrawalResponse:
        """출금 요청 생성 - 요청 시점 잔액 확인 (차감은 승인 시)

        Raises:
            BelowMinimumError: 최소 출금액 미만
            InsufficientBalanceError: 잔액 부족
        """
        try:
            wallet = self.wallet_repo.lock_wallet(user_id)
            rejection = rules_engine.withdrawal_request(
                WalletSnapshot.of(wallet), request.amount
            )
            if rejection is not None:
                raise rejection_error(rejection)

            created = self.withdrawal_repo.create_request(
                user_id=user_id,
                amount=request.amount,
                bank_name=request.bank_name,
                account_number=request.account_number,
                ifsc_code=request.ifsc_code,
                account_holder_name=request.account_holder_name,
            )
            self.db.commit()
        except BaseAPIException as e:
            self.db.rollback()
            logger.warning(f"Withdrawal request rejected for {user_id}: {e.message}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create withdrawal request for {user_id}: {str(e)}")
            raise

        logger.info(f"Withdrawal request {created.id} created: {user_id} {request.amount}")
        return self.withdrawal_repo.to_response(created)

    def approve_request(self, request_id: int, admin_notes: Optional[str] = None) -> WithdrawalResponse:
        """관리자 승인 - 실행 시점 잔액으로 다시 검증 후 차감"""
        try:
            request = self._lock_pending(request_id)
            self.ledger_service.process_withdrawal(
                request.user_id, request.amount, commit=False
            )
            self._close(request, WithdrawalStatus.APPROVED, admin_notes)
            self.db.commit()
        except BaseAPIException as e:
            self.db.rollback()
            logger.warning(f"Withdrawal {request_id} approval failed: {e.message}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to approve withdrawal {request_id}: {str(e)}")
            raise

        logger.info(f"Withdrawal {request_id} approved ({request.amount} for {request.user_id})")
        return self.withdrawal_repo.to_response(request)

    def reject_request(self, request_id: int, admin_notes: Optional[str] = None) -> WithdrawalResponse:
        try:
            request = self._lock_pending(request_id)
            self._close(request, WithdrawalStatus.REJECTED, admin_notes)
            self.db.commit()
        except BaseAPIException as e:
            self.db.rollback()
            logger.warning(f"Withdrawal {request_id} rejection failed: {e.message}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to reject withdrawal {request_id}: {str(e)}")
            raise

        logger.info(f"Withdrawal {request_id} rejected")
        return self.withdrawal_repo.to_response(request)

    def _lock_pending(self, request_id: int) -> WithdrawalRequest:
        request = self.withdrawal_repo.lock_request(request_id)
        if request is None:
            raise NotFoundError(f"Withdrawal request not found: {request_id}")
        if request.status != WithdrawalStatus.PENDING.value:
            raise InvalidStatusTransitionError(
                f"Withdrawal request {request_id} is already {request.status}",
                {"request_id": request_id, "status": request.status},
            )
        return request

    def _close(
        self, request: WithdrawalRequest, status: WithdrawalStatus, admin_notes: Optional[str]
    ) -> None:
        request.status = status.value
        request.admin_notes = admin_notes
        request.processed_at = datetime.now(timezone.utc)
        self.db.flush()

    def list_my_requests(self, user_id: str) -> WithdrawalListResponse:
        items = self.withdrawal_repo.list_for_user(user_id)
        return WithdrawalListResponse(withdrawals=items, total_count=len(items))

    def list_requests(
        self, status: Optional[str] = None, limit: int = 50, offset: int = 0
    ) -> WithdrawalListResponse:
        items = self.withdrawal_repo.list_by_status(status, limit, offset)
        return WithdrawalListResponse(withdrawals=items, total_count=len(items))
