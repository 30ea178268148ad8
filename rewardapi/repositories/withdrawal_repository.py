from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from rewardapi.models.withdrawal import WithdrawalRequest, WithdrawalStatus
from rewardapi.repositories.base import BaseRepository
from rewardapi.schemas.withdrawal import WithdrawalResponse


def mask_account_number(account_number: str) -> str:
    visible = account_number[-4:]
    return "*" * max(len(account_number) - 4, 0) + visible


class WithdrawalRepository(BaseRepository[WithdrawalRequest, WithdrawalResponse]):
    def __init__(self, db: Session):
        super().__init__(WithdrawalRequest, WithdrawalResponse, db)

    def _to_schema(self, model_instance: WithdrawalRequest) -> WithdrawalResponse:
        return WithdrawalResponse(
            id=model_instance.id,
            user_id=model_instance.user_id,
            amount=model_instance.amount,
            status=model_instance.status,
            bank_name=model_instance.bank_name,
            account_number_masked=mask_account_number(model_instance.account_number),
            ifsc_code=model_instance.ifsc_code,
            account_holder_name=model_instance.account_holder_name,
            admin_notes=model_instance.admin_notes,
            created_at=(
                model_instance.created_at.strftime("%Y-%m-%d %H:%M:%S")
                if model_instance.created_at
                else None
            ),
            processed_at=(
                model_instance.processed_at.strftime("%Y-%m-%d %H:%M:%S")
                if model_instance.processed_at
                else None
            ),
        )

    def to_response(self, request: WithdrawalRequest) -> WithdrawalResponse:
        return self._to_schema(request)

    def create_request(
        self,
        user_id: str,
        amount: int,
        bank_name: str,
        account_number: str,
        ifsc_code: str,
        account_holder_name: str,
    ) -> WithdrawalRequest:
        request = WithdrawalRequest(
            user_id=user_id,
            amount=amount,
            bank_name=bank_name,
            account_number=account_number,
            ifsc_code=ifsc_code,
            account_holder_name=account_holder_name,
            status=WithdrawalStatus.PENDING.value,
        )
        self.db.add(request)
        self.db.flush()
        return request

    def lock_request(self, request_id: int) -> Optional[WithdrawalRequest]:
        return self.lock_by_field("id", request_id)

    def list_for_user(self, user_id: str) -> List[WithdrawalResponse]:
        rows = (
            self.db.query(WithdrawalRequest)
            .filter(WithdrawalRequest.user_id == user_id)
            .order_by(desc(WithdrawalRequest.id))
            .all()
        )
        return [self._to_schema(row) for row in rows]

    def list_by_status(self, status: Optional[str], limit: int, offset: int) -> List[WithdrawalResponse]:
        query = self.db.query(WithdrawalRequest)
        if status:
            query = query.filter(WithdrawalRequest.status == status)
        rows = query.order_by(desc(WithdrawalRequest.id)).limit(limit).offset(offset).all()
        return [self._to_schema(row) for row in rows]
