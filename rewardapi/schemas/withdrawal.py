from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class WithdrawalCreateRequest(BaseModel):
    """출금 요청"""

    amount: int = Field(..., gt=0, description="출금 금액 (루피)")
    bank_name: str = Field(..., min_length=1, max_length=200)
    account_number: str = Field(..., min_length=4, max_length=50)
    ifsc_code: str = Field(..., min_length=1, max_length=20)
    account_holder_name: str = Field(..., min_length=1, max_length=200)

    @field_validator("bank_name", "account_number", "ifsc_code", "account_holder_name")
    @classmethod
    def strip_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("ifsc_code")
    @classmethod
    def upper_ifsc(cls, value: str) -> str:
        return value.upper()


class WithdrawalDecisionRequest(BaseModel):
    admin_notes: Optional[str] = Field(None, max_length=1000)


class WithdrawalResponse(BaseModel):
    """출금 요청 응답 - 계좌번호는 마지막 4자리만 노출"""

    id: int
    user_id: str
    amount: int
    status: str
    bank_name: str
    account_number_masked: str
    ifsc_code: str
    account_holder_name: str
    admin_notes: Optional[str] = None
    created_at: Optional[str] = None
    processed_at: Optional[str] = None


class WithdrawalListResponse(BaseModel):
    withdrawals: List[WithdrawalResponse]
    total_count: int
