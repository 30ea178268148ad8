from pydantic import BaseModel, Field
from typing import List, Optional


class WalletResponse(BaseModel):
    """지갑 잔액 응답"""

    user_id: str = Field(..., description="사용자 ID")
    coins: int = Field(0, description="보유 코인")
    balance: int = Field(0, description="출금 가능 잔액 (루피)")
    total_earned: int = Field(0, description="누적 적립액")
    total_withdrawn: int = Field(0, description="누적 출금액")

    class Config:
        from_attributes = True


class CoinTransactionEntry(BaseModel):
    """코인 원장 항목"""

    id: int = Field(..., description="원장 항목 ID")
    amount: int = Field(..., description="코인 변화량 (양수: 적립, 음수: 차감)")
    type: str = Field(..., description="거래 유형 (earned, converted, spent, bonus)")
    description: Optional[str] = Field(None, description="거래 설명")
    created_at: Optional[str] = Field(None, description="생성 시간")


class CoinTransactionsResponse(BaseModel):
    coins: int = Field(..., description="현재 코인")
    entries: List[CoinTransactionEntry] = Field(..., description="원장 항목 목록")
    total_count: int = Field(..., description="전체 항목 수")
    has_next: bool = Field(..., description="다음 페이지 존재 여부")


class EarningEntry(BaseModel):
    id: int
    amount: int
    type: str
    reference_id: Optional[str] = None
    earned_on: str
    created_at: Optional[str] = None


class EarningsResponse(BaseModel):
    balance: int = Field(..., description="현재 잔액")
    entries: List[EarningEntry]
    total_count: int
    has_next: bool


class ConversionRequest(BaseModel):
    """코인 -> 현금 전환 요청"""

    coins: int = Field(..., gt=0, description="전환할 코인 수")


class ConversionQuoteResponse(BaseModel):
    coins_requested: int
    rupees: int = Field(..., description="지급될 루피")
    coins_used: int = Field(..., description="실제 차감될 코인 (나머지는 보존)")
    coins_per_rupee: int
    min_coins: int
    meets_minimum: bool


class ConversionResponse(BaseModel):
    success: bool = True
    rupees: int
    coins_used: int
    wallet: WalletResponse


class WalletIntegrityResponse(BaseModel):
    """코인 정합성 검증 응답 - wallet.coins == sum(coin_transactions.amount)"""

    status: str = Field(..., description="검증 상태 (OK, MISMATCH)")
    user_id: str
    wallet_coins: int
    ledger_coins: int
    entry_count: int
    verified_at: str
