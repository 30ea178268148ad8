"""
지갑 API 라우터

- GET  /wallet: 내 지갑 (코인, 잔액, 누적 적립/출금)
- GET  /wallet/transactions: 코인 원장 (최신순)
- GET  /wallet/earnings: 현금 적립 내역 (최신순)
- GET  /wallet/integrity: 내 코인 정합성 검증
- GET  /coins/convert/quote: 전환 예상 금액
- POST /coins/convert: 코인 -> 루피 전환
"""

from fastapi import APIRouter, Depends, Query

from rewardapi.core.auth import get_current_user_id
from rewardapi.deps import get_ledger_service
from rewardapi.schemas.wallet import (
    CoinTransactionsResponse,
    ConversionQuoteResponse,
    ConversionRequest,
    ConversionResponse,
    EarningsResponse,
    WalletIntegrityResponse,
    WalletResponse,
)
from rewardapi.services.ledger_service import LedgerService

router = APIRouter(tags=["wallet"])


@router.get("/wallet", response_model=WalletResponse)
def get_my_wallet(
    user_id: str = Depends(get_current_user_id),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> WalletResponse:
    """내 지갑 조회 - 아직 적립 이력이 없으면 0으로 응답"""
    return ledger_service.get_wallet(user_id)


@router.get("/wallet/transactions", response_model=CoinTransactionsResponse)
def get_my_transactions(
    limit: int = Query(50, ge=1, le=100, description="페이지 크기"),
    offset: int = Query(0, ge=0, description="오프셋"),
    user_id: str = Depends(get_current_user_id),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> CoinTransactionsResponse:
    return ledger_service.get_transactions(user_id, limit=limit, offset=offset)


@router.get("/wallet/earnings", response_model=EarningsResponse)
def get_my_earnings(
    limit: int = Query(50, ge=1, le=100, description="페이지 크기"),
    offset: int = Query(0, ge=0, description="오프셋"),
    user_id: str = Depends(get_current_user_id),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> EarningsResponse:
    return ledger_service.get_earnings(user_id, limit=limit, offset=offset)


@router.get("/wallet/integrity", response_model=WalletIntegrityResponse)
def verify_my_integrity(
    user_id: str = Depends(get_current_user_id),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> WalletIntegrityResponse:
    return ledger_service.verify_integrity(user_id)


@router.get("/coins/convert/quote", response_model=ConversionQuoteResponse)
def get_conversion_quote(
    coins: int = Query(..., ge=0, description="전환할 코인 수"),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> ConversionQuoteResponse:
    """전환 예상 금액 - 나머지 코인은 차감되지 않음"""
    return ledger_service.conversion_quote(coins)


@router.post("/coins/convert", response_model=ConversionResponse)
def convert_coins(
    request: ConversionRequest,
    user_id: str = Depends(get_current_user_id),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> ConversionResponse:
    """
    코인 -> 루피 전환

    HTTP Status:
        200: 전환 성공
        400: 코인 부족(COINS_001) 또는 최소 전환 코인 미만(LEDGER_BELOW_MINIMUM)
    """
    return ledger_service.convert_coins_to_rupees(user_id, request.coins)
