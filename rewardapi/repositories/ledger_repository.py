"""
원장 리포지토리 - 코인 거래(coin_transactions)와 현금 적립(earnings)

핵심 특징:
- 지갑 집계 필드 변경과 원장 항목 추가는 apply_delta() 한 곳에서만 수행
- 원장 항목은 추가만 가능 (수정/삭제 없음)
- wallet.coins == sum(coin_transactions.amount) 정합성 검증 제공
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from rewardapi.models.ledger import CoinTransaction, Earning
from rewardapi.models.wallet import UserWallet
from rewardapi.repositories.base import BaseRepository
from rewardapi.schemas.wallet import (
    CoinTransactionEntry,
    CoinTransactionsResponse,
    EarningEntry,
    EarningsResponse,
    WalletIntegrityResponse,
)
from rewardapi.services.rules_engine import LedgerDelta, WalletSnapshot


def _format_ts(value: Optional[datetime]) -> Optional[str]:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else None


class NegativeWalletError(ValueError):
    """적용 결과 코인/잔액이 음수가 되는 경우 - 규칙 엔진 검증 누락을 의미"""


class LedgerRepository(BaseRepository[CoinTransaction, CoinTransactionEntry]):
    def __init__(self, db: Session):
        super().__init__(CoinTransaction, CoinTransactionEntry, db)

    def apply_delta(
        self, user_id: str, wallet: UserWallet, delta: LedgerDelta, earned_on: date
    ) -> None:
        """잠긴 지갑에 변화량을 반영하고 원장 항목을 추가 (commit 하지 않음)"""
        after = delta.apply_to(WalletSnapshot.of(wallet))
        if after.coins < 0 or after.balance < 0:
            raise NegativeWalletError(
                f"Delta would make wallet negative for user {user_id}: "
                f"coins={after.coins}, balance={after.balance}"
            )

        wallet.coins = after.coins
        wallet.balance = after.balance
        wallet.total_earned = after.total_earned
        wallet.total_withdrawn = after.total_withdrawn

        for entry in delta.coin_entries:
            self.db.add(
                CoinTransaction(
                    user_id=user_id,
                    amount=entry.amount,
                    type=entry.type.value,
                    description=entry.description,
                    ref_id=entry.ref_id,
                )
            )
        for entry in delta.earning_entries:
            self.db.add(
                Earning(
                    user_id=user_id,
                    amount=entry.amount,
                    type=entry.type.value,
                    reference_id=entry.reference_id,
                    earned_on=earned_on,
                )
            )
        self.db.flush()

    def earning_exists(
        self, user_id: str, earning_type: str, reference_id: str, earned_on: date
    ) -> bool:
        return (
            self.db.query(Earning.id)
            .filter(
                Earning.user_id == user_id,
                Earning.type == earning_type,
                Earning.reference_id == reference_id,
                Earning.earned_on == earned_on,
            )
            .first()
            is not None
        )

    def sum_earnings(self, user_id: str, earning_type: str) -> int:
        result = (
            self.db.query(func.sum(Earning.amount))
            .filter(Earning.user_id == user_id, Earning.type == earning_type)
            .scalar()
        )
        return int(result or 0)

    def get_coin_transactions(
        self, user_id: str, coins: int, limit: int = 50, offset: int = 0
    ) -> CoinTransactionsResponse:
        """코인 거래 내역 조회 (최신순 페이징)"""
        total_count = self.count({"user_id": user_id})
        rows = (
            self.db.query(CoinTransaction)
            .filter(CoinTransaction.user_id == user_id)
            .order_by(desc(CoinTransaction.id))
            .limit(limit)
            .offset(offset)
            .all()
        )
        entries = [
            CoinTransactionEntry(
                id=row.id,
                amount=row.amount,
                type=row.type,
                description=row.description,
                created_at=_format_ts(row.created_at),
            )
            for row in rows
        ]
        return CoinTransactionsResponse(
            coins=coins,
            entries=entries,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )

    def get_earnings(
        self, user_id: str, balance: int, limit: int = 50, offset: int = 0
    ) -> EarningsResponse:
        """현금 적립 내역 조회 (최신순 페이징)"""
        base_query = self.db.query(Earning).filter(Earning.user_id == user_id)
        total_count = base_query.count()
        rows = base_query.order_by(desc(Earning.id)).limit(limit).offset(offset).all()
        entries = [
            EarningEntry(
                id=row.id,
                amount=row.amount,
                type=row.type,
                reference_id=row.reference_id,
                earned_on=row.earned_on.isoformat(),
                created_at=_format_ts(row.created_at),
            )
            for row in rows
        ]
        return EarningsResponse(
            balance=balance,
            entries=entries,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )

    def verify_integrity_for_user(
        self, user_id: str, wallet_coins: int
    ) -> WalletIntegrityResponse:
        """
        코인 정합성 검증

        검증 방식:
        1. 사용자의 모든 coin_transactions.amount 합계 계산
        2. 지갑의 coins 값과 비교
        3. 일치하지 않으면 MISMATCH
        """
        ledger_coins, entry_count = (
            self.db.query(
                func.coalesce(func.sum(CoinTransaction.amount), 0),
                func.count(CoinTransaction.id),
            )
            .filter(CoinTransaction.user_id == user_id)
            .one()
        )

        status = "OK" if int(ledger_coins) == wallet_coins else "MISMATCH"

        return WalletIntegrityResponse(
            status=status,
            user_id=user_id,
            wallet_coins=wallet_coins,
            ledger_coins=int(ledger_coins),
            entry_count=int(entry_count),
            verified_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
        )
