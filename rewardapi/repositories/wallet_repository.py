"""
지갑 리포지토리

지갑 행은 첫 적립 시점에 지연 생성되며, 모든 변경은 행 잠금 이후에만 수행됩니다.
같은 사용자에 대한 동시 요청은 lock_wallet()에서 직렬화됩니다.
"""

from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from rewardapi.models.wallet import UserWallet
from rewardapi.repositories.base import BaseRepository
from rewardapi.schemas.wallet import WalletResponse


class WalletRepository(BaseRepository[UserWallet, WalletResponse]):
    def __init__(self, db: Session):
        super().__init__(UserWallet, WalletResponse, db)

    def get_wallet(self, user_id: str) -> WalletResponse:
        """잠금 없이 조회 - 지갑이 없으면 0 잔액으로 응답"""
        wallet = (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .first()
        )
        if wallet is None:
            return WalletResponse(user_id=user_id)
        return self._to_schema(wallet)

    def lock_wallet(self, user_id: str) -> UserWallet:
        """지갑 행을 (없으면 생성 후) 잠금"""
        self.insert_ignore(
            {
                "user_id": user_id,
                "coins": 0,
                "balance": 0,
                "total_earned": 0,
                "total_withdrawn": 0,
            },
            conflict_columns=["user_id"],
        )
        wallet: Optional[UserWallet] = self.lock_by_field("user_id", user_id)
        if wallet is None:
            raise RuntimeError(f"Wallet row missing after upsert for user {user_id}")
        return wallet

    def lock_wallets(self, user_ids: Iterable[str]) -> Dict[str, UserWallet]:
        """여러 사용자 지갑을 user_id 오름차순으로 잠금 (교착 상태 방지)"""
        return {user_id: self.lock_wallet(user_id) for user_id in sorted(set(user_ids))}
