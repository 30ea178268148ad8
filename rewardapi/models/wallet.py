"""
지갑 데이터 모델

사용자당 하나의 지갑 행이 존재하며 코인(coins)과 현금 잔액(balance)을 함께 보관합니다.
모든 금액은 최소 단위 정수로 저장하며, 변경은 LedgerService를 통해서만 이루어집니다.
"""

from sqlalchemy import BigInteger, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from rewardapi.models.base import BaseModel, BigIntId


class UserWallet(BaseModel):
    __tablename__ = "user_wallets"
    __table_args__ = (
        CheckConstraint("coins >= 0", name="ck_wallet_coins_non_negative"),
        CheckConstraint("balance >= 0", name="ck_wallet_balance_non_negative"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)

    # 소프트 재화 - 코인 거래 원장(coin_transactions)의 합과 항상 일치해야 함
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # 출금 가능한 현금 잔액 (루피 단위 정수)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # 누적 값 - 감소하지 않음
    total_earned: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_withdrawn: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
