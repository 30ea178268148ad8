"""
원장(Ledger) 데이터 모델

- CoinTransaction: 코인 증감 내역 (append-only)
- Earning: 현금 잔액 적립 내역 (append-only)

두 테이블 모두 생성 후 수정되지 않으며, 지갑 집계 값의 감사 추적을 제공합니다.
"""

import enum
from datetime import date
from typing import Optional

from sqlalchemy import BigInteger, Date, Integer, String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from rewardapi.models.base import BaseModel, BigIntId


class CoinTransactionType(str, enum.Enum):
    EARNED = "earned"
    CONVERTED = "converted"
    SPENT = "spent"
    BONUS = "bonus"


class EarningType(str, enum.Enum):
    VIDEO_WATCH = "video_watch"
    AD_VIEW = "ad_view"
    REFERRAL = "referral"
    DAILY_TASK = "daily_task"
    COIN_CONVERSION = "coin_conversion"


class CoinTransaction(BaseModel):
    __tablename__ = "coin_transactions"
    __table_args__ = (Index("idx_coin_transactions_user", "user_id"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # 양수 = 적립, 음수 = 차감
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # 중복 지급 방지용 참조 키 (예: "streak_bonus_u1_2025-01-26")
    ref_id: Mapped[Optional[str]] = mapped_column(String(200), unique=True, nullable=True)


class Earning(BaseModel):
    __tablename__ = "earnings"
    __table_args__ = (
        Index("idx_earnings_user_type_day", "user_id", "type", "earned_on"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)

    # 이 적립이 연결된 영상/태스크/추천 ID
    reference_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # 서버 기준 달력 날짜 (하루 단위 중복 판정에 사용)
    earned_on: Mapped[date] = mapped_column(Date, nullable=False)
