from datetime import date

from sqlalchemy import Date, Integer, String, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from rewardapi.models.base import BaseModel, BigIntId


class Referral(BaseModel):
    __tablename__ = "referrals"
    __table_args__ = (Index("idx_referrals_referrer", "referrer_id"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    referrer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    # 한 사용자는 한 번만 추천받을 수 있음
    referred_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)


class ReferralTaskCompletion(BaseModel):
    __tablename__ = "referral_task_completions"
    __table_args__ = (
        UniqueConstraint(
            "referred_id", "task_id", "completed_on", name="uq_referral_task_day"
        ),
        Index("idx_referral_task_pair", "referrer_id", "referred_id"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    referrer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    referred_id: Mapped[str] = mapped_column(String(64), nullable=False)
    task_id: Mapped[int] = mapped_column(BigIntId, nullable=False)
    task_title: Mapped[str] = mapped_column(String(200), nullable=False)
    coins_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_on: Mapped[date] = mapped_column(Date, nullable=False)


class ReferralMilestone(BaseModel):
    __tablename__ = "referral_milestones"
    __table_args__ = (
        UniqueConstraint(
            "referrer_id", "referred_id", "milestone", name="uq_referral_milestone"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    referrer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    referred_id: Mapped[str] = mapped_column(String(64), nullable=False)
    milestone: Mapped[int] = mapped_column(Integer, nullable=False)
    bonus_coins: Mapped[int] = mapped_column(Integer, nullable=False)
