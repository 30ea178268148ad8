from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from rewardapi.models.base import BaseModel, BigIntId


class DailyTask(BaseModel):
    __tablename__ = "daily_tasks"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # TaskKind 값 (watch_video, watch_3_videos, daily_login, referral, streak_7)
    task_type: Mapped[str] = mapped_column(String(50), nullable=False)
    reward_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class UserDailyTask(BaseModel):
    """사용자별/태스크별/날짜별 완료 기록 - 같은 날 두 번 수령 불가"""

    __tablename__ = "user_daily_tasks"
    __table_args__ = (
        UniqueConstraint("user_id", "task_id", "date", name="uq_user_task_date"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    task_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("daily_tasks.id"), nullable=False
    )
    task_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    reward_claimed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
