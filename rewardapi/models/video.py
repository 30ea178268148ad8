"""
영상/광고 카탈로그 모델

영상과 광고 자체의 관리(CRUD)는 이 서비스의 범위가 아니며,
원장 처리에 필요한 조회수 카운터와 시청/광고 기록만 다룹니다.
"""

from datetime import date
from typing import Optional

from sqlalchemy import BigInteger, Boolean, Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from rewardapi.models.base import BaseModel, BigIntId


class Video(BaseModel):
    __tablename__ = "videos"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    owner_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    views: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class VideoWatch(BaseModel):
    """(user_id, video_id, watch_date)당 한 번만 적립"""

    __tablename__ = "video_watches"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", "watch_date", name="uq_video_watch_day"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    video_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("videos.id"), nullable=False
    )
    watch_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Ad(BaseModel):
    __tablename__ = "ads"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    ad_type: Mapped[str] = mapped_column(String(30), nullable=False, default="video")
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    earnings_per_view: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class AdView(BaseModel):
    __tablename__ = "ad_views"
    __table_args__ = (
        UniqueConstraint(
            "ad_id", "video_id", "viewer_id", "view_date", name="uq_ad_view_day"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    ad_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("ads.id"), nullable=False)
    video_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("videos.id"), nullable=False
    )
    viewer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    video_owner_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    earnings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_date: Mapped[date] = mapped_column(Date, nullable=False)


class CreatorEarning(BaseModel):
    __tablename__ = "creator_earnings"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    creator_id: Mapped[str] = mapped_column(String(64), nullable=False)
    video_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("videos.id"), nullable=True
    )
    ad_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("ads.id"), nullable=True
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False, default="ad_revenue")
