from datetime import date
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from rewardapi.models.video import Ad, AdView, CreatorEarning, Video, VideoWatch
from rewardapi.repositories.base import BaseRepository
from rewardapi.schemas.video import VideoViewResponse


class VideoRepository(BaseRepository[Video, VideoViewResponse]):
    """영상 시청/광고 기록 - 카탈로그 관리 자체는 외부 담당"""

    def __init__(self, db: Session):
        super().__init__(Video, VideoViewResponse, db)

    def get_active_video(self, video_id: int) -> Optional[Video]:
        video = self.get_model(video_id)
        if video is None or not video.is_active:
            return None
        return video

    def get_ad(self, ad_id: int) -> Optional[Ad]:
        return self.db.get(Ad, ad_id)

    def add_watch(self, user_id: str, video_id: int, watch_date: date, amount: int) -> VideoWatch:
        watch = VideoWatch(
            user_id=user_id,
            video_id=video_id,
            watch_date=watch_date,
            amount_earned=amount,
        )
        self.db.add(watch)
        self.db.flush()
        return watch

    def has_ad_view(self, ad_id: int, video_id: int, viewer_id: str, view_date: date) -> bool:
        return (
            self.db.query(AdView.id)
            .filter(
                AdView.ad_id == ad_id,
                AdView.video_id == video_id,
                AdView.viewer_id == viewer_id,
                AdView.view_date == view_date,
            )
            .first()
            is not None
        )

    def add_ad_view(
        self,
        ad_id: int,
        video_id: int,
        viewer_id: str,
        video_owner_id: Optional[str],
        earnings: int,
        view_date: date,
    ) -> AdView:
        ad_view = AdView(
            ad_id=ad_id,
            video_id=video_id,
            viewer_id=viewer_id,
            video_owner_id=video_owner_id,
            earnings=earnings,
            view_date=view_date,
        )
        self.db.add(ad_view)
        self.db.flush()
        return ad_view

    def add_creator_earning(self, creator_id: str, video_id: int, ad_id: int, amount: int) -> CreatorEarning:
        earning = CreatorEarning(
            creator_id=creator_id,
            video_id=video_id,
            ad_id=ad_id,
            amount=amount,
            type="ad_revenue",
        )
        self.db.add(earning)
        self.db.flush()
        return earning

    def increment_view_count(self, video_id: int) -> None:
        """원자적 UPDATE로 조회수 증가 (commit은 호출자 담당)"""
        self.db.execute(
            update(Video).where(Video.id == video_id).values(views=Video.views + 1)
        )

    def increment_ad_view_count(self, ad_id: int) -> None:
        self.db.execute(
            update(Ad).where(Ad.id == ad_id).values(view_count=Ad.view_count + 1)
        )
