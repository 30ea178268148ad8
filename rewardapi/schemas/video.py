from pydantic import BaseModel, Field


class VideoViewResponse(BaseModel):
    """영상 시청 적립 결과 - 같은 날 재호출 시 credited=False"""

    video_id: int
    credited: bool = Field(..., description="이번 호출로 적립되었는지 여부")
    amount: int = Field(0, description="적립 금액")


class AdViewRequest(BaseModel):
    video_id: int = Field(..., gt=0, description="광고가 재생된 영상 ID")


class AdViewResponse(BaseModel):
    ad_id: int
    video_id: int
    credited: bool
    viewer_amount: int = 0
    creator_amount: int = 0
