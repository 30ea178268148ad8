from fastapi import APIRouter, Depends, Path

from rewardapi.core.auth import get_current_user_id
from rewardapi.deps import get_ledger_service
from rewardapi.schemas.video import AdViewRequest, AdViewResponse, VideoViewResponse
from rewardapi.services.ledger_service import LedgerService

router = APIRouter(tags=["videos"])


@router.post("/videos/{video_id}/view", response_model=VideoViewResponse)
def record_video_view(
    video_id: int = Path(..., gt=0),
    user_id: str = Depends(get_current_user_id),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> VideoViewResponse:
    """영상 시청 적립 - 같은 날 재호출은 200 + credited=false"""
    return ledger_service.record_video_view(user_id, video_id)


@router.post("/ads/{ad_id}/view", response_model=AdViewResponse)
def record_ad_view(
    request: AdViewRequest,
    ad_id: int = Path(..., gt=0),
    user_id: str = Depends(get_current_user_id),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> AdViewResponse:
    return ledger_service.record_ad_view(ad_id, request.video_id, user_id)
