from fastapi import APIRouter, Depends, status

from rewardapi.core.auth import get_current_user_id
from rewardapi.deps import get_referral_service
from rewardapi.schemas.referral import (
    ReferralCreateRequest,
    ReferralResponse,
    ReferralSummaryResponse,
)
from rewardapi.services.referral_service import ReferralService

router = APIRouter(prefix="/referrals", tags=["referrals"])


@router.post("", response_model=ReferralResponse, status_code=status.HTTP_201_CREATED)
def register_referral(
    request: ReferralCreateRequest,
    user_id: str = Depends(get_current_user_id),
    referral_service: ReferralService = Depends(get_referral_service),
) -> ReferralResponse:
    """추천인 등록 - 요청자가 피추천인"""
    return referral_service.register_referral(request.referrer_id, user_id)


@router.get("", response_model=ReferralSummaryResponse)
def get_my_referrals(
    user_id: str = Depends(get_current_user_id),
    referral_service: ReferralService = Depends(get_referral_service),
) -> ReferralSummaryResponse:
    return referral_service.get_summary(user_id)
