from pydantic import BaseModel, Field
from typing import List


class ReferralCreateRequest(BaseModel):
    """신규 가입자의 추천인 등록 (가입 처리 후 호출, 가입자 본인이 요청)"""

    referrer_id: str = Field(..., min_length=1, max_length=64)


class ReferralResponse(BaseModel):
    referrer_id: str
    referred_id: str
    reward_amount: int
    created_at: str


class ReferralMilestoneEntry(BaseModel):
    referred_id: str
    milestone: int
    bonus_coins: int


class ReferralSummaryResponse(BaseModel):
    referral_count: int
    total_referral_earnings: int
    task_completions: int
    milestones: List[ReferralMilestoneEntry]
