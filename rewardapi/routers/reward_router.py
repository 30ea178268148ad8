from typing import List

from fastapi import APIRouter, Depends, Path

from rewardapi.core.auth import get_current_user_id
from rewardapi.deps import get_ledger_service, get_reward_service
from rewardapi.schemas.rewards import (
    OwnedReward,
    RewardCatalogResponse,
    RewardPurchaseResponse,
)
from rewardapi.services.ledger_service import LedgerService
from rewardapi.services.reward_service import RewardService

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("", response_model=RewardCatalogResponse)
def get_reward_catalog(
    user_id: str = Depends(get_current_user_id),
    reward_service: RewardService = Depends(get_reward_service),
) -> RewardCatalogResponse:
    """코인 상점 상품 목록 (보유 여부 포함)"""
    return reward_service.get_catalog(user_id)


@router.get("/owned", response_model=List[OwnedReward])
def get_my_rewards(
    user_id: str = Depends(get_current_user_id),
    reward_service: RewardService = Depends(get_reward_service),
) -> List[OwnedReward]:
    return reward_service.get_owned_rewards(user_id)


@router.post("/{reward_id}/purchase", response_model=RewardPurchaseResponse)
def purchase_reward(
    reward_id: int = Path(..., gt=0),
    user_id: str = Depends(get_current_user_id),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> RewardPurchaseResponse:
    """
    상품 구매

    HTTP Status:
        200: 구매 성공
        400: 코인 부족 (COINS_001)
        404: 상품 없음
        409: 이미 보유 (LEDGER_ALREADY_OWNED)
    """
    return ledger_service.purchase_reward(user_id, reward_id)
