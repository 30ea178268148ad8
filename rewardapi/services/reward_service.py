from typing import List

from sqlalchemy.orm import Session

from rewardapi.repositories.reward_repository import RewardRepository
from rewardapi.schemas.rewards import OwnedReward, RewardCatalogResponse, RewardItem


class RewardService:
    """코인 상점 조회 (구매는 LedgerService.purchase_reward)"""

    def __init__(self, db: Session):
        self.db = db
        self.reward_repo = RewardRepository(db)

    def get_catalog(self, user_id: str) -> RewardCatalogResponse:
        owned_ids = self.reward_repo.owned_reward_ids(user_id)
        items = []
        for reward in self.reward_repo.get_catalog():
            item = RewardItem.model_validate(reward)
            item.owned = reward.id in owned_ids
            items.append(item)
        return RewardCatalogResponse(rewards=items, total_count=len(items))

    def get_owned_rewards(self, user_id: str) -> List[OwnedReward]:
        return self.reward_repo.get_owned_rewards(user_id)
