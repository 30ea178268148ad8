from typing import List, Optional, Set

from sqlalchemy.orm import Session

from rewardapi.models.rewards import Reward, UserReward
from rewardapi.repositories.base import BaseRepository
from rewardapi.schemas.rewards import OwnedReward, RewardItem


class RewardRepository(BaseRepository[Reward, RewardItem]):
    def __init__(self, db: Session):
        super().__init__(Reward, RewardItem, db)

    def get_catalog(self) -> List[Reward]:
        return (
            self.db.query(Reward)
            .filter(Reward.is_active.is_(True))
            .order_by(Reward.coin_price, Reward.id)
            .all()
        )

    def get_active_reward(self, reward_id: int) -> Optional[Reward]:
        reward = self.get_model(reward_id)
        if reward is None or not reward.is_active:
            return None
        return reward

    def owned_reward_ids(self, user_id: str) -> Set[int]:
        rows = (
            self.db.query(UserReward.reward_id)
            .filter(UserReward.user_id == user_id)
            .all()
        )
        return {row.reward_id for row in rows}

    def is_owned(self, user_id: str, reward_id: int) -> bool:
        return (
            self.db.query(UserReward.id)
            .filter(UserReward.user_id == user_id, UserReward.reward_id == reward_id)
            .first()
            is not None
        )

    def add_owned(self, user_id: str, reward_id: int) -> UserReward:
        owned = UserReward(user_id=user_id, reward_id=reward_id, is_active=True)
        self.db.add(owned)
        self.db.flush()
        return owned

    def get_owned_rewards(self, user_id: str) -> List[OwnedReward]:
        rows = (
            self.db.query(UserReward, Reward)
            .join(Reward, Reward.id == UserReward.reward_id)
            .filter(UserReward.user_id == user_id)
            .order_by(UserReward.id.desc())
            .all()
        )
        return [
            OwnedReward(
                reward_id=reward.id,
                name=reward.name,
                type=reward.type,
                icon=reward.icon,
                is_active=owned.is_active,
                purchased_at=(
                    owned.created_at.strftime("%Y-%m-%d %H:%M:%S")
                    if owned.created_at
                    else None
                ),
            )
            for owned, reward in rows
        ]
