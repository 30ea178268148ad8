from pydantic import BaseModel, Field
from typing import List, Optional


class RewardItem(BaseModel):
    """코인 상점 상품"""

    id: int
    name: str
    description: Optional[str] = None
    type: str
    icon: Optional[str] = None
    coin_price: int
    owned: bool = False

    class Config:
        from_attributes = True


class RewardCatalogResponse(BaseModel):
    rewards: List[RewardItem]
    total_count: int


class RewardPurchaseResponse(BaseModel):
    success: bool = True
    reward_id: int
    coins_spent: int
    coins_remaining: int
    message: str


class OwnedReward(BaseModel):
    reward_id: int
    name: str
    type: str
    icon: Optional[str] = None
    is_active: bool = True
    purchased_at: Optional[str] = None
