"""모든 모델을 임포트하여 Base.metadata에 테이블을 등록합니다."""

from rewardapi.models.base import Base
from rewardapi.models.wallet import UserWallet
from rewardapi.models.ledger import CoinTransaction, Earning
from rewardapi.models.tasks import DailyTask, UserDailyTask
from rewardapi.models.streak import UserStreak
from rewardapi.models.rewards import Reward, UserReward
from rewardapi.models.withdrawal import WithdrawalRequest
from rewardapi.models.video import Video, VideoWatch, Ad, AdView, CreatorEarning
from rewardapi.models.referral import Referral, ReferralTaskCompletion, ReferralMilestone

__all__ = [
    "Base",
    "UserWallet",
    "CoinTransaction",
    "Earning",
    "DailyTask",
    "UserDailyTask",
    "UserStreak",
    "Reward",
    "UserReward",
    "WithdrawalRequest",
    "Video",
    "VideoWatch",
    "Ad",
    "AdView",
    "CreatorEarning",
    "Referral",
    "ReferralTaskCompletion",
    "ReferralMilestone",
]
