from fastapi import Depends, Request
from sqlalchemy.orm import Session

from rewardapi.database.session import get_db
from rewardapi.services.ledger_service import LedgerService
from rewardapi.services.referral_service import ReferralService
from rewardapi.services.reward_service import RewardService
from rewardapi.services.streak_service import StreakService
from rewardapi.services.task_service import TaskService
from rewardapi.services.withdrawal_service import WithdrawalService

# 서비스는 컨테이너 팩토리로 생성하고, 세션은 요청마다 get_db 에서 받음


def _services(request: Request):
    return request.app.container.services


def get_ledger_service(request: Request, db: Session = Depends(get_db)) -> LedgerService:
    return _services(request).ledger_service(db=db)


def get_streak_service(request: Request, db: Session = Depends(get_db)) -> StreakService:
    return _services(request).streak_service(db=db)


def get_task_service(request: Request, db: Session = Depends(get_db)) -> TaskService:
    return _services(request).task_service(db=db)


def get_reward_service(request: Request, db: Session = Depends(get_db)) -> RewardService:
    return _services(request).reward_service(db=db)


def get_withdrawal_service(request: Request, db: Session = Depends(get_db)) -> WithdrawalService:
    return _services(request).withdrawal_service(db=db)


def get_referral_service(request: Request, db: Session = Depends(get_db)) -> ReferralService:
    return _services(request).referral_service(db=db)
