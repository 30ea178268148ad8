import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rewardapi.core.exceptions import BaseAPIException, ConflictError, ValidationError
from rewardapi.models.ledger import EarningType
from rewardapi.repositories.ledger_repository import LedgerRepository
from rewardapi.repositories.referral_repository import ReferralRepository
from rewardapi.repositories.wallet_repository import WalletRepository
from rewardapi.schemas.referral import ReferralResponse, ReferralSummaryResponse
from rewardapi.services import rules_engine
from rewardapi.services.ledger_service import Clock
from rewardapi.utils.date_utils import get_day_keys

logger = logging.getLogger(__name__)


class ReferralService:
    """추천 등록과 추천 보상 현황

    추천인의 태스크 완료 코인/마일스톤 보너스는 피추천인의 태스크 수령
    트랜잭션(LedgerService.claim_task_reward)에서 함께 처리됩니다.
    """

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock: Clock = clock or get_day_keys
        self.referral_repo = ReferralRepository(db)
        self.wallet_repo = WalletRepository(db)
        self.ledger_repo = LedgerRepository(db)

    def register_referral(self, referrer_id: str, referred_id: str) -> ReferralResponse:
        """피추천인당 1회, 추천인에게 REFERRAL_REWARD 적립

        Raises:
            ValidationError: 자기 자신을 추천
            ConflictError: 이미 추천인이 등록된 사용자
        """
        if referrer_id == referred_id:
            raise ValidationError("Cannot refer yourself", {"referrer_id": referrer_id})

        duplicate = ConflictError(
            "Referral already registered",
            {"referred_id": referred_id},
            error_code="REFERRAL_001",
        )
        try:
            # 피추천인 지갑도 잠가 진행 중인 태스크 수령과 직렬화
            wallets = self.wallet_repo.lock_wallets([referrer_id, referred_id])
            if self.referral_repo.get_by_referred(referred_id) is not None:
                raise duplicate

            referral = self.referral_repo.create_referral(referrer_id, referred_id)
            delta = rules_engine.referral_join(referred_id)
            self.ledger_repo.apply_delta(referrer_id, wallets[referrer_id], delta, self.clock().today)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Concurrent referral registration for {referred_id}")
            raise duplicate
        except BaseAPIException as e:
            self.db.rollback()
            logger.warning(f"Referral rejected ({referrer_id} -> {referred_id}): {e.message}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to register referral {referrer_id} -> {referred_id}: {str(e)}")
            raise

        logger.info(f"Referral registered: {referrer_id} -> {referred_id} (+{delta.balance})")
        return ReferralResponse(
            referrer_id=referrer_id,
            referred_id=referred_id,
            reward_amount=delta.balance,
            created_at=referral.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        )

    def get_summary(self, referrer_id: str) -> ReferralSummaryResponse:
        return ReferralSummaryResponse(
            referral_count=self.referral_repo.count_referrals(referrer_id),
            total_referral_earnings=self.ledger_repo.sum_earnings(
                referrer_id, EarningType.REFERRAL.value
            ),
            task_completions=self.referral_repo.count_completions(referrer_id),
            milestones=self.referral_repo.get_milestones(referrer_id),
        )
