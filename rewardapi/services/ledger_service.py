"""
원장 서비스 - 지갑/원장 변경의 유일한 진입점

모든 변경 작업은 다음 순서를 따르는 하나의 트랜잭션입니다.
1. 지갑 행 잠금 (없으면 생성 후 잠금)
2. 같은 트랜잭션 안에서 중복/적격성 확인
3. 규칙 엔진 평가 -> LedgerDelta 또는 Rejection
4. 지갑 집계 필드와 원장 항목을 함께 기록 후 commit

검증과 변경 사이에 잠금이 풀리지 않으므로, 같은 사용자의 동시 요청이
둘 다 "아직 수령 안 함"을 관찰하는 경우는 없습니다.
"""

import logging
from typing import Callable, Dict, Optional, Tuple, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rewardapi.core import reward_rules
from rewardapi.core.exceptions import (
    AlreadyClaimedError,
    AlreadyOwnedError,
    BaseAPIException,
    BelowMinimumError,
    InsufficientBalanceError,
    InsufficientCoinsError,
    NotEligibleError,
    NotFoundError,
)
from rewardapi.models.ledger import EarningType
from rewardapi.models.tasks import DailyTask
from rewardapi.models.wallet import UserWallet
from rewardapi.repositories.ledger_repository import LedgerRepository
from rewardapi.repositories.referral_repository import ReferralRepository
from rewardapi.repositories.reward_repository import RewardRepository
from rewardapi.repositories.task_repository import TaskRepository
from rewardapi.repositories.video_repository import VideoRepository
from rewardapi.repositories.wallet_repository import WalletRepository
from rewardapi.schemas.tasks import TaskClaimResponse
from rewardapi.schemas.rewards import RewardPurchaseResponse
from rewardapi.schemas.video import AdViewResponse, VideoViewResponse
from rewardapi.schemas.wallet import (
    CoinTransactionsResponse,
    ConversionQuoteResponse,
    ConversionResponse,
    EarningsResponse,
    WalletIntegrityResponse,
    WalletResponse,
)
from rewardapi.services import rules_engine
from rewardapi.services.rules_engine import (
    Rejection,
    RejectionCode,
    WalletSnapshot,
)
from rewardapi.utils.date_utils import DayKeys, get_day_keys

logger = logging.getLogger(__name__)

Clock = Callable[[], DayKeys]

_REJECTION_ERRORS: Dict[RejectionCode, Type[BaseAPIException]] = {
    RejectionCode.ALREADY_CLAIMED: AlreadyClaimedError,
    RejectionCode.NOT_ELIGIBLE: NotEligibleError,
    RejectionCode.INSUFFICIENT_COINS: InsufficientCoinsError,
    RejectionCode.INSUFFICIENT_BALANCE: InsufficientBalanceError,
    RejectionCode.BELOW_MINIMUM: BelowMinimumError,
    RejectionCode.ALREADY_OWNED: AlreadyOwnedError,
}


def rejection_error(rejection: Rejection) -> BaseAPIException:
    """규칙 엔진의 거절 사유를 API 예외로 변환"""
    error_class = _REJECTION_ERRORS[rejection.code]
    return error_class(message=rejection.message, details=rejection.details)


class LedgerService:
    """지갑/원장 변경 작업을 담당하는 서비스"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock: Clock = clock or get_day_keys
        self.wallet_repo = WalletRepository(db)
        self.ledger_repo = LedgerRepository(db)
        self.task_repo = TaskRepository(db)
        self.reward_repo = RewardRepository(db)
        self.video_repo = VideoRepository(db)
        self.referral_repo = ReferralRepository(db)

    # ------------------------------------------------------------------
    # 영상 / 광고
    # ------------------------------------------------------------------

    def record_video_view(self, user_id: str, video_id: int) -> VideoViewResponse:
        """영상 시청 적립 - 하루 1회, 재호출은 credited=False (에러 아님)

        Args:
            user_id: 시청자 ID
            video_id: 영상 ID

        Returns:
            VideoViewResponse: 이번 호출로 적립되었는지 여부
        """
        days = self.clock()
        if self.video_repo.get_active_video(video_id) is None:
            raise NotFoundError(f"Video not found: {video_id}")

        try:
            wallet = self.wallet_repo.lock_wallet(user_id)
            already_credited = self.ledger_repo.earning_exists(
                user_id, EarningType.VIDEO_WATCH.value, str(video_id), days.today
            )
            outcome = rules_engine.video_view(video_id, already_credited)
            if isinstance(outcome, Rejection):
                self.db.rollback()
                logger.info(
                    f"Video {video_id} already credited today for user {user_id}"
                )
                return VideoViewResponse(video_id=video_id, credited=False)

            self.video_repo.add_watch(user_id, video_id, days.today, outcome.balance)
            self.ledger_repo.apply_delta(user_id, wallet, outcome, days.today)
            self.db.commit()
        except IntegrityError:
            # 동시 요청이 먼저 commit 한 경우
            self.db.rollback()
            logger.warning(
                f"Concurrent video view for user {user_id}, video {video_id} ignored"
            )
            return VideoViewResponse(video_id=video_id, credited=False)
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to record video view for user {user_id}, video {video_id}: {str(e)}"
            )
            raise

        logger.info(
            f"Credited {outcome.balance} for video {video_id} to user {user_id}"
        )
        self._bump_counter(self.video_repo.increment_view_count, video_id)
        return VideoViewResponse(video_id=video_id, credited=True, amount=outcome.balance)

    def record_ad_view(self, ad_id: int, video_id: int, viewer_id: str) -> AdViewResponse:
        """광고 1회 수익을 시청자와 영상 소유자에게 분배

        비활성 광고이거나 같은 날 같은 (광고, 영상, 시청자) 조합이 이미
        기록되어 있으면 credited=False 를 반환합니다.
        """
        days = self.clock()
        ad = self.video_repo.get_ad(ad_id)
        if ad is None:
            raise NotFoundError(f"Ad not found: {ad_id}")
        video = self.video_repo.get_model(video_id)
        if video is None:
            raise NotFoundError(f"Video not found: {video_id}")

        not_credited = AdViewResponse(ad_id=ad_id, video_id=video_id, credited=False)
        if not ad.is_active:
            logger.info(f"Ad {ad_id} is inactive, view not credited")
            return not_credited

        viewer_cut, creator_cut = rules_engine.ad_view_split(ad.earnings_per_view)
        owner_id = video.owner_id
        # 소유자가 없거나 본인 영상이면 소유자 몫은 지급하지 않음
        pay_creator = bool(owner_id) and owner_id != viewer_id and creator_cut > 0
        participants = [viewer_id, owner_id] if pay_creator else [viewer_id]

        try:
            wallets = self.wallet_repo.lock_wallets(participants)
            if self.video_repo.has_ad_view(ad_id, video_id, viewer_id, days.today):
                self.db.rollback()
                logger.info(
                    f"Ad {ad_id} on video {video_id} already credited today for {viewer_id}"
                )
                return not_credited

            self.video_repo.add_ad_view(
                ad_id, video_id, viewer_id, owner_id, ad.earnings_per_view, days.today
            )
            self.ledger_repo.apply_delta(
                viewer_id,
                wallets[viewer_id],
                rules_engine.ad_view_credit(viewer_cut, ad_id),
                days.today,
            )
            if pay_creator:
                self.video_repo.add_creator_earning(owner_id, video_id, ad_id, creator_cut)
                self.ledger_repo.apply_delta(
                    owner_id,
                    wallets[owner_id],
                    rules_engine.ad_view_credit(creator_cut, ad_id),
                    days.today,
                )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Concurrent ad view for {viewer_id}, ad {ad_id} ignored")
            return not_credited
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to record ad view {ad_id} for {viewer_id}: {str(e)}")
            raise

        logger.info(
            f"Ad {ad_id} view credited: viewer {viewer_id} +{viewer_cut}, "
            f"creator {owner_id} +{creator_cut if pay_creator else 0}"
        )
        self._bump_counter(self.video_repo.increment_ad_view_count, ad_id)
        return AdViewResponse(
            ad_id=ad_id,
            video_id=video_id,
            credited=True,
            viewer_amount=viewer_cut,
            creator_amount=creator_cut if pay_creator else 0,
        )

    def _bump_counter(self, bump: Callable[[int], None], target_id: int) -> None:
        """조회수 증가는 적립과 별도 트랜잭션 - 실패해도 적립은 유지"""
        try:
            bump(target_id)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.warning(f"View counter increment failed for {target_id}: {str(e)}")

    # ------------------------------------------------------------------
    # 일일 태스크
    # ------------------------------------------------------------------

    def claim_task_reward(self, user_id: str, task_id: int) -> TaskClaimResponse:
        """일일 태스크 보상 수령

        완료 조건은 클라이언트 값이 아니라 트랜잭션 안에서 저장소를 다시 조회해
        판정합니다. 추천으로 가입한 사용자라면 추천인에게 태스크 완료 코인과
        마일스톤 보너스가 같은 트랜잭션에서 지급됩니다.

        Raises:
            NotFoundError: 존재하지 않거나 비활성 태스크
            AlreadyClaimedError: 오늘 이미 수령
            NotEligibleError: 완료 조건 미충족
        """
        days = self.clock()
        task = self.task_repo.get_active_task(task_id)
        if task is None:
            raise NotFoundError(f"Task not found: {task_id}")

        try:
            referrer_id, wallets = self._lock_claim_wallets(user_id)
            progress = self.task_repo.get_progress(user_id, days.today)
            already_claimed = self.task_repo.is_claimed(user_id, task_id, days.today)
            outcome = rules_engine.task_claim(
                task.id, task.task_type, task.reward_amount, progress, already_claimed
            )
            if isinstance(outcome, Rejection):
                raise rejection_error(outcome)

            self.task_repo.mark_claimed(user_id, task_id, days.today)
            self.ledger_repo.apply_delta(user_id, wallets[user_id], outcome, days.today)

            if referrer_id is not None:
                self._credit_referrer(
                    referrer_id,
                    user_id,
                    wallets[referrer_id],
                    task,
                    days,
                )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Concurrent claim for user {user_id}, task {task_id}")
            raise AlreadyClaimedError(details={"task_id": task_id})
        except BaseAPIException as e:
            self.db.rollback()
            logger.warning(f"Task {task_id} claim rejected for user {user_id}: {e.message}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to claim task {task_id} for user {user_id}: {str(e)}")
            raise

        balance = wallets[user_id].balance
        logger.info(
            f"Task {task_id} reward {task.reward_amount} credited to user {user_id}"
        )
        return TaskClaimResponse(
            task_id=task_id,
            reward_amount=task.reward_amount,
            balance=balance,
            message=f"Claimed {task.title}",
        )

    def _lock_claim_wallets(self, user_id: str) -> Tuple[Optional[str], Dict[str, UserWallet]]:
        """수령자와 추천인 지갑을 user_id 오름차순으로 잠금

        추천 등록도 피추천인 지갑을 잠그므로, 잠금 후 다시 조회한 추천 관계가 최종값입니다.
        조회와 잠금 사이에 추천이 등록됐다면 정렬 순서를 지키기 위해 풀고 다시 잠급니다.
        추천 관계는 한 번 생기면 바뀌지 않으므로 재시도는 한 번이면 충분합니다.
        """
        referrer_id = self._referrer_of(user_id)
        wallets = self.wallet_repo.lock_wallets(filter(None, [user_id, referrer_id]))

        locked_referrer_id = self._referrer_of(user_id)
        if locked_referrer_id != referrer_id:
            self.db.rollback()
            logger.info(f"Referral for {user_id} registered mid-claim, relocking wallets")
            referrer_id = locked_referrer_id
            wallets = self.wallet_repo.lock_wallets([user_id, referrer_id])
        return referrer_id, wallets

    def _referrer_of(self, user_id: str) -> Optional[str]:
        referral = self.referral_repo.get_by_referred(user_id)
        return referral.referrer_id if referral is not None else None

    def _credit_referrer(
        self,
        referrer_id: str,
        referred_id: str,
        referrer_wallet: UserWallet,
        task: DailyTask,
        days: DayKeys,
    ) -> None:
        """추천인 태스크 완료 코인 + 마일스톤 보너스 (commit 하지 않음)"""
        delta = rules_engine.referral_task(
            task.title, ref_id=f"referral_task_{referred_id}_{task.id}_{days.today_key}"
        )
        self.referral_repo.add_task_completion(
            referrer_id,
            referred_id,
            task.id,
            task.title,
            delta.coins,
            days.today,
        )

        completions = self.referral_repo.count_completions(referrer_id, referred_id)
        reached = rules_engine.referral_milestone(completions)
        if reached is not None:
            milestone, bonus = reached
            if not self.referral_repo.milestone_exists(referrer_id, referred_id, milestone):
                self.referral_repo.add_milestone(referrer_id, referred_id, milestone, bonus)
                delta = delta.merge(
                    rules_engine.referral_milestone_bonus(
                        milestone,
                        bonus,
                        ref_id=f"referral_milestone_{referrer_id}_{referred_id}_{milestone}",
                    )
                )
                logger.info(
                    f"Referral milestone {milestone} reached: {referrer_id} +{bonus} coins"
                )

        self.ledger_repo.apply_delta(referrer_id, referrer_wallet, delta, days.today)

    # ------------------------------------------------------------------
    # 코인 전환 / 상점
    # ------------------------------------------------------------------

    def conversion_quote(self, coins: int) -> ConversionQuoteResponse:
        rupees, coins_used = rules_engine.conversion_quote(coins)
        return ConversionQuoteResponse(
            coins_requested=coins,
            rupees=rupees,
            coins_used=coins_used,
            coins_per_rupee=reward_rules.COINS_PER_RUPEE,
            min_coins=reward_rules.MIN_CONVERT_COINS,
            meets_minimum=coins >= reward_rules.MIN_CONVERT_COINS and rupees > 0,
        )

    def convert_coins_to_rupees(self, user_id: str, coins_requested: int) -> ConversionResponse:
        """코인 -> 루피 전환 (내림 나눗셈, 나머지 코인은 차감하지 않음)

        Raises:
            InsufficientCoinsError: 보유 코인보다 많이 요청
            BelowMinimumError: 최소 전환 코인 미만
        """
        try:
            wallet = self.wallet_repo.lock_wallet(user_id)
            outcome = rules_engine.coin_conversion(WalletSnapshot.of(wallet), coins_requested)
            if isinstance(outcome, Rejection):
                raise rejection_error(outcome)

            today = self.clock().today
            self.ledger_repo.apply_delta(user_id, wallet, outcome, today)
            self.db.commit()
        except BaseAPIException as e:
            self.db.rollback()
            logger.warning(f"Conversion rejected for user {user_id}: {e.message}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to convert coins for user {user_id}: {str(e)}")
            raise

        logger.info(
            f"User {user_id} converted {-outcome.coins} coins to {outcome.balance}"
        )
        return ConversionResponse(
            rupees=outcome.balance,
            coins_used=-outcome.coins,
            wallet=WalletResponse.model_validate(wallet),
        )

    def purchase_reward(self, user_id: str, reward_id: int) -> RewardPurchaseResponse:
        """코인으로 상점 상품 구매 - (user_id, reward_id) 당 1회

        Raises:
            NotFoundError: 존재하지 않거나 비활성 상품
            AlreadyOwnedError: 이미 보유
            InsufficientCoinsError: 코인 부족
        """
        reward = self.reward_repo.get_active_reward(reward_id)
        if reward is None:
            raise NotFoundError(f"Reward not found: {reward_id}")

        try:
            wallet = self.wallet_repo.lock_wallet(user_id)
            outcome = rules_engine.reward_purchase(
                WalletSnapshot.of(wallet),
                reward.id,
                reward.name,
                reward.coin_price,
                already_owned=self.reward_repo.is_owned(user_id, reward_id),
            )
            if isinstance(outcome, Rejection):
                raise rejection_error(outcome)

            self.reward_repo.add_owned(user_id, reward_id)
            self.ledger_repo.apply_delta(user_id, wallet, outcome, self.clock().today)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Concurrent purchase of reward {reward_id} by {user_id}")
            raise AlreadyOwnedError(details={"reward_id": reward_id})
        except BaseAPIException as e:
            self.db.rollback()
            logger.warning(f"Purchase of reward {reward_id} rejected for {user_id}: {e.message}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to purchase reward {reward_id} for {user_id}: {str(e)}")
            raise

        logger.info(f"User {user_id} purchased reward {reward_id} for {reward.coin_price} coins")
        return RewardPurchaseResponse(
            reward_id=reward_id,
            coins_spent=reward.coin_price,
            coins_remaining=wallet.coins,
            message=f"Purchased {reward.name}",
        )

    # ------------------------------------------------------------------
    # 연속 출석 보너스 / 출금
    # ------------------------------------------------------------------

    def award_streak_bonus(
        self,
        user_id: str,
        streak_count: int,
        bonus_coins: int,
        ref_id: Optional[str] = None,
        commit: bool = True,
    ) -> WalletResponse:
        """연속 출석 보너스 지급 - 호출 여부는 StreakTracker가 보장

        Args:
            commit: False면 호출자의 트랜잭션에 포함 (StreakService에서 사용)
        """
        try:
            wallet = self.wallet_repo.lock_wallet(user_id)
            delta = rules_engine.streak_bonus(streak_count, bonus_coins, ref_id)
            self.ledger_repo.apply_delta(user_id, wallet, delta, self.clock().today)
            if commit:
                self.db.commit()
        except IntegrityError:
            if commit:
                self.db.rollback()
            raise AlreadyClaimedError("Streak bonus already awarded", {"ref_id": ref_id})
        except Exception as e:
            if commit:
                self.db.rollback()
            logger.error(f"Failed to award streak bonus to {user_id}: {str(e)}")
            raise

        logger.info(f"Awarded {bonus_coins} coin streak bonus ({streak_count} days) to {user_id}")
        return WalletResponse.model_validate(wallet)

    def process_withdrawal(self, user_id: str, amount: int, commit: bool = True) -> WalletResponse:
        """출금 승인 시 잔액 차감 - 실행 시점 잔액으로 다시 검증

        Raises:
            InsufficientBalanceError: 현재 잔액 부족
        """
        try:
            wallet = self.wallet_repo.lock_wallet(user_id)
            outcome = rules_engine.withdrawal_payout(WalletSnapshot.of(wallet), amount)
            if isinstance(outcome, Rejection):
                raise rejection_error(outcome)
            self.ledger_repo.apply_delta(user_id, wallet, outcome, self.clock().today)
            if commit:
                self.db.commit()
        except BaseAPIException as e:
            if commit:
                self.db.rollback()
            logger.warning(f"Withdrawal of {amount} rejected for {user_id}: {e.message}")
            raise
        except Exception as e:
            if commit:
                self.db.rollback()
            logger.error(f"Failed to process withdrawal for {user_id}: {str(e)}")
            raise

        logger.info(f"Processed withdrawal of {amount} for user {user_id}")
        return WalletResponse.model_validate(wallet)

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    def get_wallet(self, user_id: str) -> WalletResponse:
        return self.wallet_repo.get_wallet(user_id)

    def get_transactions(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> CoinTransactionsResponse:
        wallet = self.wallet_repo.get_wallet(user_id)
        return self.ledger_repo.get_coin_transactions(user_id, wallet.coins, limit, offset)

    def get_earnings(self, user_id: str, limit: int = 50, offset: int = 0) -> EarningsResponse:
        wallet = self.wallet_repo.get_wallet(user_id)
        return self.ledger_repo.get_earnings(user_id, wallet.balance, limit, offset)

    def verify_integrity(self, user_id: str) -> WalletIntegrityResponse:
        """wallet.coins == sum(coin_transactions.amount) 검증"""
        wallet = self.wallet_repo.get_wallet(user_id)
        result = self.ledger_repo.verify_integrity_for_user(user_id, wallet.coins)
        if result.status != "OK":
            logger.error(
                f"Coin ledger mismatch for {user_id}: wallet={result.wallet_coins}, "
                f"ledger={result.ledger_coins}"
            )
        return result
