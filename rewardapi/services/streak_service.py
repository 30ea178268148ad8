import logging
from typing import Optional

from sqlalchemy.orm import Session

from rewardapi.core import reward_rules
from rewardapi.repositories.streak_repository import StreakRepository
from rewardapi.schemas.streak import StreakCheckInResponse, StreakResponse
from rewardapi.services import streak_tracker
from rewardapi.services.ledger_service import Clock, LedgerService
from rewardapi.services.streak_tracker import StreakRecord, StreakState
from rewardapi.utils.date_utils import DayKeys, get_day_keys

logger = logging.getLogger(__name__)


class StreakService:
    """연속 출석 체크인 - 상태 전이와 보너스 지급을 하나의 트랜잭션으로 처리"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock: Clock = clock or get_day_keys
        self.streak_repo = StreakRepository(db)
        self.ledger_service = LedgerService(db, clock=self.clock)

    def check_in(self, user_id: str) -> StreakCheckInResponse:
        """오늘 출석 처리

        같은 날 두 번째 호출은 ACTIVE_TODAY 로 분류되어 아무것도 변경하지 않습니다.
        잠금 순서: 연속 출석 행 -> 지갑 행
        """
        days = self.clock()
        try:
            streak = self.streak_repo.lock_streak(user_id)
            transition = streak_tracker.advance(
                StreakRepository.to_record(streak), days.today, days.yesterday
            )

            if transition.changed:
                self.streak_repo.save_record(streak, transition.record)
                if transition.bonus_fired:
                    self.ledger_service.award_streak_bonus(
                        user_id,
                        transition.reached_streak,
                        transition.bonus_coins,
                        ref_id=f"streak_bonus_{user_id}_{days.today_key}",
                        commit=False,
                    )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to check in streak for user {user_id}: {str(e)}")
            raise

        if transition.changed:
            logger.info(
                f"Streak check-in for {user_id}: {transition.state.value} -> "
                f"{transition.record.current_streak} (reached {transition.reached_streak})"
            )
        return StreakCheckInResponse(
            state=transition.state.value,
            streak=self._to_response(user_id, transition.record, days),
            bonus_awarded=transition.bonus_fired,
            bonus_coins=transition.bonus_coins,
        )

    def get_streak(self, user_id: str) -> StreakResponse:
        days = self.clock()
        streak = self.streak_repo.get_streak(user_id)
        record = StreakRepository.to_record(streak) if streak else None
        return self._to_response(user_id, record or StreakRecord(), days)

    @staticmethod
    def _to_response(user_id: str, record: StreakRecord, days: DayKeys) -> StreakResponse:
        state = streak_tracker.classify(record, days.today, days.yesterday)
        # 끊긴 연속 기록은 다음 체크인 때 1로 리셋되므로 표시상 0
        current = 0 if state == StreakState.BROKEN else record.current_streak
        return StreakResponse(
            user_id=user_id,
            current_streak=current,
            longest_streak=record.longest_streak,
            last_login_date=(
                record.last_login_date.isoformat() if record.last_login_date else None
            ),
            days_until_bonus=max(reward_rules.STREAK_BONUS_DAYS - current, 0),
            bonus_coins=reward_rules.STREAK_BONUS_COINS,
        )
