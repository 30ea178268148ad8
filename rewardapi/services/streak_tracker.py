"""
연속 출석(Streak) 상태 머신 - 순수 로직

| 현재 상태      | 조건                        | 다음 current_streak            |
|---------------|-----------------------------|--------------------------------|
| NO_RECORD     | 첫 출석                      | 1                              |
| ACTIVE_TODAY  | last_login_date == today     | 변경 없음 (멱등)                |
| CONTINUING    | last_login_date == yesterday | +1, 보너스 기준 도달 시 지급 후 0 |
| BROKEN        | 그 외                        | 1                              |

날짜 계산은 하지 않습니다. today/yesterday 키는 호출자가 단일 기준 시계로
계산해서 넘겨주며, 이 모듈은 날짜 동일성 비교만 수행합니다.
"""

import enum
from dataclasses import dataclass
from datetime import date
from typing import Optional

from rewardapi.core import reward_rules


class StreakState(str, enum.Enum):
    NO_RECORD = "NO_RECORD"
    ACTIVE_TODAY = "ACTIVE_TODAY"
    CONTINUING = "CONTINUING"
    BROKEN = "BROKEN"


@dataclass(frozen=True)
class StreakRecord:
    current_streak: int = 0
    longest_streak: int = 0
    last_login_date: Optional[date] = None


@dataclass(frozen=True)
class StreakTransition:
    state: StreakState
    record: StreakRecord
    # 보너스 판정 직전 도달한 연속 일수 (리셋 전 값)
    reached_streak: int
    bonus_fired: bool = False
    bonus_coins: int = 0

    @property
    def changed(self) -> bool:
        return self.state != StreakState.ACTIVE_TODAY


def classify(record: Optional[StreakRecord], today: date, yesterday: date) -> StreakState:
    if record is None or record.last_login_date is None:
        return StreakState.NO_RECORD
    if record.last_login_date == today:
        return StreakState.ACTIVE_TODAY
    if record.last_login_date == yesterday:
        return StreakState.CONTINUING
    return StreakState.BROKEN


def advance(
    record: Optional[StreakRecord],
    today: date,
    yesterday: date,
    bonus_days: int = reward_rules.STREAK_BONUS_DAYS,
    bonus_coins: int = reward_rules.STREAK_BONUS_COINS,
) -> StreakTransition:
    state = classify(record, today, yesterday)
    current = record or StreakRecord()

    if state == StreakState.ACTIVE_TODAY:
        return StreakTransition(state, current, reached_streak=current.current_streak)

    if state == StreakState.CONTINUING:
        reached = current.current_streak + 1
    else:
        reached = 1

    # longest_streak는 보너스 리셋 전에 갱신
    longest = max(current.longest_streak, reached)

    if state == StreakState.CONTINUING and reached >= bonus_days:
        return StreakTransition(
            state,
            StreakRecord(current_streak=0, longest_streak=longest, last_login_date=today),
            reached_streak=reached,
            bonus_fired=True,
            bonus_coins=bonus_coins,
        )

    return StreakTransition(
        state,
        StreakRecord(current_streak=reached, longest_streak=longest, last_login_date=today),
        reached_streak=reached,
    )
