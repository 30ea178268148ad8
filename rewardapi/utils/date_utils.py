"""
서버 기준 날짜 키

하루 경계는 클라이언트 시계가 아니라 settings.TIMEZONE 기준 서버 시계 하나로만 계산합니다.
연속 출석, 하루 1회 적립, 태스크 완료 판정은 모두 이 값을 사용합니다.
"""

from dataclasses import dataclass
from functools import partial
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import pytz

from rewardapi.config import settings


@dataclass(frozen=True)
class DayKeys:
    today: date
    yesterday: date

    @property
    def today_key(self) -> str:
        return self.today.isoformat()

    @property
    def yesterday_key(self) -> str:
        return self.yesterday.isoformat()

    @classmethod
    def for_date(cls, today: date) -> "DayKeys":
        return cls(today=today, yesterday=today - timedelta(days=1))


def get_day_keys(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> DayKeys:
    """설정된 타임존의 현재 달력 날짜로 today/yesterday 키 생성"""
    tz = pytz.timezone(tz_name or settings.TIMEZONE)
    if now is None:
        local_now = datetime.now(tz)
    elif now.tzinfo is None:
        # naive datetime은 UTC로 가정
        local_now = pytz.utc.localize(now).astimezone(tz)
    else:
        local_now = now.astimezone(tz)
    return DayKeys.for_date(local_now.date())


def day_clock(tz_name: str) -> Callable[[], DayKeys]:
    """tz_name 으로 고정된 get_day_keys (컨테이너가 설정값으로 생성)"""
    return partial(get_day_keys, tz_name=tz_name)
