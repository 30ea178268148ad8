"""
리워드 규칙 상수

적립/전환/보너스 금액은 모두 이 모듈에서만 정의합니다.
규칙 엔진과 화면용 추정치(전환 견적 등)는 반드시 이 값을 참조해야 하며,
다른 곳에서 같은 값을 다시 정의하지 않습니다.

금액 단위:
- 코인: 정수
- 현금(balance): 루피 정수 (부동소수점 사용 금지)
"""

from types import MappingProxyType

# 영상 1회 시청 적립액 (현금) - (사용자, 영상, 날짜)당 1회
VIDEO_VIEW_REWARD = 20

# 추천 1건당 추천인 적립액 (현금)
REFERRAL_REWARD = 100

# 코인 -> 현금 전환 비율: 10 코인 = 1 루피
COINS_PER_RUPEE = 10
MIN_CONVERT_COINS = 100

# 연속 출석 보너스: 26일 연속 달성 시 500 코인 지급 후 0으로 초기화
STREAK_BONUS_DAYS = 26
STREAK_BONUS_COINS = 500

# 피추천인의 태스크 완료 횟수 마일스톤 -> 추천인 보너스 코인
REFERRAL_MILESTONES = MappingProxyType({10: 50, 25: 150, 50: 500})

# 피추천인이 태스크를 완료할 때마다 추천인에게 지급되는 코인
REFERRAL_TASK_COINS = 10

# 광고 수익 중 시청자 몫 (%), 나머지는 영상 소유자 몫
AD_VIEWER_SHARE_PERCENT = 30

# 최소 출금 금액 (현금)
MIN_WITHDRAWAL_AMOUNT = 5000
