"""
리워드 규칙 엔진 - 순수 함수 모음 (I/O 없음)

지갑 스냅샷과 행위(영상 시청, 태스크 완료, 코인 전환 등)를 입력받아
1. 지갑 변화량 + 원장 항목(LedgerDelta) 또는
2. 타입이 지정된 거절 사유(Rejection)
중 하나를 반환합니다.

같은 입력에 대해 항상 같은 결과를 반환하며, 저장소 접근과 트랜잭션 처리는
LedgerService가 담당합니다.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple, Union

from rewardapi.core import reward_rules
from rewardapi.models.ledger import CoinTransactionType, EarningType


@dataclass(frozen=True)
class WalletSnapshot:
    coins: int = 0
    balance: int = 0
    total_earned: int = 0
    total_withdrawn: int = 0

    @classmethod
    def of(cls, wallet: Any) -> "WalletSnapshot":
        return cls(
            coins=wallet.coins or 0,
            balance=wallet.balance or 0,
            total_earned=wallet.total_earned or 0,
            total_withdrawn=wallet.total_withdrawn or 0,
        )


@dataclass(frozen=True)
class CoinEntry:
    amount: int
    type: CoinTransactionType
    description: str
    ref_id: Optional[str] = None


@dataclass(frozen=True)
class EarningEntry:
    amount: int
    type: EarningType
    reference_id: Optional[str] = None


@dataclass(frozen=True)
class LedgerDelta:
    """지갑 필드 변화량과 함께 기록할 원장 항목"""

    coins: int = 0
    balance: int = 0
    earned: int = 0
    withdrawn: int = 0
    coin_entries: Tuple[CoinEntry, ...] = ()
    earning_entries: Tuple[EarningEntry, ...] = ()

    def apply_to(self, snapshot: WalletSnapshot) -> WalletSnapshot:
        return WalletSnapshot(
            coins=snapshot.coins + self.coins,
            balance=snapshot.balance + self.balance,
            total_earned=snapshot.total_earned + self.earned,
            total_withdrawn=snapshot.total_withdrawn + self.withdrawn,
        )

    def merge(self, other: "LedgerDelta") -> "LedgerDelta":
        return LedgerDelta(
            coins=self.coins + other.coins,
            balance=self.balance + other.balance,
            earned=self.earned + other.earned,
            withdrawn=self.withdrawn + other.withdrawn,
            coin_entries=self.coin_entries + other.coin_entries,
            earning_entries=self.earning_entries + other.earning_entries,
        )


class RejectionCode(str, enum.Enum):
    ALREADY_CREDITED_TODAY = "ALREADY_CREDITED_TODAY"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    INSUFFICIENT_COINS = "INSUFFICIENT_COINS"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    BELOW_MINIMUM = "BELOW_MINIMUM"
    ALREADY_OWNED = "ALREADY_OWNED"


@dataclass(frozen=True)
class Rejection:
    code: RejectionCode
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


RuleOutcome = Union[LedgerDelta, Rejection]


# ---------------------------------------------------------------------------
# 태스크 종류 - 문자열 분기 대신 종류별 적격성 판정 함수를 등록
# ---------------------------------------------------------------------------


class TaskKind(str, enum.Enum):
    WATCH_VIDEO = "watch_video"
    WATCH_3_VIDEOS = "watch_3_videos"
    DAILY_LOGIN = "daily_login"
    REFERRAL = "referral"
    STREAK_7 = "streak_7"


@dataclass(frozen=True)
class TaskProgress:
    """서버에서 다시 계산한 진행 상황 (클라이언트 값은 신뢰하지 않음)"""

    watch_count_today: int = 0
    referral_count: int = 0
    current_streak: int = 0
    checked_in_today: bool = False


@dataclass(frozen=True)
class TaskRule:
    target: int
    measure: Callable[[TaskProgress], int]

    def is_complete(self, progress: TaskProgress) -> bool:
        return self.measure(progress) >= self.target

    def percent(self, progress: TaskProgress) -> int:
        return min(self.measure(progress) * 100 // self.target, 100)


TASK_RULES: Dict[TaskKind, TaskRule] = {
    TaskKind.WATCH_VIDEO: TaskRule(1, lambda p: p.watch_count_today),
    TaskKind.WATCH_3_VIDEOS: TaskRule(3, lambda p: p.watch_count_today),
    TaskKind.DAILY_LOGIN: TaskRule(1, lambda p: int(p.checked_in_today)),
    TaskKind.REFERRAL: TaskRule(1, lambda p: p.referral_count),
    TaskKind.STREAK_7: TaskRule(7, lambda p: p.current_streak),
}


def task_rule_for(task_type: str) -> Optional[TaskRule]:
    """등록되지 않은 task_type이면 None (해당 태스크는 완료 불가)"""
    try:
        return TASK_RULES[TaskKind(task_type)]
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# 규칙
# ---------------------------------------------------------------------------


def video_view(video_id: int, already_credited_today: bool) -> RuleOutcome:
    if already_credited_today:
        return Rejection(
            RejectionCode.ALREADY_CREDITED_TODAY,
            "Video view already credited today",
            {"video_id": video_id},
        )

    amount = reward_rules.VIDEO_VIEW_REWARD
    return LedgerDelta(
        balance=amount,
        earned=amount,
        earning_entries=(
            EarningEntry(amount, EarningType.VIDEO_WATCH, str(video_id)),
        ),
    )


def ad_view_split(earnings_per_view: int) -> Tuple[int, int]:
    """광고 1회 수익을 (시청자 몫, 소유자 몫)으로 분배 - 나머지는 소유자에게"""
    total = max(earnings_per_view, 0)
    viewer_cut = total * reward_rules.AD_VIEWER_SHARE_PERCENT // 100
    return viewer_cut, total - viewer_cut


def ad_view_credit(amount: int, ad_id: int) -> LedgerDelta:
    if amount <= 0:
        return LedgerDelta()
    return LedgerDelta(
        balance=amount,
        earned=amount,
        earning_entries=(EarningEntry(amount, EarningType.AD_VIEW, str(ad_id)),),
    )


def task_claim(
    task_id: int,
    task_type: str,
    reward_amount: int,
    progress: TaskProgress,
    already_claimed: bool,
) -> RuleOutcome:
    if already_claimed:
        return Rejection(
            RejectionCode.ALREADY_CLAIMED,
            "Task reward already claimed today",
            {"task_id": task_id},
        )

    rule = task_rule_for(task_type)
    if rule is None or not rule.is_complete(progress):
        return Rejection(
            RejectionCode.NOT_ELIGIBLE,
            "Task completion condition is not met",
            {"task_id": task_id, "task_type": task_type},
        )

    return LedgerDelta(
        balance=reward_amount,
        earned=reward_amount,
        earning_entries=(
            EarningEntry(reward_amount, EarningType.DAILY_TASK, str(task_id)),
        ),
    )


def conversion_quote(coins_requested: int) -> Tuple[int, int]:
    """(지급 루피, 실제 사용 코인) - 나머지 코인은 차감하지 않음"""
    rupees = max(coins_requested, 0) // reward_rules.COINS_PER_RUPEE
    return rupees, rupees * reward_rules.COINS_PER_RUPEE


def coin_conversion(snapshot: WalletSnapshot, coins_requested: int) -> RuleOutcome:
    if coins_requested > snapshot.coins:
        return Rejection(
            RejectionCode.INSUFFICIENT_COINS,
            f"Insufficient coins. Required: {coins_requested}, Available: {snapshot.coins}",
            {"required": coins_requested, "available": snapshot.coins},
        )

    rupees, coins_used = conversion_quote(coins_requested)
    if coins_requested < reward_rules.MIN_CONVERT_COINS or rupees <= 0:
        return Rejection(
            RejectionCode.BELOW_MINIMUM,
            f"Minimum {reward_rules.MIN_CONVERT_COINS} coins required for conversion",
            {"minimum": reward_rules.MIN_CONVERT_COINS, "requested": coins_requested},
        )

    return LedgerDelta(
        coins=-coins_used,
        balance=rupees,
        earned=rupees,
        coin_entries=(
            CoinEntry(
                -coins_used,
                CoinTransactionType.CONVERTED,
                f"Converted {coins_used} coins to ₹{rupees}",
            ),
        ),
        earning_entries=(EarningEntry(rupees, EarningType.COIN_CONVERSION),),
    )


def reward_purchase(
    snapshot: WalletSnapshot,
    reward_id: int,
    reward_name: str,
    coin_price: int,
    already_owned: bool,
) -> RuleOutcome:
    if already_owned:
        return Rejection(
            RejectionCode.ALREADY_OWNED,
            "Reward already owned",
            {"reward_id": reward_id},
        )

    if snapshot.coins < coin_price:
        return Rejection(
            RejectionCode.INSUFFICIENT_COINS,
            f"Insufficient coins. Required: {coin_price}, Available: {snapshot.coins}",
            {"required": coin_price, "available": snapshot.coins},
        )

    return LedgerDelta(
        coins=-coin_price,
        coin_entries=(
            CoinEntry(
                -coin_price,
                CoinTransactionType.SPENT,
                f"Purchased {reward_name}",
            ),
        ),
    )


def streak_bonus(streak_count: int, bonus_coins: int, ref_id: Optional[str]) -> LedgerDelta:
    return LedgerDelta(
        coins=bonus_coins,
        coin_entries=(
            CoinEntry(
                bonus_coins,
                CoinTransactionType.BONUS,
                f"{streak_count}-day streak bonus",
                ref_id=ref_id,
            ),
        ),
    )


def referral_join(referred_id: str) -> LedgerDelta:
    amount = reward_rules.REFERRAL_REWARD
    return LedgerDelta(
        balance=amount,
        earned=amount,
        earning_entries=(EarningEntry(amount, EarningType.REFERRAL, referred_id),),
    )


def referral_task(task_title: str, ref_id: str) -> LedgerDelta:
    coins = reward_rules.REFERRAL_TASK_COINS
    if coins <= 0:
        return LedgerDelta()
    return LedgerDelta(
        coins=coins,
        coin_entries=(
            CoinEntry(
                coins,
                CoinTransactionType.EARNED,
                f"Referral completed task: {task_title}",
                ref_id=ref_id,
            ),
        ),
    )


def referral_milestone(completions: int) -> Optional[Tuple[int, int]]:
    """완료 횟수가 정확히 마일스톤에 도달하면 (마일스톤, 보너스 코인)"""
    bonus = reward_rules.REFERRAL_MILESTONES.get(completions)
    if bonus is None:
        return None
    return completions, bonus


def referral_milestone_bonus(milestone: int, bonus_coins: int, ref_id: str) -> LedgerDelta:
    return LedgerDelta(
        coins=bonus_coins,
        coin_entries=(
            CoinEntry(
                bonus_coins,
                CoinTransactionType.BONUS,
                f"Referral milestone: {milestone} tasks",
                ref_id=ref_id,
            ),
        ),
    )


def withdrawal_request(snapshot: WalletSnapshot, amount: int) -> Optional[Rejection]:
    if amount < reward_rules.MIN_WITHDRAWAL_AMOUNT:
        return Rejection(
            RejectionCode.BELOW_MINIMUM,
            f"Minimum withdrawal is ₹{reward_rules.MIN_WITHDRAWAL_AMOUNT}",
            {"minimum": reward_rules.MIN_WITHDRAWAL_AMOUNT, "requested": amount},
        )
    if amount > snapshot.balance:
        return Rejection(
            RejectionCode.INSUFFICIENT_BALANCE,
            f"Insufficient balance. Required: {amount}, Available: {snapshot.balance}",
            {"required": amount, "available": snapshot.balance},
        )
    return None


def withdrawal_payout(snapshot: WalletSnapshot, amount: int) -> RuleOutcome:
    """승인 시점의 잔액으로 다시 검증 (요청 시점 잔액을 신뢰하지 않음)"""
    if amount <= 0 or amount > snapshot.balance:
        return Rejection(
            RejectionCode.INSUFFICIENT_BALANCE,
            f"Insufficient balance. Required: {amount}, Available: {snapshot.balance}",
            {"required": amount, "available": snapshot.balance},
        )
    return LedgerDelta(balance=-amount, withdrawn=amount)
