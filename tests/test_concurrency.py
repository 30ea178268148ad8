"""
같은 사용자의 동시 요청 - 파일 기반 sqlite 에서 스레드 두 개로 재현

sqlite는 행 잠금이 없지만 지갑/연속 출석 upsert(쓰기)가 트랜잭션의 첫 문장이므로
두 번째 트랜잭션은 첫 번째가 commit 할 때까지 대기합니다.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rewardapi.core import reward_rules
from rewardapi.core.exceptions import AlreadyClaimedError, AlreadyOwnedError, BaseAPIException
from rewardapi.models import Base, CoinTransaction, DailyTask, Reward, UserReward, UserStreak, Video
from rewardapi.repositories.ledger_repository import LedgerRepository
from rewardapi.repositories.wallet_repository import WalletRepository
from rewardapi.models.ledger import CoinTransactionType
from rewardapi.services.ledger_service import LedgerService
from rewardapi.services.referral_service import ReferralService
from rewardapi.services.rules_engine import CoinEntry, LedgerDelta
from rewardapi.services.streak_service import StreakService


@pytest.fixture
def file_session_factory(tmp_path, clock):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


def _run_twice(session_factory, clock, operation, service_class=LedgerService):
    barrier = threading.Barrier(2)

    def worker():
        session = session_factory()
        try:
            barrier.wait()
            return "ok", operation(service_class(session, clock=clock))
        except BaseAPIException as e:
            return "error", e
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [pool.submit(worker) for _ in range(2)]
        return [future.result() for future in futures]


def test_concurrent_purchase_succeeds_once(file_session_factory, clock):
    session = file_session_factory()
    reward = Reward(name="Frame", type="frame", coin_price=200, is_active=True)
    session.add(reward)
    wallet = WalletRepository(session).lock_wallet("user-1")
    LedgerRepository(session).apply_delta(
        "user-1",
        wallet,
        LedgerDelta(coins=200, coin_entries=(CoinEntry(200, CoinTransactionType.EARNED, "seed"),)),
        clock().today,
    )
    session.commit()
    reward_id = reward.id
    session.close()

    results = _run_twice(
        file_session_factory, clock, lambda service: service.purchase_reward("user-1", reward_id)
    )

    assert sorted(status for status, _ in results) == ["error", "ok"]
    assert isinstance(next(e for status, e in results if status == "error"), AlreadyOwnedError)
    check = file_session_factory()
    try:
        assert check.query(UserReward).count() == 1
        service = LedgerService(check, clock=clock)
        assert service.get_wallet("user-1").coins == 0
        assert service.verify_integrity("user-1").status == "OK"
    finally:
        check.close()


def test_concurrent_video_view_credits_once(file_session_factory, clock):
    session = file_session_factory()
    video = Video(title="clip", owner_id="creator-1", is_active=True)
    session.add(video)
    session.commit()
    video_id = video.id
    session.close()

    results = _run_twice(
        file_session_factory, clock, lambda service: service.record_video_view("user-1", video_id)
    )

    credited = [response.credited for status, response in results]
    assert sorted(credited) == [False, True]
    check = file_session_factory()
    try:
        assert LedgerService(check, clock=clock).get_wallet("user-1").balance == 20
    finally:
        check.close()


def _seed_claimable_task(session_factory, clock, user_id):
    """오늘 영상 1회 시청까지 마친 watch_video 태스크"""
    session = session_factory()
    try:
        video = Video(title="clip", owner_id="creator-1", is_active=True)
        task = DailyTask(title="Watch a video", task_type="watch_video", reward_amount=5, is_active=True)
        session.add_all([video, task])
        session.commit()
        LedgerService(session, clock=clock).record_video_view(user_id, video.id)
        return task.id
    finally:
        session.close()


def test_concurrent_task_claim_credits_once(file_session_factory, clock):
    task_id = _seed_claimable_task(file_session_factory, clock, "user-1")

    results = _run_twice(
        file_session_factory, clock, lambda service: service.claim_task_reward("user-1", task_id)
    )

    assert sorted(status for status, _ in results) == ["error", "ok"]
    assert isinstance(next(e for status, e in results if status == "error"), AlreadyClaimedError)
    check = file_session_factory()
    try:
        # 영상 시청 20 + 태스크 보상 5
        assert LedgerService(check, clock=clock).get_wallet("user-1").balance == 25
    finally:
        check.close()


def test_concurrent_check_in_advances_once(file_session_factory, clock):
    for day in range(5):
        results = _run_twice(
            file_session_factory, clock, lambda service: service.check_in("user-1"), StreakService
        )

        assert [status for status, _ in results] == ["ok", "ok"]
        states = sorted(response.state for _, response in results)
        expected_first = "NO_RECORD" if day == 0 else "CONTINUING"
        assert states == sorted(["ACTIVE_TODAY", expected_first])

        check = file_session_factory()
        try:
            streak = check.query(UserStreak).filter(UserStreak.user_id == "user-1").one()
            assert streak.current_streak == day + 1
            assert streak.longest_streak == day + 1
        finally:
            check.close()
        clock.advance()


def test_concurrent_check_in_awards_bonus_once(file_session_factory, clock):
    session = file_session_factory()
    session.add(
        UserStreak(
            user_id="user-1",
            current_streak=reward_rules.STREAK_BONUS_DAYS - 1,
            longest_streak=reward_rules.STREAK_BONUS_DAYS - 1,
            last_login_date=clock().yesterday,
        )
    )
    session.commit()
    session.close()

    results = _run_twice(
        file_session_factory, clock, lambda service: service.check_in("user-1"), StreakService
    )

    assert sorted(response.bonus_awarded for _, response in results) == [False, True]
    check = file_session_factory()
    try:
        assert (
            check.query(CoinTransaction)
            .filter(CoinTransaction.type == CoinTransactionType.BONUS.value)
            .count()
            == 1
        )
        ledger = LedgerService(check, clock=clock)
        assert ledger.get_wallet("user-1").coins == reward_rules.STREAK_BONUS_COINS
        assert ledger.verify_integrity("user-1").status == "OK"
    finally:
        check.close()


def test_referral_registered_between_lookup_and_lock_is_credited(file_session_factory, clock):
    task_id = _seed_claimable_task(file_session_factory, clock, "bob")

    session = file_session_factory()
    service = LedgerService(session, clock=clock)
    real_lookup = service.referral_repo.get_by_referred
    calls = []

    def lookup_then_register(referred_id):
        result = real_lookup(referred_id)
        if not calls:
            # 첫 조회 직후, 잠금 전에 다른 세션에서 추천 등록
            other = file_session_factory()
            try:
                ReferralService(other, clock=clock).register_referral("alice", referred_id)
            finally:
                other.close()
        calls.append(referred_id)
        return result

    service.referral_repo.get_by_referred = lookup_then_register
    try:
        service.claim_task_reward("bob", task_id)
    finally:
        session.close()

    check = file_session_factory()
    try:
        ledger = LedgerService(check, clock=clock)
        alice = ledger.get_wallet("alice")
        assert alice.balance == reward_rules.REFERRAL_REWARD
        assert alice.coins == reward_rules.REFERRAL_TASK_COINS
        assert ledger.verify_integrity("alice").status == "OK"
    finally:
        check.close()
