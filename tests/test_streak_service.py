from datetime import date, timedelta

import pytest

from rewardapi.models import CoinTransaction, UserStreak
from rewardapi.services.ledger_service import LedgerService
from rewardapi.services.streak_service import StreakService


@pytest.fixture
def streak_service(db, clock):
    return StreakService(db, clock=clock)


def _seed_streak(db, user_id, current, longest, last_login):
    db.add(
        UserStreak(
            user_id=user_id,
            current_streak=current,
            longest_streak=longest,
            last_login_date=last_login,
        )
    )
    db.commit()


class TestCheckIn:
    def test_first_check_in(self, streak_service):
        result = streak_service.check_in("user-1")

        assert result.state == "NO_RECORD"
        assert result.streak.current_streak == 1
        assert result.streak.longest_streak == 1
        assert result.streak.last_login_date == "2024-06-15"
        assert result.bonus_awarded is False

    def test_second_check_in_same_day_is_noop(self, streak_service, db):
        streak_service.check_in("user-1")

        result = streak_service.check_in("user-1")

        assert result.state == "ACTIVE_TODAY"
        assert result.streak.current_streak == 1
        assert db.query(UserStreak).count() == 1

    def test_consecutive_days(self, streak_service, clock):
        for _ in range(3):
            streak_service.check_in("user-1")
            clock.advance()

        assert streak_service.get_streak("user-1").current_streak == 3
        result = streak_service.check_in("user-1")

        assert result.state == "CONTINUING"
        assert result.streak.current_streak == 4

    def test_rollover_awards_bonus_once(self, streak_service, db, clock):
        _seed_streak(db, "user-1", 25, 25, clock().yesterday)

        result = streak_service.check_in("user-1")
        replay = streak_service.check_in("user-1")

        assert result.bonus_awarded is True
        assert result.bonus_coins == 500
        assert result.streak.current_streak == 0
        assert result.streak.longest_streak == 26
        assert replay.bonus_awarded is False

        ledger = LedgerService(db, clock=clock)
        assert ledger.get_wallet("user-1").coins == 500
        assert db.query(CoinTransaction).filter(CoinTransaction.type == "bonus").count() == 1
        assert ledger.verify_integrity("user-1").status == "OK"

    def test_break_resets_to_one(self, streak_service, db, clock):
        _seed_streak(db, "user-1", 12, 18, clock().today - timedelta(days=3))

        result = streak_service.check_in("user-1")

        assert result.state == "BROKEN"
        assert result.streak.current_streak == 1
        assert result.streak.longest_streak == 18


class TestGetStreak:
    def test_no_record(self, streak_service):
        result = streak_service.get_streak("user-1")

        assert result.current_streak == 0
        assert result.last_login_date is None
        assert result.days_until_bonus == 26

    def test_continuing_streak_is_shown(self, streak_service, db, clock):
        _seed_streak(db, "user-1", 10, 10, clock().yesterday)

        result = streak_service.get_streak("user-1")

        assert result.current_streak == 10
        assert result.days_until_bonus == 16

    def test_broken_streak_is_shown_as_zero(self, streak_service, db):
        _seed_streak(db, "user-1", 10, 10, date(2024, 6, 1))

        result = streak_service.get_streak("user-1")

        assert result.current_streak == 0
        assert result.longest_streak == 10
