from datetime import date, timedelta

from rewardapi.services.streak_tracker import StreakRecord, StreakState, advance, classify

TODAY = date(2024, 6, 15)
YESTERDAY = TODAY - timedelta(days=1)


def test_first_login_starts_at_one():
    transition = advance(None, TODAY, YESTERDAY)

    assert transition.state == StreakState.NO_RECORD
    assert transition.record == StreakRecord(1, 1, TODAY)
    assert not transition.bonus_fired


def test_same_day_is_noop():
    record = StreakRecord(current_streak=4, longest_streak=9, last_login_date=TODAY)

    transition = advance(record, TODAY, YESTERDAY)

    assert transition.state == StreakState.ACTIVE_TODAY
    assert transition.record == record
    assert not transition.changed


def test_continuing_increments():
    record = StreakRecord(current_streak=4, longest_streak=4, last_login_date=YESTERDAY)

    transition = advance(record, TODAY, YESTERDAY)

    assert transition.state == StreakState.CONTINUING
    assert transition.record.current_streak == 5
    assert transition.record.longest_streak == 5


def test_rollover_fires_bonus_and_resets():
    record = StreakRecord(current_streak=25, longest_streak=25, last_login_date=YESTERDAY)

    transition = advance(record, TODAY, YESTERDAY)

    assert transition.bonus_fired
    assert transition.bonus_coins == 500
    assert transition.reached_streak == 26
    assert transition.record.current_streak == 0
    assert transition.record.longest_streak == 26
    assert transition.record.last_login_date == TODAY


def test_day_after_bonus_starts_again_at_one():
    record = StreakRecord(current_streak=0, longest_streak=26, last_login_date=YESTERDAY)

    transition = advance(record, TODAY, YESTERDAY)

    assert transition.record.current_streak == 1
    assert transition.record.longest_streak == 26
    assert not transition.bonus_fired


def test_break_resets_to_one_and_keeps_longest():
    record = StreakRecord(current_streak=20, longest_streak=20, last_login_date=TODAY - timedelta(days=2))

    transition = advance(record, TODAY, YESTERDAY)

    assert transition.state == StreakState.BROKEN
    assert transition.record.current_streak == 1
    assert transition.record.longest_streak == 20


def test_future_last_login_is_broken():
    record = StreakRecord(current_streak=3, longest_streak=3, last_login_date=TODAY + timedelta(days=1))

    assert classify(record, TODAY, YESTERDAY) == StreakState.BROKEN


def test_custom_bonus_threshold():
    record = StreakRecord(current_streak=2, longest_streak=2, last_login_date=YESTERDAY)

    transition = advance(record, TODAY, YESTERDAY, bonus_days=3, bonus_coins=10)

    assert transition.bonus_fired
    assert transition.bonus_coins == 10
