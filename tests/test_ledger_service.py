from datetime import date

import pytest

from rewardapi.core.exceptions import (
    AlreadyClaimedError,
    AlreadyOwnedError,
    BelowMinimumError,
    InsufficientBalanceError,
    InsufficientCoinsError,
    NotEligibleError,
    NotFoundError,
)
from rewardapi.models import CoinTransaction, Earning, UserDailyTask, UserReward, Video, Ad
from rewardapi.models.video import AdView, CreatorEarning

TODAY = date(2024, 6, 15)


def _assert_reconciled(ledger_service, user_id):
    result = ledger_service.verify_integrity(user_id)
    assert result.status == "OK"
    assert result.wallet_coins == result.ledger_coins


class TestRecordVideoView:
    def test_credits_once_per_day(self, ledger_service, video, db):
        first = ledger_service.record_video_view("user-1", video.id)
        second = ledger_service.record_video_view("user-1", video.id)

        assert first.credited is True
        assert first.amount == 20
        assert second.credited is False
        assert second.amount == 0

        wallet = ledger_service.get_wallet("user-1")
        assert wallet.balance == 20
        assert wallet.total_earned == 20
        assert db.query(Earning).filter(Earning.user_id == "user-1").count() == 1

    def test_credits_again_next_day(self, ledger_service, video, clock):
        ledger_service.record_video_view("user-1", video.id)
        clock.advance()

        result = ledger_service.record_video_view("user-1", video.id)

        assert result.credited is True
        assert ledger_service.get_wallet("user-1").balance == 40

    def test_increments_view_counter(self, ledger_service, video, db):
        ledger_service.record_video_view("user-1", video.id)
        ledger_service.record_video_view("user-2", video.id)
        ledger_service.record_video_view("user-2", video.id)

        db.expire_all()
        assert db.get(Video, video.id).views == 2

    def test_unknown_video(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.record_video_view("user-1", 999)


class TestRecordAdView:
    def test_splits_between_viewer_and_creator(self, ledger_service, video, ad, db):
        result = ledger_service.record_ad_view(ad.id, video.id, "viewer-1")

        assert result.credited is True
        assert (result.viewer_amount, result.creator_amount) == (3, 7)
        assert ledger_service.get_wallet("viewer-1").balance == 3
        assert ledger_service.get_wallet("creator-1").balance == 7
        assert db.query(CreatorEarning).count() == 1

        db.expire_all()
        assert db.get(Ad, ad.id).view_count == 1

    def test_replay_same_day_not_credited(self, ledger_service, video, ad, db):
        ledger_service.record_ad_view(ad.id, video.id, "viewer-1")

        result = ledger_service.record_ad_view(ad.id, video.id, "viewer-1")

        assert result.credited is False
        assert db.query(AdView).count() == 1
        assert ledger_service.get_wallet("creator-1").balance == 7

    def test_inactive_ad_returns_false(self, ledger_service, video, ad, db):
        ad.is_active = False
        db.commit()

        result = ledger_service.record_ad_view(ad.id, video.id, "viewer-1")

        assert result.credited is False
        assert ledger_service.get_wallet("viewer-1").balance == 0

    def test_own_video_pays_viewer_share_only(self, ledger_service, video, ad):
        result = ledger_service.record_ad_view(ad.id, video.id, "creator-1")

        assert result.creator_amount == 0
        assert ledger_service.get_wallet("creator-1").balance == 3

    def test_unknown_ad(self, ledger_service, video):
        with pytest.raises(NotFoundError):
            ledger_service.record_ad_view(999, video.id, "viewer-1")


class TestClaimTaskReward:
    def test_claim_then_replay(self, ledger_service, video, make_task, db):
        task = make_task("watch_video", reward_amount=5)
        ledger_service.record_video_view("user-1", video.id)

        result = ledger_service.claim_task_reward("user-1", task.id)
        with pytest.raises(AlreadyClaimedError):
            ledger_service.claim_task_reward("user-1", task.id)

        assert result.reward_amount == 5
        assert result.balance == 25
        assert ledger_service.get_wallet("user-1").balance == 25
        assert db.query(UserDailyTask).count() == 1

    def test_not_eligible_without_progress(self, ledger_service, make_task):
        task = make_task("watch_3_videos", reward_amount=15)

        with pytest.raises(NotEligibleError):
            ledger_service.claim_task_reward("user-1", task.id)

        assert ledger_service.get_wallet("user-1").balance == 0

    def test_daily_login_requires_check_in(self, ledger_service, make_task, db):
        from rewardapi.services.streak_service import StreakService

        task = make_task("daily_login", reward_amount=2)
        with pytest.raises(NotEligibleError):
            ledger_service.claim_task_reward("user-1", task.id)

        StreakService(db, clock=ledger_service.clock).check_in("user-1")
        result = ledger_service.claim_task_reward("user-1", task.id)

        assert result.reward_amount == 2

    def test_claimable_again_next_day(self, ledger_service, video, make_task, clock):
        task = make_task("watch_video", reward_amount=5)
        ledger_service.record_video_view("user-1", video.id)
        ledger_service.claim_task_reward("user-1", task.id)

        clock.advance()
        with pytest.raises(NotEligibleError):
            ledger_service.claim_task_reward("user-1", task.id)
        ledger_service.record_video_view("user-1", video.id)
        ledger_service.claim_task_reward("user-1", task.id)

        assert ledger_service.get_wallet("user-1").balance == 20 + 5 + 20 + 5

    def test_inactive_task_not_found(self, ledger_service, make_task):
        task = make_task("watch_video", is_active=False)

        with pytest.raises(NotFoundError):
            ledger_service.claim_task_reward("user-1", task.id)


class TestConvertCoins:
    def test_converts_with_floor(self, ledger_service, fund):
        fund("user-1", coins=1050)

        result = ledger_service.convert_coins_to_rupees("user-1", 1050)

        assert result.rupees == 105
        assert result.coins_used == 1050
        assert result.wallet.coins == 0
        assert result.wallet.balance == 105
        _assert_reconciled(ledger_service, "user-1")

    def test_remainder_coins_are_kept(self, ledger_service, fund):
        fund("user-1", coins=159)

        result = ledger_service.convert_coins_to_rupees("user-1", 159)

        assert result.rupees == 15
        assert result.coins_used == 150
        assert result.wallet.coins == 9
        _assert_reconciled(ledger_service, "user-1")

    def test_below_minimum(self, ledger_service, fund):
        fund("user-1", coins=500)

        with pytest.raises(BelowMinimumError):
            ledger_service.convert_coins_to_rupees("user-1", 99)

        assert ledger_service.get_wallet("user-1").coins == 500

    def test_insufficient_coins(self, ledger_service, fund):
        fund("user-1", coins=120)

        with pytest.raises(InsufficientCoinsError):
            ledger_service.convert_coins_to_rupees("user-1", 150)

        wallet = ledger_service.get_wallet("user-1")
        assert wallet.coins == 120
        assert wallet.balance == 0

    def test_conversion_writes_both_ledgers(self, ledger_service, fund, db):
        fund("user-1", coins=300)

        ledger_service.convert_coins_to_rupees("user-1", 300)

        converted = db.query(CoinTransaction).filter(CoinTransaction.type == "converted").one()
        earning = db.query(Earning).filter(Earning.type == "coin_conversion").one()
        assert converted.amount == -300
        assert earning.amount == 30
        assert earning.earned_on == TODAY


class TestPurchaseReward:
    def test_purchase_once(self, ledger_service, fund, reward, db):
        fund("user-1", coins=450)

        result = ledger_service.purchase_reward("user-1", reward.id)
        with pytest.raises(AlreadyOwnedError):
            ledger_service.purchase_reward("user-1", reward.id)

        assert result.coins_spent == 200
        assert result.coins_remaining == 250
        assert db.query(UserReward).count() == 1
        _assert_reconciled(ledger_service, "user-1")

    def test_insufficient_coins(self, ledger_service, fund, reward, db):
        fund("user-1", coins=199)

        with pytest.raises(InsufficientCoinsError):
            ledger_service.purchase_reward("user-1", reward.id)

        assert db.query(UserReward).count() == 0
        assert ledger_service.get_wallet("user-1").coins == 199

    def test_unknown_reward(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.purchase_reward("user-1", 404)


class TestStreakBonusAndWithdrawal:
    def test_award_streak_bonus(self, ledger_service, db):
        wallet = ledger_service.award_streak_bonus("user-1", 26, 500, ref_id="streak_bonus_user-1_2024-06-15")

        assert wallet.coins == 500
        entry = db.query(CoinTransaction).one()
        assert entry.type == "bonus"
        assert entry.description == "26-day streak bonus"
        _assert_reconciled(ledger_service, "user-1")

    def test_streak_bonus_ref_is_unique(self, ledger_service):
        ledger_service.award_streak_bonus("user-1", 26, 500, ref_id="bonus-ref")

        with pytest.raises(AlreadyClaimedError):
            ledger_service.award_streak_bonus("user-1", 26, 500, ref_id="bonus-ref")

        assert ledger_service.get_wallet("user-1").coins == 500

    def test_process_withdrawal(self, ledger_service, fund):
        fund("user-1", balance=8000)

        wallet = ledger_service.process_withdrawal("user-1", 5000)

        assert wallet.balance == 3000
        assert wallet.total_withdrawn == 5000
        assert wallet.total_earned == 8000

    def test_process_withdrawal_insufficient(self, ledger_service, fund):
        fund("user-1", balance=4000)

        with pytest.raises(InsufficientBalanceError):
            ledger_service.process_withdrawal("user-1", 5000)

        assert ledger_service.get_wallet("user-1").balance == 4000


class TestReads:
    def test_wallet_defaults_to_zero(self, ledger_service):
        wallet = ledger_service.get_wallet("nobody")

        assert wallet.user_id == "nobody"
        assert wallet.coins == 0
        assert wallet.balance == 0

    def test_transactions_newest_first(self, ledger_service, fund):
        fund("user-1", coins=300)
        ledger_service.convert_coins_to_rupees("user-1", 200)

        page = ledger_service.get_transactions("user-1", limit=1)

        assert page.coins == 100
        assert page.total_count == 2
        assert page.has_next is True
        assert page.entries[0].type == "converted"

    def test_earnings_page(self, ledger_service, video):
        ledger_service.record_video_view("user-1", video.id)

        page = ledger_service.get_earnings("user-1")

        assert page.balance == 20
        assert page.entries[0].type == "video_watch"
        assert page.entries[0].earned_on == "2024-06-15"

    def test_conversion_quote(self, ledger_service):
        quote = ledger_service.conversion_quote(99)

        assert quote.rupees == 9
        assert quote.meets_minimum is False
        assert quote.min_coins == 100


def test_balances_never_negative_across_sequence(ledger_service, fund, reward, video):
    fund("user-1", coins=250)
    ledger_service.record_video_view("user-1", video.id)
    ledger_service.purchase_reward("user-1", reward.id)
    with pytest.raises(InsufficientCoinsError):
        ledger_service.convert_coins_to_rupees("user-1", 100)
    with pytest.raises(InsufficientBalanceError):
        ledger_service.process_withdrawal("user-1", 5000)

    wallet = ledger_service.get_wallet("user-1")
    assert wallet.coins == 50
    assert wallet.balance == 20
    _assert_reconciled(ledger_service, "user-1")
