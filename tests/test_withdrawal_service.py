import pytest

from rewardapi.core.exceptions import (
    BelowMinimumError,
    InsufficientBalanceError,
    InvalidStatusTransitionError,
    NotFoundError,
)
from rewardapi.schemas.withdrawal import WithdrawalCreateRequest
from rewardapi.services.withdrawal_service import WithdrawalService


@pytest.fixture
def withdrawal_service(db, clock):
    return WithdrawalService(db, clock=clock)


def _request(amount=5000, **overrides):
    payload = {
        "amount": amount,
        "bank_name": "State Bank",
        "account_number": "123456789012",
        "ifsc_code": "sbin0001234",
        "account_holder_name": "Asha Rao",
    }
    payload.update(overrides)
    return WithdrawalCreateRequest(**payload)


class TestSubmit:
    def test_creates_pending_request_without_debit(self, withdrawal_service, ledger_service, fund):
        fund("user-1", balance=6000)

        result = withdrawal_service.submit_request("user-1", _request())

        assert result.status == "pending"
        assert result.ifsc_code == "SBIN0001234"
        assert result.account_number_masked == "********9012"
        assert ledger_service.get_wallet("user-1").balance == 6000

    def test_below_minimum(self, withdrawal_service, fund):
        fund("user-1", balance=6000)

        with pytest.raises(BelowMinimumError):
            withdrawal_service.submit_request("user-1", _request(amount=4000))

    def test_over_balance(self, withdrawal_service, fund):
        fund("user-1", balance=5200)

        with pytest.raises(InsufficientBalanceError):
            withdrawal_service.submit_request("user-1", _request(amount=6000))

    def test_blank_bank_field_rejected(self):
        with pytest.raises(ValueError):
            _request(bank_name="   ")


class TestDecision:
    def test_approve_debits_once(self, withdrawal_service, ledger_service, fund):
        fund("user-1", balance=9000)
        created = withdrawal_service.submit_request("user-1", _request(amount=5000))

        approved = withdrawal_service.approve_request(created.id, "paid")
        with pytest.raises(InvalidStatusTransitionError):
            withdrawal_service.approve_request(created.id)

        assert approved.status == "approved"
        assert approved.admin_notes == "paid"
        assert approved.processed_at is not None
        wallet = ledger_service.get_wallet("user-1")
        assert wallet.balance == 4000
        assert wallet.total_withdrawn == 5000

    def test_approve_rechecks_current_balance(self, withdrawal_service, ledger_service, fund):
        fund("user-1", balance=6000)
        first = withdrawal_service.submit_request("user-1", _request(amount=5000))
        second = withdrawal_service.submit_request("user-1", _request(amount=5500))
        withdrawal_service.approve_request(first.id)

        with pytest.raises(InsufficientBalanceError):
            withdrawal_service.approve_request(second.id)

        assert ledger_service.get_wallet("user-1").balance == 1000
        pending = withdrawal_service.list_requests(status="pending")
        assert [item.id for item in pending.withdrawals] == [second.id]

    def test_reject_is_final(self, withdrawal_service, ledger_service, fund):
        fund("user-1", balance=6000)
        created = withdrawal_service.submit_request("user-1", _request())

        rejected = withdrawal_service.reject_request(created.id, "wrong IFSC")
        with pytest.raises(InvalidStatusTransitionError):
            withdrawal_service.approve_request(created.id)

        assert rejected.status == "rejected"
        assert ledger_service.get_wallet("user-1").balance == 6000

    def test_unknown_request(self, withdrawal_service):
        with pytest.raises(NotFoundError):
            withdrawal_service.reject_request(404)


def test_list_my_requests(withdrawal_service, fund):
    fund("user-1", balance=20000)
    withdrawal_service.submit_request("user-1", _request(amount=5000))
    withdrawal_service.submit_request("user-1", _request(amount=6000))

    result = withdrawal_service.list_my_requests("user-1")

    assert result.total_count == 2
    assert [item.amount for item in result.withdrawals] == [6000, 5000]
