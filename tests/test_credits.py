import threading

import pytest

from tubescrape.config import Settings
from tubescrape.exceptions import AccountNotFound, InputError, InsufficientCredits, PermissionDenied
from tubescrape.services import credits as credits_service
from tubescrape.services.credits import CreditStore


@pytest.fixture
def store(tmp_path):
    return CreditStore(tmp_path / "credits.json", default_credits=100)


@pytest.fixture
def settings(tmp_path, mocker):
    settings = Settings(credits_file=tmp_path / "credits.json", admin_user_id="admin", default_credits=100)
    mocker.patch("tubescrape.services.credits.get_settings", return_value=settings)
    return settings


@pytest.fixture
def service_store(store, mocker):
    mocker.patch("tubescrape.services.credits.get_credit_store", return_value=store)
    return store


class TestCreditStore:
    def test_open_account(self, store):
        assert store.open_account("alice") == 100
        assert store.get("alice") == 100

    def test_open_account_keeps_existing_balance(self, store):
        store.open_account("alice")
        store.deduct("alice", 30)
        assert store.open_account("alice") == 70

    def test_unknown_account(self, store):
        assert store.get("nobody") is None

    def test_deduct(self, store):
        store.open_account("alice")
        assert store.deduct("alice", 40) == 60
        assert store.get("alice") == 60

    def test_deduct_whole_balance(self, store):
        store.open_account("alice")
        assert store.deduct("alice", 100) == 0

    def test_insufficient_credits(self, store):
        store.open_account("alice")
        with pytest.raises(InsufficientCredits):
            store.deduct("alice", 101)
        assert store.get("alice") == 100

    def test_deduct_missing_account(self, store):
        with pytest.raises(AccountNotFound):
            store.deduct("nobody", 1)

    def test_negative_deduction(self, store):
        store.open_account("alice")
        with pytest.raises(InputError):
            store.deduct("alice", -5)

    def test_reset_all(self, store):
        store.open_account("alice")
        store.open_account("bob")
        store.deduct("alice", 90)
        assert store.reset_all(100) == 2
        assert store.get("alice") == 100
        assert store.get("bob") == 100

    def test_concurrent_deductions_never_overdraw(self, store):
        store.open_account("alice")
        results = []

        def deduct():
            try:
                results.append(store.deduct("alice", 10))
            except InsufficientCredits:
                results.append(None)

        threads = [threading.Thread(target=deduct) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len([r for r in results if r is not None]) == 10
        assert store.get("alice") == 0


class TestCreditService:
    def test_get_balance(self, settings, service_store):
        service_store.open_account("alice")
        assert credits_service.get_balance("alice").credits == 100

    def test_get_balance_missing(self, settings, service_store):
        with pytest.raises(AccountNotFound):
            credits_service.get_balance("nobody")

    def test_deduct(self, settings, service_store):
        service_store.open_account("alice")
        balance = credits_service.deduct_credits("alice", 25)
        assert balance.user_id == "alice"
        assert balance.credits == 75

    def test_reset_requires_admin(self, settings, service_store):
        with pytest.raises(PermissionDenied):
            credits_service.reset_all_credits("alice")

    def test_reset_without_configured_admin(self, settings, service_store):
        settings.admin_user_id = ""
        with pytest.raises(PermissionDenied):
            credits_service.reset_all_credits("")

    def test_admin_reset(self, settings, service_store):
        service_store.open_account("alice")
        service_store.deduct("alice", 50)
        result = credits_service.reset_all_credits("admin")
        assert result.accounts_reset == 1
        assert result.credits == 100
        assert service_store.get("alice") == 100
