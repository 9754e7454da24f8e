import json
import logging
import threading
from functools import lru_cache
from pathlib import Path

from tubescrape.config import get_settings
from tubescrape.exceptions import AccountNotFound, InputError, InsufficientCredits, PermissionDenied
from tubescrape.models.credits import CreditBalance, ResetResult

logger = logging.getLogger(__name__)


class CreditStore:
    """Reads/writes credit balances to a local JSON file, keyed by user id.

    Every read-modify-write runs under one lock, so a deduction is a single
    atomic check-and-update.
    """

    def __init__(self, path: Path, default_credits: int = 100):
        self.path = path
        self.default_credits = default_credits
        self._lock = threading.Lock()

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text())

    def _write_all(self, accounts: dict) -> None:
        self.path.write_text(json.dumps(accounts, indent=2))

    def get(self, user_id: str) -> int | None:
        with self._lock:
            account = self._read_all().get(user_id)
        return None if account is None else account.get("credits", 0)

    def open_account(self, user_id: str) -> int:
        """Create an account with the default credits. Existing accounts are left alone."""
        with self._lock:
            accounts = self._read_all()
            if user_id not in accounts:
                accounts[user_id] = {"credits": self.default_credits}
                self._write_all(accounts)
            return accounts[user_id].get("credits", 0)

    def deduct(self, user_id: str, amount: int) -> int:
        if amount < 0:
            raise InputError("Deduction must not be negative.")
        with self._lock:
            accounts = self._read_all()
            if user_id not in accounts:
                raise AccountNotFound("User data not found.")
            current = accounts[user_id].get("credits", 0)
            if current < amount:
                raise InsufficientCredits("Insufficient credits.")
            accounts[user_id]["credits"] = current - amount
            self._write_all(accounts)
            return current - amount

    def reset_all(self, amount: int) -> int:
        with self._lock:
            accounts = self._read_all()
            for account in accounts.values():
                account["credits"] = amount
            self._write_all(accounts)
            return len(accounts)


@lru_cache
def get_credit_store() -> CreditStore:
    """Process-wide store; all deductions must share its lock."""
    settings = get_settings()
    return CreditStore(settings.credits_file, settings.default_credits)


def open_account(user_id: str) -> CreditBalance:
    return CreditBalance(user_id=user_id, credits=get_credit_store().open_account(user_id))


def get_balance(user_id: str) -> CreditBalance:
    credits = get_credit_store().get(user_id)
    if credits is None:
        raise AccountNotFound("User data not found.")
    return CreditBalance(user_id=user_id, credits=credits)


def deduct_credits(user_id: str, deduction: int = 0) -> CreditBalance:
    """Deduct credits, failing if the account is missing or the balance is too low."""
    credits = get_credit_store().deduct(user_id, deduction)
    return CreditBalance(user_id=user_id, credits=credits)


def reset_all_credits(caller_id: str) -> ResetResult:
    """Admin only: set every account back to the default credits."""
    settings = get_settings()
    if not settings.admin_user_id or caller_id != settings.admin_user_id:
        raise PermissionDenied("You do not have permission to perform this action.")
    count = get_credit_store().reset_all(settings.default_credits)
    logger.info("Admin %s reset %d accounts to %d credits", caller_id, count, settings.default_credits)
    return ResetResult(
        accounts_reset=count,
        credits=settings.default_credits,
        message="All user credits have been reset.",
    )
