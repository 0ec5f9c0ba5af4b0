"""Unit tests for the in-memory session store and transaction ledger"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from peydey_sdk.domain.models import Receipt, WithdrawalStatus
from peydey_sdk.infrastructure.memory.ledger import TransactionLedger
from peydey_sdk.infrastructure.memory.session import SessionStore
from peydey_sdk.utils.date_utils import format_transaction_date
from tests.factories import make_user


def test_create_session():
    """Test session creation marks the user authenticated"""
    store = SessionStore()
    user = make_user()

    session_id = store.create_session(user)
    state = store.get_session()

    assert session_id.startswith("session_")
    assert state.is_authenticated is True
    assert state.session_id == session_id
    assert state.user == user


def test_create_session_overwrites_previous_user():
    """Onboarding a second user replaces the first, with a new id"""
    store = SessionStore()
    first_id = store.create_session(make_user(id="user_001"))
    second_id = store.create_session(make_user(id="user_002"))

    state = store.get_session()
    assert state.user.id == "user_002"
    assert state.session_id == second_id
    assert second_id != first_id


def test_clear_session_is_idempotent():
    """Clearing twice leaves the same unauthenticated state as clearing once"""
    store = SessionStore()
    store.create_session(make_user())

    store.clear_session()
    once = store.get_session()
    store.clear_session()
    twice = store.get_session()

    assert once == twice
    assert twice.is_authenticated is False
    assert twice.session_id is None
    assert twice.user is None


def test_get_session_without_login():
    """A fresh store is unauthenticated"""
    assert SessionStore().get_session().is_authenticated is False


def test_add_transaction_defaults():
    """New entries get an id, pending status and the ledger currency"""
    ledger = TransactionLedger()

    entry = ledger.add_transaction("user_001", 100)

    assert entry.id.startswith("txn_")
    assert entry.amount == 100
    assert entry.currency == "AED"
    assert entry.status == WithdrawalStatus.PENDING
    assert entry.updated_at is None


def test_add_transaction_caller_fields_win():
    """Caller-supplied fields override the defaults"""
    ledger = TransactionLedger()

    entry = ledger.add_transaction("user_001", 50, status=WithdrawalStatus.COMPLETED, currency="USD")

    assert entry.status == WithdrawalStatus.COMPLETED
    assert entry.currency == "USD"


def test_history_most_recent_first():
    """Latest addition is returned first"""
    ledger = TransactionLedger()
    ledger.add_transaction("user_001", 100)
    ledger.add_transaction("user_001", 200)

    history = ledger.get_transaction_history("user_001")

    assert [e.amount for e in history] == [200, 100]


def test_history_filters_by_user_and_limit():
    """Only the user's entries, truncated to limit"""
    ledger = TransactionLedger()
    for i in range(15):
        ledger.add_transaction("user_001", i + 1)
    ledger.add_transaction("user_002", 999)

    history = ledger.get_transaction_history("user_001")
    assert len(history) == 10
    assert history[0].amount == 15

    assert len(ledger.get_transaction_history("user_001", limit=3)) == 3
    assert [e.amount for e in ledger.get_transaction_history("user_002")] == [999]
    assert ledger.get_transaction_history("nobody") == []


def test_update_transaction_status():
    """Status update sets updated_at and can attach a receipt"""
    ledger = TransactionLedger()
    entry = ledger.add_transaction("user_001", 100)
    receipt = Receipt(
        receipt_number="RCP_1",
        date=datetime.now(timezone.utc),
        amount=Decimal("100"),
        currency="AED",
        user="Muhammad Abdul Majid",
        emirates_id="784-1968-6570305-0",
        employer="Emirates NBD",
        wps_partner="Alfardan Exchange",
        status=WithdrawalStatus.COMPLETED,
        message="done",
    )

    updated = ledger.update_transaction_status(entry.id, WithdrawalStatus.COMPLETED, receipt)

    assert updated.status == WithdrawalStatus.COMPLETED
    assert updated.updated_at is not None
    assert updated.receipt == receipt
    assert ledger.get_transaction(entry.id).status == WithdrawalStatus.COMPLETED


def test_update_unknown_transaction():
    """Unknown ids report not-found"""
    assert TransactionLedger().update_transaction_status("txn_missing", WithdrawalStatus.FAILED) is None


def test_returned_entries_are_copies():
    """Mutating a returned entry does not change the ledger"""
    ledger = TransactionLedger()
    entry = ledger.add_transaction("user_001", 100)

    entry.status = WithdrawalStatus.FAILED
    ledger.get_transaction_history("user_001")[0].amount = Decimal("1")

    stored = ledger.get_transaction(entry.id)
    assert stored.status == WithdrawalStatus.PENDING
    assert stored.amount == 100


def test_format_transaction_date():
    """Test display formatting of an ISO timestamp"""
    formatted = format_transaction_date("2025-02-16T10:30:00.000Z")

    assert "February 16, 2025" in formatted
    assert "10:30" in formatted


def test_format_transaction_date_normalises_to_utc():
    """Aware datetimes in other zones render in UTC"""
    dubai = timezone(timedelta(hours=4))
    moment = datetime(2025, 2, 16, 14, 30, tzinfo=dubai)

    assert format_transaction_date(moment) == "February 16, 2025 at 10:30 AM"
    assert TransactionLedger().format_transaction_date(moment) == format_transaction_date(moment)
