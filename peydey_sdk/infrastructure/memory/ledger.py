"""In-memory withdrawal transaction ledger"""

import threading
from dataclasses import replace
from typing import List, Optional
from peydey_sdk.domain.models import LedgerEntry, Receipt, WithdrawalStatus
from peydey_sdk.utils.date_utils import utcnow, format_transaction_date
from peydey_sdk.utils.ids import generate_id
from peydey_sdk.utils.money import Amount, to_money


class TransactionLedger:
    """
    Append-only log of withdrawal transactions.

    Entries are kept newest-first and never deleted; only status,
    updated_at and receipt change after creation. Callers always get
    copies, never the stored entries.
    """

    def __init__(self, currency: str = "AED"):
        self.currency = currency
        self._lock = threading.Lock()
        self._entries: List[LedgerEntry] = []

    def add_transaction(
        self,
        user_id: str,
        amount: Amount,
        *,
        status: WithdrawalStatus = WithdrawalStatus.PENDING,
        currency: Optional[str] = None,
        withdrawal_type: str = "salary",
        withdrawal_id: Optional[str] = None,
    ) -> LedgerEntry:
        """Record a new transaction; defaults to pending in the ledger currency"""
        entry = LedgerEntry(
            id=generate_id("txn"),
            user_id=user_id,
            amount=to_money(amount),
            currency=currency or self.currency,
            status=WithdrawalStatus(status),
            timestamp=utcnow(),
            withdrawal_type=withdrawal_type,
            withdrawal_id=withdrawal_id,
        )
        with self._lock:
            self._entries.insert(0, entry)
        return replace(entry)

    def get_transaction_history(self, user_id: str, limit: int = 10) -> List[LedgerEntry]:
        """Most recent entries for a user, newest first"""
        with self._lock:
            matching = [e for e in self._entries if e.user_id == user_id]
        return [replace(e) for e in matching[:max(limit, 0)]]

    def get_transaction(self, transaction_id: str) -> Optional[LedgerEntry]:
        with self._lock:
            entry = self._find(transaction_id)
            return replace(entry) if entry else None

    def update_transaction_status(
        self,
        transaction_id: str,
        status: WithdrawalStatus,
        receipt: Optional[Receipt] = None,
    ) -> Optional[LedgerEntry]:
        """Set status (and optionally attach a receipt); None if the id is unknown"""
        with self._lock:
            entry = self._find(transaction_id)
            if entry is None:
                return None
            entry.status = WithdrawalStatus(status)
            entry.updated_at = utcnow()
            if receipt is not None:
                entry.receipt = receipt
            return replace(entry)

    def format_transaction_date(self, timestamp) -> str:
        return format_transaction_date(timestamp)

    def _find(self, transaction_id: str) -> Optional[LedgerEntry]:
        return next((e for e in self._entries if e.id == transaction_id), None)
