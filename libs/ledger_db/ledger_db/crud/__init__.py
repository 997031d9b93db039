# ledger_db/crud/__init__.py

from .accounts import AccountDAO
from .payments import PaymentLedgerDAO

__all__ = ["AccountDAO", "PaymentLedgerDAO"]
