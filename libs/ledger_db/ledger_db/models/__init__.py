# ledger_db/models/__init__.py
"""Import all models so ``Base.metadata`` knows every table."""

from ledger_db.models.account import Account
from ledger_db.models.payments import DepositLedger, LedgerStatus

__all__ = ["Account", "DepositLedger", "LedgerStatus"]
