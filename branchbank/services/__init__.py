"""Services package for BranchBank business logic.

This package contains the focused service classes behind the BankEngine
facade: the ledger store, the account, transaction and loan services, and
the undo manager.
"""

from .ledger_store import LedgerStore
from .undo_manager import UndoManager, UndoableCommand, Action, ActionKind
from .transaction_manager import TransactionManager
from .account_service import AccountService
from .loan_service import LoanService, calculate_emi

__all__ = ['LedgerStore', 'UndoManager', 'UndoableCommand', 'Action', 'ActionKind',
           'TransactionManager', 'AccountService', 'LoanService', 'calculate_emi']
