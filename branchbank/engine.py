"""Business logic engine for BranchBank.

This module provides the BankEngine class, the single aggregate that owns
one bank's state (ledger store, command log and loan ID sequence) and acts
as a facade over the focused service classes in branchbank/services/.

Service Classes:
    - AccountService: account create/delete/rename
    - TransactionManager: deposits, withdrawals and transfers
    - LoanService: loan approval, payments and schedules
    - UndoManager: undo/redo of every logged action

Every facade method returns a Result; BankError rejections become failed
Results carrying the error's message and type.
"""
import itertools

from branchbank.config import LOAN_ID_START, UNDO_MAX_DEPTH
from branchbank.exceptions import BankError, LoanNotFoundError
from branchbank.logging_config import get_logger
from branchbank.reports import ReportGenerator
from branchbank.result import Result
from branchbank.services import (
    AccountService,
    LedgerStore,
    LoanService,
    TransactionManager,
    UndoManager,
)

logger = get_logger(__name__)


class BankEngine:
    """Owns one bank and exposes its operations.

    Two engines never share state, so tests can build as many as they need.

    Attributes:
        store: LedgerStore with every account.
        undo_manager: UndoManager holding the undo/redo stacks.
        loan_ids: Iterator of fresh loan IDs, never reused.
        account_service: AccountService instance (lazy-loaded).
        transaction_manager: TransactionManager instance (lazy-loaded).
        loan_service: LoanService instance (lazy-loaded).
        reports: ReportGenerator instance (lazy-loaded).
    """

    def __init__(self, max_undo_depth=UNDO_MAX_DEPTH, first_loan_id=LOAN_ID_START):
        self.store = LedgerStore()
        self._undo_manager = UndoManager(self.store, max_depth=max_undo_depth)
        self.loan_ids = itertools.count(first_loan_id)
        self._account_service = None
        self._transaction_manager = None
        self._loan_service = None
        self._reports = None

    @property
    def undo_manager(self):
        """Get the UndoManager instance."""
        return self._undo_manager

    @property
    def account_service(self):
        """Lazy-load AccountService instance."""
        if self._account_service is None:
            self._account_service = AccountService(self.store, self._undo_manager)
        return self._account_service

    @property
    def transaction_manager(self):
        """Lazy-load TransactionManager instance."""
        if self._transaction_manager is None:
            self._transaction_manager = TransactionManager(self.store, self._undo_manager)
        return self._transaction_manager

    @property
    def loan_service(self):
        """Lazy-load LoanService instance."""
        if self._loan_service is None:
            self._loan_service = LoanService(self.store, self._undo_manager, self.loan_ids)
        return self._loan_service

    @property
    def reports(self):
        """Lazy-load ReportGenerator instance."""
        if self._reports is None:
            self._reports = ReportGenerator(self.store)
        return self._reports

    def _run(self, label, operation, *args):
        try:
            return Result.ok(operation(*args))
        except BankError as e:
            logger.info("Rejected %s: %s", label, e.message)
            return Result.fail(e.message, e.error_type)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_account(self, acc_no, name):
        """Open an account. Result value: the new Account."""
        return self._run("create_account", self.account_service.create_account, acc_no, name)

    def delete_account(self, acc_no):
        """Delete an account. Result value: the AccountSnapshot kept for undo."""
        return self._run("delete_account", self.account_service.delete_account, acc_no)

    def rename_account(self, acc_no, name):
        return self._run("rename_account", self.account_service.rename_account, acc_no, name)

    def get_account(self, acc_no):
        return self._run("get_account", self.store.get, acc_no)

    def list_accounts(self):
        """DataFrame of all accounts in account-number order."""
        return self.reports.accounts_df()

    # ------------------------------------------------------------------
    # Cash operations
    # ------------------------------------------------------------------

    def deposit(self, acc_no, amount):
        """Credit an account. Result value: the new balance."""
        return self._run("deposit", lambda: self.transaction_manager.deposit(acc_no, amount).balance)

    def withdraw(self, acc_no, amount):
        """Debit an account. Result value: the new balance."""
        return self._run("withdraw", lambda: self.transaction_manager.withdraw(acc_no, amount).balance)

    def transfer(self, from_acc_no, to_acc_no, amount):
        """Move money between accounts. Result value: (source, destination) balances."""
        def transfer():
            source, target = self.transaction_manager.transfer(from_acc_no, to_acc_no, amount)
            return source.balance, target.balance
        return self._run("transfer", transfer)

    # ------------------------------------------------------------------
    # Loans
    # ------------------------------------------------------------------

    def quote_emi(self, principal, annual_rate, term_months):
        return self.loan_service.quote_emi(principal, annual_rate, term_months)

    def apply_loan(self, acc_no, loan_type, principal, annual_rate, interest_kind, term_months):
        """Approve and disburse a loan. Result value: the new Loan."""
        return self._run("apply_loan", self.loan_service.apply_loan, acc_no, loan_type, principal,
                         annual_rate, interest_kind, term_months)

    def pay_loan(self, acc_no, loan_id, amount):
        """Pay towards a loan. Result value: the updated Loan."""
        return self._run("pay_loan", self.loan_service.pay_loan, acc_no, loan_id, amount)

    def get_loans(self, acc_no):
        """Result value: DataFrame of the account's loans."""
        return self._run("loans_df", self.reports.loans_df, acc_no)

    def get_schedule(self, acc_no, loan_id, start_date=None):
        """Result value: amortization schedule DataFrame of one loan."""
        def schedule():
            loan = self.loan_service.find_loan(acc_no, loan_id)
            if loan is None:
                raise LoanNotFoundError(loan_id, acc_no)
            return self.loan_service.amortization_schedule(loan, start_date)
        return self._run("schedule", schedule)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_history(self, acc_no):
        """Result value: DataFrame of the account's transactions, oldest first."""
        return self._run("history_df", self.reports.history_df, acc_no)

    def get_statement(self, acc_no):
        """Result value: StatementData for the account."""
        return self._run("statement", self.reports.statement, acc_no)

    # ------------------------------------------------------------------
    # Undo / Redo
    # ------------------------------------------------------------------

    def undo(self):
        """Undo the last action. Result value: the Action undone."""
        return self._run("undo", self._undo_manager.undo)

    def redo(self):
        """Redo the last undone action. Result value: the Action redone."""
        return self._run("redo", self._undo_manager.redo)

    def can_undo(self):
        return self._undo_manager.can_undo()

    def can_redo(self):
        return self._undo_manager.can_redo()
