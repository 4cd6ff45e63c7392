"""Undo/Redo management service for BranchBank.

Every mutating banking operation records an Action once it has completed.
An Action is plain data: the same record read with the opposite sign gives
the inverse effect, so one record serves both undo and redo. The per-kind
effects are implemented as commands, one class per ActionKind.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Type

from branchbank.config import DEFAULT_LOAN_TYPE, UNDO_MAX_DEPTH
from branchbank.data_structures import (
    Account,
    AccountSnapshot,
    InterestKind,
    Loan,
    LoanStatus,
    LoanTerms,
)
from branchbank.exceptions import (
    BankError,
    EmptyLogError,
    InsufficientFundsError,
    LoanNotFoundError,
)
from branchbank.logging_config import get_logger, log_action

logger = get_logger(__name__)


class ActionKind(str, Enum):
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"
    TRANSFER = "Transfer"
    CREATE_ACCOUNT = "Create Account"
    DELETE_ACCOUNT = "Delete Account"
    LOAN_APPLY = "Loan Apply"
    LOAN_PAYMENT = "Loan Payment"
    LOAN_CLOSE = "Loan Close"


@dataclass(frozen=True)
class Action:
    """Record of one completed mutation.

    The meaning of extra depends on the kind: the remaining amount before
    the payment for LOAN_PAYMENT, the total remaining at approval for
    LOAN_APPLY. balance_snapshot holds the balance the account had before
    the operation (the opening balance for CREATE_ACCOUNT).
    """
    kind: ActionKind
    acc_no: int
    other_acc_no: Optional[int] = None
    amount: float = 0
    name: str = ""
    loan_id: Optional[int] = None
    extra: float = 0.0
    balance_snapshot: int = 0
    snapshot: Optional[AccountSnapshot] = None
    terms: Optional[LoanTerms] = None

    @property
    def description(self) -> str:
        """Human-readable description of the action."""
        if self.kind == ActionKind.TRANSFER:
            return f"Transfer {self.amount} from {self.acc_no} to {self.other_acc_no}"
        if self.kind in (ActionKind.DEPOSIT, ActionKind.WITHDRAW):
            return f"{self.kind.value} {self.amount} ({self.acc_no})"
        if self.kind in (ActionKind.CREATE_ACCOUNT, ActionKind.DELETE_ACCOUNT):
            return f"{self.kind.value} {self.acc_no}"
        if self.kind == ActionKind.LOAN_CLOSE:
            return f"Loan Close {self.loan_id} ({self.acc_no})"
        return f"{self.kind.value} {self.loan_id}: {self.amount} ({self.acc_no})"


class UndoableCommand(ABC):
    """Applies the inverse and forward effect of one kind of Action.

    Implementations check everything they need before touching the ledger,
    so a raised BankError always means nothing was changed.
    """

    kind: ActionKind = None

    def __init__(self, store):
        self.store = store

    @abstractmethod
    def undo(self, action: Action):
        """Reverse the action's effect on the ledger."""

    @abstractmethod
    def redo(self, action: Action):
        """Re-apply the action's effect on the ledger."""

    def _loan(self, account: Account, loan_id: int) -> Loan:
        loan = account.find_loan(loan_id)
        if loan is None:
            raise LoanNotFoundError(loan_id, account.acc_no)
        return loan


class DepositCommand(UndoableCommand):
    kind = ActionKind.DEPOSIT

    def undo(self, action):
        account = self.store.get(action.acc_no)
        # May go negative if the money has been moved on since
        account.balance -= action.amount
        account.add_transaction("Undo Deposit", action.amount)

    def redo(self, action):
        account = self.store.get(action.acc_no)
        account.balance += action.amount
        account.add_transaction("Redo Deposit", action.amount)


class WithdrawCommand(UndoableCommand):
    kind = ActionKind.WITHDRAW

    def undo(self, action):
        account = self.store.get(action.acc_no)
        account.balance += action.amount
        account.add_transaction("Undo Withdraw", action.amount)

    def redo(self, action):
        account = self.store.get(action.acc_no)
        if account.balance < action.amount:
            raise InsufficientFundsError(action.amount, account.balance, account.acc_no)
        account.balance -= action.amount
        account.add_transaction("Redo Withdraw", action.amount)


class TransferCommand(UndoableCommand):
    """Moves money across both legs of a transfer, or neither."""

    kind = ActionKind.TRANSFER

    def undo(self, action):
        source = self.store.get(action.acc_no)
        target = self.store.get(action.other_acc_no)
        if target.balance < action.amount:
            raise InsufficientFundsError(action.amount, target.balance, target.acc_no)

        target.balance -= action.amount
        source.balance += action.amount
        source.add_transaction("Undo Transfer (back)", action.amount, target.acc_no)
        target.add_transaction("Undo Transfer (reversed)", action.amount, source.acc_no)

    def redo(self, action):
        source = self.store.get(action.acc_no)
        target = self.store.get(action.other_acc_no)
        if source.balance < action.amount:
            raise InsufficientFundsError(action.amount, source.balance, source.acc_no)

        source.balance -= action.amount
        target.balance += action.amount
        source.add_transaction("Redo Transfer (to)", action.amount, target.acc_no)
        target.add_transaction("Redo Transfer (from)", action.amount, source.acc_no)


class CreateAccountCommand(UndoableCommand):
    kind = ActionKind.CREATE_ACCOUNT

    def undo(self, action):
        self.store.delete(action.acc_no)

    def redo(self, action):
        account = Account(acc_no=action.acc_no, name=action.name,
                          balance=action.balance_snapshot)
        if action.balance_snapshot > 0:
            account.add_transaction("Redo Initial Balance", action.balance_snapshot)
        self.store.insert(account)


class DeleteAccountCommand(UndoableCommand):
    """Recreates a deleted account from the snapshot kept in the action.

    With a snapshot the history and loans come back too. Actions without
    one only restore the name and balance.
    """

    kind = ActionKind.DELETE_ACCOUNT

    def undo(self, action):
        if action.snapshot is not None:
            account = self.store.restore(action.snapshot)
        else:
            account = self.store.insert(Account(acc_no=action.acc_no, name=action.name,
                                                balance=action.balance_snapshot))
        account.add_transaction("Undo Delete Account", account.balance)

    def redo(self, action):
        self.store.delete(action.acc_no)


class LoanApplyCommand(UndoableCommand):
    kind = ActionKind.LOAN_APPLY

    def undo(self, action):
        account = self.store.get(action.acc_no)
        loan = self._loan(account, action.loan_id)
        account.loans.remove(loan)
        # Proceeds may already be spent; the balance is allowed to go negative
        account.balance -= loan.principal
        account.add_transaction("Undo Loan Apply (removed)", loan.principal)

    def redo(self, action):
        account = self.store.get(action.acc_no)
        terms = action.terms
        if terms is None:
            # Nothing but the amounts was kept: a one month flat loan
            terms = LoanTerms(0.0, InterestKind.SIMPLE, 1, float(action.amount))

        loan = Loan(
            loan_id=action.loan_id,
            loan_type=action.name or DEFAULT_LOAN_TYPE,
            principal=int(action.amount),
            annual_rate=terms.annual_rate,
            interest_kind=terms.interest_kind,
            term_months=terms.term_months,
            emi=terms.emi,
            remaining=action.extra,
        )
        account.loans.append(loan)
        account.balance += int(action.amount)
        account.add_transaction("Redo Loan Disbursed", int(action.amount))


class LoanPaymentCommand(UndoableCommand):
    """Balance moves by the truncated amount, remaining by the exact one."""

    kind = ActionKind.LOAN_PAYMENT

    def undo(self, action):
        account = self.store.get(action.acc_no)
        loan = self._loan(account, action.loan_id)
        paid = int(action.amount)

        account.balance += paid
        loan.remaining = action.extra
        if loan.remaining > 0.0:
            loan.status = LoanStatus.ACTIVE
        account.add_transaction("Undo Loan Payment", paid)

    def redo(self, action):
        account = self.store.get(action.acc_no)
        loan = self._loan(account, action.loan_id)
        if account.balance < action.amount:
            raise InsufficientFundsError(action.amount, account.balance, account.acc_no)
        paid = int(action.amount)

        account.balance -= paid
        loan.apply_payment(action.amount)
        account.add_transaction("Redo Loan Payment", paid)


class LoanCloseCommand(UndoableCommand):
    """Flips the status only; the payments behind the closure stay applied.

    Both directions add a zero-amount history entry.
    """

    kind = ActionKind.LOAN_CLOSE

    def undo(self, action):
        account = self.store.get(action.acc_no)
        self._loan(account, action.loan_id).status = LoanStatus.ACTIVE
        account.add_transaction("Undo Loan Close", 0)

    def redo(self, action):
        account = self.store.get(action.acc_no)
        self._loan(account, action.loan_id).status = LoanStatus.CLOSED
        account.add_transaction("Redo Loan Close", 0)


COMMANDS: Dict[ActionKind, Type[UndoableCommand]] = {
    command.kind: command
    for command in (
        DepositCommand,
        WithdrawCommand,
        TransferCommand,
        CreateAccountCommand,
        DeleteAccountCommand,
        LoanApplyCommand,
        LoanPaymentCommand,
        LoanCloseCommand,
    )
}


class UndoManager:
    """Owns the undo and redo stacks of one bank.

    An Action lives on exactly one stack at a time. Recording a new action
    clears the redo stack since the history has diverged. When an undo or
    redo cannot be applied the popped action is dropped for good and the
    error is raised to the caller.
    """

    def __init__(self, store, max_depth: Optional[int] = UNDO_MAX_DEPTH):
        self.store = store
        self._undo_stack: List[Action] = []
        self._redo_stack: List[Action] = []
        self._max_depth = max_depth
        self._commands = {kind: command(store) for kind, command in COMMANDS.items()}

    def record(self, action: Action) -> Action:
        """Push a completed action onto the undo stack and clear redo history."""
        self._undo_stack.append(action)
        if self._max_depth is not None and len(self._undo_stack) > self._max_depth:
            self._undo_stack.pop(0)  # Remove oldest
        self._redo_stack.clear()
        logger.debug("Recorded %s", action.description)
        return action

    def undo(self) -> Action:
        """Undo the last action and move it to the redo stack.

        Raises:
            EmptyLogError: If there is nothing to undo.
            BankError: If the inverse effect cannot be applied. The action
                is discarded in that case.
        """
        if not self._undo_stack:
            raise EmptyLogError("undo")

        action = self._undo_stack.pop()
        try:
            self._commands[action.kind].undo(action)
        except BankError as e:
            log_action(logger, "warning", "Undo of %s failed, action discarded: %s", action.description, e,
                       action=action.kind.value, acc_no=action.acc_no, loan_id=action.loan_id)
            raise

        self._redo_stack.append(action)
        log_action(logger, "info", "Undid %s", action.description,
                   action=action.kind.value, acc_no=action.acc_no, loan_id=action.loan_id)
        return action

    def redo(self) -> Action:
        """Re-apply the last undone action and move it back to the undo stack.

        Raises:
            EmptyLogError: If there is nothing to redo.
            BankError: If the forward effect cannot be applied. The action
                is discarded in that case.
        """
        if not self._redo_stack:
            raise EmptyLogError("redo")

        action = self._redo_stack.pop()
        try:
            self._commands[action.kind].redo(action)
        except BankError as e:
            log_action(logger, "warning", "Redo of %s failed, action discarded: %s", action.description, e,
                       action=action.kind.value, acc_no=action.acc_no, loan_id=action.loan_id)
            raise

        self._undo_stack.append(action)
        log_action(logger, "info", "Redid %s", action.description,
                   action=action.kind.value, acc_no=action.acc_no, loan_id=action.loan_id)
        return action

    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    def get_undo_description(self) -> Optional[str]:
        """Get description of the next undo action."""
        if self._undo_stack:
            return self._undo_stack[-1].description
        return None

    def get_redo_description(self) -> Optional[str]:
        """Get description of the next redo action."""
        if self._redo_stack:
            return self._redo_stack[-1].description
        return None

    def undo_actions(self) -> List[Action]:
        """Actions on the undo stack, oldest first."""
        return list(self._undo_stack)

    def redo_actions(self) -> List[Action]:
        """Actions on the redo stack, oldest first."""
        return list(self._redo_stack)

    def clear(self):
        """Clear both undo and redo stacks."""
        self._undo_stack.clear()
        self._redo_stack.clear()
