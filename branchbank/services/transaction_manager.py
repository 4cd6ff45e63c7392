"""Transaction management service for BranchBank.

This service applies the cash rules for deposits, withdrawals and
transfers, appends the history entries and records each completed
operation in the command log.
"""
import math
import numbers
from typing import Tuple

from branchbank.config import MIN_RETAINED_BALANCE, MIN_WITHDRAWAL
from branchbank.data_structures import Account
from branchbank.exceptions import (
    InsufficientFundsError,
    InvalidAmountError,
    PolicyViolationError,
)
from branchbank.logging_config import get_logger, log_action
from branchbank.services.undo_manager import Action, ActionKind

logger = get_logger(__name__)


def whole_amount(amount, label="amount") -> int:
    """Validate a positive whole-unit amount and return it as int.

    Raises:
        InvalidAmountError: For non-numeric, non-positive or fractional values.
    """
    if (isinstance(amount, bool) or not isinstance(amount, numbers.Real)
            or not math.isfinite(amount) or amount <= 0 or int(amount) != amount):
        raise InvalidAmountError(f"Invalid {label}: {amount}", {label: amount})
    return int(amount)


class TransactionManager:
    """Handles deposits, withdrawals and transfers."""
    
    def __init__(self, store, undo_manager):
        """Initialize TransactionManager.
        
        Args:
            store: LedgerStore holding the accounts.
            undo_manager: UndoManager receiving the recorded actions.
        """
        self.store = store
        self.undo_manager = undo_manager
    
    def deposit(self, acc_no, amount) -> Account:
        """Credit an account.
        
        Returns:
            The updated Account.
            
        Raises:
            InvalidAmountError: If the amount is not a positive whole number.
            AccountNotFoundError: If the account doesn't exist.
        """
        amount = whole_amount(amount)
        account = self.store.get(acc_no)
        
        account.balance += amount
        account.add_transaction("Deposit", amount)
        
        self.undo_manager.record(Action(
            kind=ActionKind.DEPOSIT,
            acc_no=acc_no,
            amount=amount,
            balance_snapshot=account.balance - amount,
        ))
        log_action(logger, "info", "Deposit of %s to account %s, balance %s", amount, acc_no, account.balance,
                   action=ActionKind.DEPOSIT.value, acc_no=acc_no)
        return account
    
    def withdraw(self, acc_no, amount) -> Account:
        """Debit an account, enforcing the withdrawal floor and retained balance.
        
        Raises:
            InvalidAmountError: If the amount is not positive or below MIN_WITHDRAWAL.
            AccountNotFoundError: If the account doesn't exist.
            PolicyViolationError: If less than MIN_RETAINED_BALANCE would remain.
        """
        amount = whole_amount(amount)
        account = self.store.get(acc_no)
        
        if amount < MIN_WITHDRAWAL:
            raise InvalidAmountError(
                f"Minimum withdraw amount is {MIN_WITHDRAWAL}",
                {'amount': amount, 'minimum': MIN_WITHDRAWAL}
            )
        if account.balance - amount < MIN_RETAINED_BALANCE:
            raise PolicyViolationError(MIN_RETAINED_BALANCE, account.balance - amount, acc_no)
        
        account.balance -= amount
        account.add_transaction("Withdraw", amount)
        
        self.undo_manager.record(Action(
            kind=ActionKind.WITHDRAW,
            acc_no=acc_no,
            amount=amount,
            balance_snapshot=account.balance + amount,
        ))
        log_action(logger, "info", "Withdrawal of %s from account %s, balance %s", amount, acc_no, account.balance,
                   action=ActionKind.WITHDRAW.value, acc_no=acc_no)
        return account
    
    def transfer(self, from_acc_no, to_acc_no, amount) -> Tuple[Account, Account]:
        """Move money between two accounts as one logged action.
        
        Returns:
            The (source, destination) accounts after the transfer.
            
        Raises:
            InvalidAmountError: If both accounts are the same or the amount is invalid.
            AccountNotFoundError: If either account doesn't exist.
            InsufficientFundsError: If the source balance is below the amount.
        """
        if from_acc_no == to_acc_no:
            raise InvalidAmountError("Cannot transfer to same account", {'acc_no': from_acc_no})
        source = self.store.get(from_acc_no)
        target = self.store.get(to_acc_no)
        amount = whole_amount(amount)
        
        if source.balance < amount:
            raise InsufficientFundsError(amount, source.balance, from_acc_no)
        
        balance_before = source.balance
        source.balance -= amount
        target.balance += amount
        source.add_transaction(f"Transfer to {to_acc_no}", amount, to_acc_no)
        target.add_transaction(f"Transfer from {from_acc_no}", amount, from_acc_no)
        
        self.undo_manager.record(Action(
            kind=ActionKind.TRANSFER,
            acc_no=from_acc_no,
            other_acc_no=to_acc_no,
            amount=amount,
            balance_snapshot=balance_before,
        ))
        log_action(logger, "info", "Transfer of %s from %s to %s", amount, from_acc_no, to_acc_no,
                   action=ActionKind.TRANSFER.value, acc_no=from_acc_no)
        return source, target
