"""Account lifecycle service for BranchBank.

Opening and closing accounts are logged actions; renaming is not.
"""
from branchbank.config import OPENING_DEPOSIT
from branchbank.data_structures import Account, AccountSnapshot
from branchbank.logging_config import get_logger, log_action
from branchbank.services.ledger_store import clean_name
from branchbank.services.undo_manager import Action, ActionKind

logger = get_logger(__name__)


class AccountService:
    """Handles account creation, deletion and updates."""
    
    def __init__(self, store, undo_manager):
        self.store = store
        self.undo_manager = undo_manager
    
    def create_account(self, acc_no, name) -> Account:
        """Open an account with the mandatory opening deposit.
        
        Raises:
            DuplicateKeyError: If the account number is taken.
        """
        account = self.store.create(acc_no, name)
        self.undo_manager.record(Action(
            kind=ActionKind.CREATE_ACCOUNT,
            acc_no=acc_no,
            name=account.name,
            balance_snapshot=account.balance,
        ))
        log_action(logger, "info", "Account %s created with opening deposit %s", acc_no, OPENING_DEPOSIT,
                   action=ActionKind.CREATE_ACCOUNT.value, acc_no=acc_no)
        return account
    
    def delete_account(self, acc_no) -> AccountSnapshot:
        """Delete an account, keeping a snapshot in the log for undo.
        
        Raises:
            AccountNotFoundError: If the account doesn't exist.
        """
        snapshot = self.store.delete(acc_no)
        self.undo_manager.record(Action(
            kind=ActionKind.DELETE_ACCOUNT,
            acc_no=acc_no,
            name=snapshot.name,
            balance_snapshot=snapshot.balance,
            snapshot=snapshot,
        ))
        log_action(logger, "info", "Account %s deleted", acc_no,
                   action=ActionKind.DELETE_ACCOUNT.value, acc_no=acc_no)
        return snapshot
    
    def rename_account(self, acc_no, name) -> Account:
        """Change the holder name. Not recorded in the command log.
        
        Raises:
            AccountNotFoundError: If the account doesn't exist.
        """
        account = self.store.get(acc_no)
        account.name = clean_name(name)
        logger.info("Account %s renamed", acc_no)
        return account
