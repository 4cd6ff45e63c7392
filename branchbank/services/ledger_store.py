"""Ledger store for BranchBank.

Holds every account keyed by account number. Lookups go through a dict;
traversal sorts the keys so listings always come out in account order.
"""
from typing import Dict, Iterator, Optional

from branchbank.config import NAME_SIZE, OPENING_DEPOSIT
from branchbank.data_structures import Account, AccountSnapshot
from branchbank.exceptions import AccountNotFoundError, DuplicateKeyError
from branchbank.logging_config import get_logger

logger = get_logger(__name__)

OPENING_DEPOSIT_KIND = "Initial Deposit (Mandatory)"


def clean_name(name) -> str:
    """Strip and truncate a holder name to the stored size."""
    return (name or "").strip()[:NAME_SIZE]


class LedgerStore:
    """Ordered collection of accounts.
    
    The store only owns account membership. Balance rules live in the
    services that call it.
    """
    
    def __init__(self):
        self._accounts: Dict[int, Account] = {}
    
    def __len__(self):
        return len(self._accounts)
    
    def __contains__(self, acc_no):
        return acc_no in self._accounts
    
    def __iter__(self) -> Iterator[Account]:
        return self.accounts()
    
    def create(self, acc_no: int, name: str) -> Account:
        """Open a new account funded with the mandatory opening deposit.
        
        Args:
            acc_no: Unique account number.
            name: Account holder name.
            
        Returns:
            The new Account.
            
        Raises:
            DuplicateKeyError: If the account number is taken.
        """
        if acc_no in self._accounts:
            raise DuplicateKeyError(acc_no)
        
        account = Account(acc_no=acc_no, name=clean_name(name))
        account.balance = OPENING_DEPOSIT
        account.add_transaction(OPENING_DEPOSIT_KIND, OPENING_DEPOSIT)
        self._accounts[acc_no] = account
        logger.debug("Inserted account %s", acc_no)
        return account
    
    def insert(self, account: Account) -> Account:
        """Insert an already built account (used when recreating one).
        
        Raises:
            DuplicateKeyError: If the account number is taken.
        """
        if account.acc_no in self._accounts:
            raise DuplicateKeyError(account.acc_no)
        self._accounts[account.acc_no] = account
        logger.debug("Inserted account %s", account.acc_no)
        return account
    
    def restore(self, snapshot: AccountSnapshot) -> Account:
        """Recreate an account from a deletion snapshot."""
        return self.insert(snapshot.to_account())
    
    def find(self, acc_no: int) -> Optional[Account]:
        return self._accounts.get(acc_no)
    
    def get(self, acc_no: int) -> Account:
        """Look up an account, raising AccountNotFoundError if it is missing."""
        account = self._accounts.get(acc_no)
        if account is None:
            raise AccountNotFoundError(acc_no)
        return account
    
    def delete(self, acc_no: int) -> AccountSnapshot:
        """Remove an account and return a detached snapshot of it.
        
        Raises:
            AccountNotFoundError: If the account does not exist.
        """
        account = self._accounts.pop(acc_no, None)
        if account is None:
            raise AccountNotFoundError(acc_no)
        logger.debug("Removed account %s", acc_no)
        return AccountSnapshot.capture(account)
    
    def accounts(self) -> Iterator[Account]:
        """Yield accounts sorted by account number."""
        for acc_no in sorted(self._accounts):
            yield self._accounts[acc_no]
