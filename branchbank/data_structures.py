"""Ledger records and DTOs shared by the BranchBank services."""
import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

import pandas as pd


class InterestKind(str, Enum):
    SIMPLE = "Simple"
    COMPOUND = "Compound(EMI)"


class LoanStatus(str, Enum):
    ACTIVE = "Active"
    CLOSED = "Closed"


@dataclass(frozen=True)
class Transaction:
    """One entry of an account's audit history. Never edited or removed."""
    kind: str
    amount: int
    other_acc: Optional[int] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class LoanTerms:
    """The pricing parameters a loan was approved with."""
    annual_rate: float
    interest_kind: InterestKind
    term_months: int
    emi: float


@dataclass
class Loan:
    """A loan owned by exactly one account.
    
    remaining is the money still owed. status is Closed exactly when
    remaining has been paid down to 0.
    """
    loan_id: int
    loan_type: str
    principal: int
    annual_rate: float
    interest_kind: InterestKind
    term_months: int
    emi: float
    remaining: float
    status: LoanStatus = LoanStatus.ACTIVE
    
    @property
    def terms(self) -> LoanTerms:
        return LoanTerms(self.annual_rate, self.interest_kind, self.term_months, self.emi)
    
    @property
    def is_closed(self) -> bool:
        return self.status == LoanStatus.CLOSED
    
    def apply_payment(self, amount: float):
        """Reduce the amount owed, closing the loan once nothing is left."""
        self.remaining -= amount
        if self.remaining <= 0.0:
            self.remaining = 0.0
            self.status = LoanStatus.CLOSED
    
    def to_dict(self):
        return {
            'loan_id': self.loan_id,
            'loan_type': self.loan_type,
            'principal': self.principal,
            'annual_rate': self.annual_rate,
            'interest_kind': self.interest_kind.value,
            'term_months': self.term_months,
            'emi': self.emi,
            'remaining': self.remaining,
            'status': self.status.value,
        }


@dataclass
class Account:
    """A customer account: balance, append-only history and loans."""
    acc_no: int
    name: str
    balance: int = 0
    history: List[Transaction] = field(default_factory=list)
    loans: List[Loan] = field(default_factory=list)
    
    def add_transaction(self, kind: str, amount: int, other_acc: Optional[int] = None) -> Transaction:
        """Append a transaction to the history and return it."""
        tx = Transaction(kind, amount, other_acc)
        self.history.append(tx)
        return tx
    
    def find_loan(self, loan_id: int) -> Optional[Loan]:
        for loan in self.loans:
            if loan.loan_id == loan_id:
                return loan
        return None


@dataclass(frozen=True)
class AccountSnapshot:
    """Detached copy of a deleted account.
    
    History and loans are deep copies, so later changes to a recreated
    account never leak back into the snapshot held by the command log.
    """
    acc_no: int
    name: str
    balance: int
    history: Tuple[Transaction, ...] = ()
    loans: Tuple[Loan, ...] = ()
    
    @classmethod
    def capture(cls, account: Account) -> 'AccountSnapshot':
        return cls(
            acc_no=account.acc_no,
            name=account.name,
            balance=account.balance,
            history=tuple(account.history),
            loans=tuple(copy.deepcopy(account.loans)),
        )
    
    def to_account(self) -> Account:
        """Build a fresh Account holding copies of the snapshot data."""
        return Account(
            acc_no=self.acc_no,
            name=self.name,
            balance=self.balance,
            history=list(self.history),
            loans=copy.deepcopy(list(self.loans)),
        )


@dataclass
class StatementData:
    """DTO holding everything needed to render an account statement."""
    acc_no: int
    name: str
    balance: int
    history_df: pd.DataFrame
    loans_df: pd.DataFrame
