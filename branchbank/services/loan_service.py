"""Loan lifecycle service for BranchBank.

This service handles all loan-related operations including:
- EMI quotes
- Loan approval and disbursement
- Loan payments (partial or full) and closure
- Amortization schedules
"""
import itertools
import math
import numbers
from datetime import datetime
from typing import Iterator, List, Optional

import pandas as pd
from dateutil.relativedelta import relativedelta

from branchbank.config import (
    DATE_FORMAT_STORAGE,
    DEFAULT_LOAN_TYPE,
    LOAN_ID_START,
    TYPE_SIZE,
)
from branchbank.data_structures import InterestKind, Loan, LoanStatus
from branchbank.exceptions import (
    InsufficientFundsError,
    InvalidAmountError,
    LoanAlreadyClosedError,
    LoanNotFoundError,
)
from branchbank.logging_config import get_logger, log_action
from branchbank.services.transaction_manager import whole_amount
from branchbank.services.undo_manager import Action, ActionKind

logger = get_logger(__name__)

SCHEDULE_COLUMNS = ["installment", "due_date", "payment", "interest", "principal", "balance"]


def calculate_emi(principal, annual_rate, term_months):
    """Monthly installment of a loan amortized over term_months.

    EMI = P * r * (1+r)^n / ((1+r)^n - 1) with r = annual_rate / 12.
    Falls back to P / n when there is no interest to amortize.
    """
    if term_months <= 0:
        return 0.0
    r = annual_rate / 12.0
    if r <= 0.0:
        return principal / term_months
    growth = math.pow(1 + r, term_months)
    denom = growth - 1.0
    if denom == 0.0:
        return principal / term_months
    return principal * r * growth / denom


def real_number(value, label) -> float:
    """Reject anything that is not a finite real number.

    Raises:
        InvalidAmountError: For bools, strings, None, NaN and infinities.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise InvalidAmountError(f"Invalid {label}: {value}", {label: value})
    return value


def parse_interest_kind(value) -> InterestKind:
    """Accept an InterestKind, its value, its name or the menu codes 0/1."""
    if isinstance(value, InterestKind):
        return value
    if value in (0, "0"):
        return InterestKind.SIMPLE
    if value in (1, "1"):
        return InterestKind.COMPOUND
    text = str(value).strip()
    for kind in InterestKind:
        if text.lower() in (kind.value.lower(), kind.name.lower()):
            return kind
    raise InvalidAmountError(f"Invalid interest type: {value}", {'interest_kind': value})


class LoanService:
    """Handles loan lifecycle operations.

    Loan IDs are drawn from a sequence owned by the bank, so they keep
    increasing even when a loan is undone.
    """

    def __init__(self, store, undo_manager, loan_ids: Optional[Iterator[int]] = None):
        """Initialize LoanService.

        Args:
            store: LedgerStore holding the accounts.
            undo_manager: UndoManager receiving the loan actions.
            loan_ids: Iterator of fresh loan IDs (default counts from LOAN_ID_START).
        """
        self.store = store
        self.undo_manager = undo_manager
        self.loan_ids = loan_ids if loan_ids is not None else itertools.count(LOAN_ID_START)

    def quote_emi(self, principal, annual_rate, term_months):
        return calculate_emi(principal, annual_rate, term_months)

    def create_loan_record(self, principal, annual_rate, interest_kind, term_months, loan_type=None) -> Loan:
        """Price a loan and give it a fresh ID without attaching it to an account.

        Simple interest adds principal * rate * years up front and spreads the
        total evenly. Compound loans are amortized with the EMI formula.
        """
        if interest_kind == InterestKind.SIMPLE:
            years = term_months / 12.0
            remaining = principal + (principal * annual_rate * years)
            emi = calculate_emi(remaining, 0.0, term_months)
        else:
            emi = calculate_emi(principal, annual_rate, term_months)
            remaining = emi * term_months

        return Loan(
            loan_id=next(self.loan_ids),
            loan_type=(loan_type or "").strip()[:TYPE_SIZE] or DEFAULT_LOAN_TYPE,
            principal=principal,
            annual_rate=annual_rate,
            interest_kind=interest_kind,
            term_months=term_months,
            emi=emi,
            remaining=remaining,
        )

    def apply_loan(self, acc_no, loan_type, principal, annual_rate, interest_kind, term_months) -> Loan:
        """Approve a loan and disburse the principal into the account.

        Args:
            acc_no: Borrowing account.
            loan_type: Free text such as "Personal" or "Auto".
            principal: Whole currency units, must be positive.
            annual_rate: Annual rate as a decimal (0.10 for 10%).
            interest_kind: InterestKind (or 0 for simple, 1 for compound).
            term_months: Duration in months, must be positive.

        Returns:
            The new Loan.

        Raises:
            AccountNotFoundError: If the account doesn't exist.
            InvalidAmountError: If any loan term is out of range.
        """
        account = self.store.get(acc_no)
        principal = whole_amount(principal, "principal")
        if real_number(annual_rate, "interest rate") < 0.0:
            raise InvalidAmountError(f"Invalid interest rate: {annual_rate}", {'annual_rate': annual_rate})
        if real_number(term_months, "term") != int(term_months) or term_months <= 0:
            raise InvalidAmountError(f"Invalid term: {term_months}", {'term_months': term_months})
        kind = parse_interest_kind(interest_kind)

        loan = self.create_loan_record(principal, float(annual_rate), kind, int(term_months), loan_type)

        balance_before = account.balance
        account.balance += principal
        account.loans.append(loan)
        account.add_transaction("Loan Disbursed", principal)

        self.undo_manager.record(Action(
            kind=ActionKind.LOAN_APPLY,
            acc_no=acc_no,
            amount=principal,
            name=loan.loan_type,
            loan_id=loan.loan_id,
            extra=loan.remaining,
            balance_snapshot=balance_before,
            terms=loan.terms,
        ))
        log_action(logger, "info", "Loan %s approved for account %s: principal %s, remaining %.2f",
                   loan.loan_id, acc_no, principal, loan.remaining,
                   action=ActionKind.LOAN_APPLY.value, acc_no=acc_no, loan_id=loan.loan_id)
        return loan

    def pay_loan(self, acc_no, loan_id, amount) -> Loan:
        """Pay part or all of a loan from the account balance.

        The balance is debited by the whole-unit part of the amount while the
        loan remaining drops by the exact amount. A payment that clears the
        loan records a separate close action after the payment.

        Raises:
            AccountNotFoundError: If the account doesn't exist.
            LoanNotFoundError: If the account has no such loan.
            LoanAlreadyClosedError: If the loan is closed.
            InvalidAmountError: If the amount is not positive.
            InsufficientFundsError: If the balance cannot cover the amount.
        """
        account = self.store.get(acc_no)
        loan = account.find_loan(loan_id)
        if loan is None:
            raise LoanNotFoundError(loan_id, acc_no)
        if loan.is_closed:
            raise LoanAlreadyClosedError(loan_id)
        if real_number(amount, "amount") <= 0.0:
            raise InvalidAmountError(f"Invalid amount: {amount}", {'amount': amount})
        if account.balance < amount:
            raise InsufficientFundsError(amount, account.balance, acc_no)

        paid = int(amount)
        previous_remaining = loan.remaining
        balance_before = account.balance

        account.balance -= paid
        loan.apply_payment(amount)
        account.add_transaction("Loan Payment", paid)

        self.undo_manager.record(Action(
            kind=ActionKind.LOAN_PAYMENT,
            acc_no=acc_no,
            amount=amount,
            loan_id=loan.loan_id,
            extra=previous_remaining,
            balance_snapshot=balance_before,
        ))
        log_action(logger, "info", "Payment of %s applied to loan %s, remaining %.2f", amount, loan.loan_id, loan.remaining,
                   action=ActionKind.LOAN_PAYMENT.value, acc_no=acc_no, loan_id=loan.loan_id)

        if loan.status == LoanStatus.CLOSED:
            self.undo_manager.record(Action(
                kind=ActionKind.LOAN_CLOSE,
                acc_no=acc_no,
                name=loan.loan_type,
                loan_id=loan.loan_id,
                balance_snapshot=account.balance,
            ))
            log_action(logger, "info", "Loan %s fully paid and closed", loan.loan_id,
                       action=ActionKind.LOAN_CLOSE.value, acc_no=acc_no, loan_id=loan.loan_id)
        return loan

    def find_loan(self, acc_no, loan_id) -> Optional[Loan]:
        return self.store.get(acc_no).find_loan(loan_id)

    def get_loans(self, acc_no) -> List[Loan]:
        return list(self.store.get(acc_no).loans)

    def amortization_schedule(self, loan: Loan, start_date=None) -> pd.DataFrame:
        """Month-by-month repayment plan for a loan as approved.

        Args:
            loan: The loan to schedule.
            start_date: Disbursement date (datetime or YYYY-MM-DD, default today).
                The first installment falls one month later.

        Returns:
            DataFrame with SCHEDULE_COLUMNS; balance is the principal still
            outstanding after each installment and ends at 0.
        """
        if start_date is None:
            start_date = datetime.now()
        elif isinstance(start_date, str):
            start_date = datetime.strptime(start_date, DATE_FORMAT_STORAGE)

        n = loan.term_months
        r = loan.annual_rate / 12.0
        balance = float(loan.principal)
        flat_principal = loan.principal / n
        rows = []

        for i in range(1, n + 1):
            if loan.interest_kind == InterestKind.COMPOUND:
                interest = balance * r if r > 0 else 0.0
                principal_part = loan.emi - interest
            else:
                principal_part = flat_principal
                interest = loan.emi - flat_principal

            if i == n:
                # Last installment absorbs rounding
                principal_part = balance
            balance -= principal_part

            rows.append({
                "installment": i,
                "due_date": (start_date + relativedelta(months=i)).strftime(DATE_FORMAT_STORAGE),
                "payment": round(principal_part + interest, 2),
                "interest": round(interest, 2),
                "principal": round(principal_part, 2),
                "balance": round(max(balance, 0.0), 2),
            })

        return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)
