"""Custom exceptions for BranchBank.

Every rejection leaves the ledger untouched. The engine facade turns these
into failed Results using each class's error_type.
"""
from branchbank.result import ErrorType


class BankError(Exception):
    """Base exception for all BranchBank errors."""
    
    error_type = ErrorType.UNKNOWN
    
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class NotFoundError(BankError):
    """Raised when an account or a loan cannot be found."""
    
    error_type = ErrorType.NOT_FOUND


class AccountNotFoundError(NotFoundError):
    """Raised when an account number is not in the ledger."""
    
    def __init__(self, acc_no: int = None):
        details = {}
        message = "Account not found"
        if acc_no is not None:
            details['acc_no'] = acc_no
            message = f"Account {acc_no} not found"
        super().__init__(message, details)


class LoanNotFoundError(NotFoundError):
    """Raised when a loan cannot be found on an account."""
    
    def __init__(self, loan_id: int = None, acc_no: int = None):
        details = {}
        if loan_id is not None:
            details['loan_id'] = loan_id
        if acc_no is not None:
            details['acc_no'] = acc_no
        
        message = "Loan not found"
        if loan_id is not None:
            message = f"Loan {loan_id} not found"
        
        super().__init__(message, details)


class DuplicateKeyError(BankError):
    """Raised when creating an account whose number is already taken."""
    
    error_type = ErrorType.DUPLICATE_KEY
    
    def __init__(self, acc_no: int):
        super().__init__(f"Account {acc_no} already exists", {'acc_no': acc_no})


class InvalidAmountError(BankError):
    """Raised for non-positive amounts, amounts below a policy floor or bad loan terms."""
    
    error_type = ErrorType.INVALID_AMOUNT


class InsufficientFundsError(BankError):
    """Raised when an operation cannot be completed due to insufficient balance."""
    
    error_type = ErrorType.INSUFFICIENT_FUNDS
    
    def __init__(self, required: float, available: float, acc_no: int = None):
        details = {
            'required': required,
            'available': available
        }
        if acc_no is not None:
            details['acc_no'] = acc_no
        
        message = f"Insufficient balance: required {required}, available {available}"
        super().__init__(message, details)


class PolicyViolationError(BankError):
    """Raised when a withdrawal would leave less than the retained-balance floor."""
    
    error_type = ErrorType.POLICY_VIOLATION
    
    def __init__(self, minimum: int, resulting: float, acc_no: int = None):
        details = {
            'minimum': minimum,
            'resulting': resulting
        }
        if acc_no is not None:
            details['acc_no'] = acc_no
        
        message = f"You must keep at least {minimum} in your account"
        super().__init__(message, details)


class EmptyLogError(BankError):
    """Raised by undo/redo when there is nothing to reverse or re-apply."""
    
    error_type = ErrorType.EMPTY_LOG
    
    def __init__(self, direction: str):
        super().__init__(f"Nothing to {direction}", {'direction': direction})


class LoanAlreadyClosedError(BankError):
    """Raised when paying a loan that is already closed."""
    
    error_type = ErrorType.ALREADY_CLOSED
    
    def __init__(self, loan_id: int):
        super().__init__(f"Loan {loan_id} is already closed", {'loan_id': loan_id})
