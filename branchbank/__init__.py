"""BranchBank: single-branch core bookkeeping with a reversible command log."""

from branchbank.engine import BankEngine
from branchbank.result import Result, ErrorType

__version__ = "1.0.0"

__all__ = ['BankEngine', 'Result', 'ErrorType', '__version__']
