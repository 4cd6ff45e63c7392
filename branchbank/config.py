"""Centralized configuration for BranchBank.

This module contains the business rule constants and defaults used by the
ledger, the loan engine and the command log.
"""

# =============================================================================
# ACCOUNT RULES
# =============================================================================

# Mandatory opening deposit credited to every new account
OPENING_DEPOSIT = 700

# Smallest amount a single withdrawal may take out
MIN_WITHDRAWAL = 500

# Balance an account must still hold after a withdrawal
MIN_RETAINED_BALANCE = 700

# Maximum stored length of an account holder name
NAME_SIZE = 49

# =============================================================================
# LOAN DEFAULTS
# =============================================================================

# First loan ID handed out by a fresh bank
LOAN_ID_START = 1000

# Loan type used when none is given
DEFAULT_LOAN_TYPE = "General"

# Maximum stored length of a loan type name
TYPE_SIZE = 39

# =============================================================================
# COMMAND LOG
# =============================================================================

# Maximum undo depth (None keeps every action)
UNDO_MAX_DEPTH = None

# =============================================================================
# DISPLAY FORMATS
# =============================================================================

# Date format for schedules and history (ISO 8601)
DATE_FORMAT_STORAGE = "%Y-%m-%d"

# Currency label used by the console front end
CURRENCY_LABEL = "Tk"

# =============================================================================
# LOGGING
# =============================================================================

# Default log level for the console front end
DEFAULT_LOG_LEVEL = "WARNING"

# Environment variable overriding the log level
LOG_LEVEL_ENV = "BRANCHBANK_LOG_LEVEL"

# Environment variable switching the console log output to JSON lines
LOG_JSON_ENV = "BRANCHBANK_LOG_JSON"
