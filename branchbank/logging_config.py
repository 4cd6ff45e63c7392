"""Logging configuration for BranchBank.

The library only asks for loggers under the ``branchbank`` namespace. A front
end calls setup_logging() once to attach a handler.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Optional

LOGGER_NAME = "branchbank"

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""
    
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "action": getattr(record, 'action', None),
            "acc_no": getattr(record, 'acc_no', None),
            "loan_id": getattr(record, 'loan_id', None),
        }
        
        log_entry = {k: v for k, v in log_entry.items() if v is not None}
        
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)
            
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", json_format: bool = False) -> logging.Logger:
    """Attach a console handler to the package logger.
    
    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Emit one JSON object per line instead of plain text.
        
    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    
    # Calling twice must not duplicate output
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    
    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False
    
    return logger


def get_logger(name: str = None) -> logging.Logger:
    """Get a logger below the package namespace."""
    if not name:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def log_action(logger: logging.Logger, level: str, message: str, *args,
               action: Optional[str] = None, acc_no: Optional[int] = None,
               loan_id: Optional[int] = None):
    """Log a ledger event with structured fields.
    
    The fields land on the record as attributes, so JSONFormatter emits them
    next to the message while the plain formatter ignores them.
    
    Args:
        logger: Logger instance
        level: Log level name (info, warning, ...)
        message: %-style message, formatted with args
        action: Kind of ledger action, e.g. "Deposit"
        acc_no: Account the action applies to
        loan_id: Loan the action applies to
    """
    fields = {'action': action, 'acc_no': acc_no, 'loan_id': loan_id}
    logger.log(getattr(logging, level.upper()), message, *args,
               extra={k: v for k, v in fields.items() if v is not None})
