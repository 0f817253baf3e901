from __future__ import annotations


class LedgerError(Exception):
    """Base class for every rule violation raised by the ledger core."""

    code = "ledger_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError, ValueError):
    """Raised for malformed or out-of-range input."""

    code = "validation_error"


class NotFound(LedgerError, LookupError):
    """Raised when a referenced session, player or record does not exist."""

    code = "not_found"


class InvalidOperation(LedgerError):
    """Raised when a command is not allowed in the current session state."""

    code = "invalid_operation"
