"""
Typed exceptions for the ledger and reporting core.

Every exception carries a machine-readable ``code`` class attribute and the
structured fields needed to report the failure without parsing messages.

    LedgerError
    +-- ValidationError
    |   +-- UnknownAccountError
    +-- UnbalancedEntryError
    +-- NotFoundError
    +-- DataSourceError
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base exception for all ledger core errors."""

    code: str = "LEDGER_ERROR"


class ValidationError(LedgerError):
    """Bad input shape or an unresolved reference."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class UnknownAccountError(ValidationError):
    """A journal line or entry header references an account that does not exist."""

    code: str = "UNKNOWN_ACCOUNT"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Unknown account: {account_id}", field="account_id")


class UnbalancedEntryError(LedgerError):
    """Journal entry debits do not equal credits within tolerance."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, debits: Decimal, credits: Decimal):
        self.debits = debits
        self.credits = credits
        super().__init__(
            f"Debits and credits must balance: debits={debits}, credits={credits}"
        )


class NotFoundError(LedgerError):
    """Lookup by id missed."""

    code: str = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class DataSourceError(LedgerError):
    """A collaborator store failed to read or write.

    The original exception is chained as ``__cause__`` and never rendered
    into the message, which is safe to hand to API clients.
    """

    code: str = "DATA_SOURCE_ERROR"

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Data source unavailable: {source}")
