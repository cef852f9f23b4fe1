class LendingError(Exception):
    """Base exception for lending engine errors.

    Every subclass carries a stable ``kind`` so callers can branch on the
    failure without parsing messages.
    """

    kind = 'LendingError'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class NotFound(LendingError):
    """Referenced entity does not exist."""

    kind = 'NotFound'


class InvalidReference(LendingError):
    """An author or category id in a link list does not exist."""

    kind = 'InvalidReference'


class InsufficientInventory(LendingError):
    """Adjustment would drive copies_available below zero."""

    kind = 'InsufficientInventory'


class DuplicateActiveBorrowing(LendingError):
    """Member already holds an unreturned copy of the book."""

    kind = 'DuplicateActiveBorrowing'


class AlreadyReturned(LendingError):
    """Return was called on a loan that is already closed."""

    kind = 'AlreadyReturned'


class ValidationError(LendingError):
    """Malformed input."""

    kind = 'ValidationError'


class TransactionConflict(LendingError):
    """Lock timeout or deadlock; the caller may retry the whole operation."""

    kind = 'TransactionConflict'
