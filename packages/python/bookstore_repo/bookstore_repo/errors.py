"""Domain-level errors for the bookstore repository."""


class BookstoreError(Exception):
    """Base class for every error raised by the bookstore repository."""


class StoreConnectionError(BookstoreError):
    """Raised when the document store cannot be reached."""


class StoreNotConnectedError(BookstoreError):
    """Raised when an operation runs before ``connect`` (or after ``disconnect``)."""


class StoreOperationError(BookstoreError):
    """Raised when the store rejects an insert/find/update/delete/aggregate/index call.

    The driver error is kept as ``__cause__``.
    """

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class InvalidQueryError(BookstoreError, ValueError):
    """Raised when a query or input is rejected before it reaches the store."""
