from typing import Optional


class ForensicsError(Exception):
    """Base class for every error raised by the analysis engine."""


class InvalidTransactionError(ForensicsError, ValueError):
    """A transaction violates the input contract (e.g. unparseable timestamp)."""

    def __init__(self, message: str, row: Optional[int] = None):
        self.row = row
        if row is not None:
            message = f"row {row}: {message}"
        super().__init__(message)


class InputTooLargeError(ForensicsError):
    """Raised when the input exceeds the configured transaction limit."""

    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"{count} transactions exceeds the configured limit of {limit}"
        )


class AnalysisError(ForensicsError):
    """An analysis run failed; no partial result is produced."""
