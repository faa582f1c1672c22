"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class PersistenceFailed(AppError):
    """Raised when a ledger write could not be made durable."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, code="PERSISTENCE_FAILED")


class ProviderError(Exception):
    """Raised by market data providers when a quote cannot be fetched."""

    def __init__(self, symbol: str, message: str):
        self.symbol = symbol
        self.message = message
        super().__init__(f"{symbol}: {message}")


class StoreError(Exception):
    """Base exception for columnar store failures."""

    def __init__(self, path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class StorageIOError(StoreError):
    """Disk or permission failure while reading or writing a file."""


class SchemaError(StoreError):
    """File exists but its layout does not match the expected schema."""
