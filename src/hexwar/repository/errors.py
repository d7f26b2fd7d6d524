"""Errors raised by key-value store adapters."""


class PersistenceUnavailableError(RuntimeError):
    """Raised when the storage backend cannot be read or written."""
