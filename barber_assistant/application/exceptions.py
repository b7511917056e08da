class TransportError(RuntimeError):
    """Raised when the messaging transport fails to deliver an outbound message."""
    pass


class PersistenceError(RuntimeError):
    """Raised when the storage layer fails to read or write a record."""
    pass
