class StorageError(Exception):
    """Raised when an object-store write, list or delete fails."""
