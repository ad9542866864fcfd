# filedrop/shared/errors.py


class TransferError(Exception):
    """Base class for everything the transfer core raises on purpose."""


class InvalidInput(TransferError):
    pass


class NotFound(TransferError):
    pass


class Expired(TransferError):
    """The identifier existed but its retention window has passed."""


class InternalError(TransferError):
    pass


class StorageFailure(InternalError):
    """Writing, reading or deleting stored content failed."""
