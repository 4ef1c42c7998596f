"""Error taxonomy shared by the store, the session manager and the API."""


class BookerError(Exception):
    """Base class for application errors."""


class ValidationError(BookerError):
    """Input is malformed or breaks a reservation invariant."""


class StorageError(BookerError):
    """The reservation database could not be read, written or migrated."""


class AuthError(BookerError):
    """The request carries no valid session credential."""


class EntropyError(BookerError):
    """The operating system random source is unavailable."""
