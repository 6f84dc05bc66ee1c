"""Exception hierarchy shared across the eckprov modules."""


class ECKError(Exception):
    """Base exception for ECK provider errors."""
    pass


class AuthenticationError(ECKError):
    """Exception raised when a token cannot be issued by the ECK API."""
    pass


class ECKConnectionError(ECKError):
    """Exception raised when the ECK API cannot be reached."""
    pass
