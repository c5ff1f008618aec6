class CheckInError(Exception):
    """Base class for every typed check-in failure."""

    reason = "check_in_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.reason)


class TokenError(CheckInError):
    reason = "token_error"


class TokenMalformed(TokenError):
    reason = "token_malformed"


class TokenExpired(TokenError):
    reason = "token_expired"


class AlreadyCheckedIn(CheckInError):
    reason = "already_checked_in"


class StorageUnavailable(CheckInError):
    """Infrastructure fault. Callers retry at the transport level."""

    reason = "storage_unavailable"
