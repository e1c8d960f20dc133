"""
Exceptions raised by the Kite login and session exchange flow.

Per-attempt failures derive from ExchangeAttemptError and are retried by
SessionExchanger. Everything else is terminal for the call that raised it.
"""


class KiteAuthError(Exception):
    """Base exception for all Kite authentication errors."""

    pass


class ConfigurationError(KiteAuthError):
    """Invalid exchanger options or missing credentials."""

    pass


class InvalidInputError(KiteAuthError):
    """A required field is missing or blank. Never retried."""

    pass


class ExchangeAttemptError(KiteAuthError):
    """A single exchange attempt failed in a way that may succeed on retry."""

    pass


class TransportError(ExchangeAttemptError):
    """Connection, timeout or body read failure, or an unexpected HTTP status."""

    pass


class MalformedResponseError(ExchangeAttemptError):
    """The response body does not match the session response shape."""

    pass


class RemoteRejectedError(ExchangeAttemptError):
    """Kite answered, but not with a usable access token."""

    def __init__(self, message: str, error_type: str | None = None):
        super().__init__(message)
        self.error_type = error_type


class DeadlineExceededError(KiteAuthError):
    """The deadline for the whole exchange expired."""

    pass


class ExhaustedRetriesError(KiteAuthError):
    """Every attempt failed. Carries the last attempt's error only."""

    def __init__(self, last_error: ExchangeAttemptError, attempts: int):
        super().__init__(f"Session exchange failed after {attempts} attempt(s): {last_error}")
        self.last_error = last_error
        self.attempts = attempts
