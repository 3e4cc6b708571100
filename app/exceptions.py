"""
Custom exceptions for Iris application.

Every exception carries the HTTP status it is reported with; `app.main` renders them as `{"error": message}`.
"""


class IrisError(Exception):
    """Base class for errors reported to the caller"""

    status_code = 500


class ConfigurationError(IrisError):
    """Raised when a required setting (webhook base, API key) is missing"""

    status_code = 500


class AuthError(IrisError):
    """Raised when the bearer token is missing or wrong"""

    status_code = 401

    def __init__(self, message: str = 'Unauthorized'):
        super().__init__(message)


class ValidationError(IrisError):
    """Raised when the caller sends bad input"""

    status_code = 400


class NotFoundError(IrisError):
    """Raised when Bitrix has no records matching the request, or no /api route matches the path"""

    status_code = 404


class UpstreamError(IrisError):
    """Raised when the Bitrix envelope contains an `error` key"""

    status_code = 500

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.code = code


class UnexpectedError(IrisError):
    """Anything else, including transport failures and malformed JSON from Bitrix"""

    status_code = 500
