class InputError(Exception):
    """Raised when a query or id is missing or invalid."""


class MissingQuery(InputError):
    """Raised when a search is requested without a query."""


class MissingId(InputError):
    """Raised when a channel lookup is requested without a channel id."""


class UpstreamUnavailable(Exception):
    """Raised when YouTube cannot be reached or answers with a non-success status."""

    def __init__(self, message: str, url: str = "", status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.body = body


class ParseFailure(Exception):
    """Raised when a fetched page does not have the expected format."""


class EmbeddedDataNotFound(ParseFailure):
    """Raised when the ytInitialData document is absent or malformed."""


class RateLimited(Exception):
    """Raised when a caller exceeds the request admission limit."""


class AuthenticationError(Exception):
    """Raised when an operation needs a caller identity and none was supplied."""


class PermissionDenied(Exception):
    """Raised when a caller is not allowed to perform an admin operation."""


class AccountNotFound(Exception):
    """Raised when a credit account does not exist."""


class InsufficientCredits(Exception):
    """Raised when a deduction exceeds the account balance."""
