"""
Custom exceptions for voting functionality.

Every rejection the decision engine can produce has its own class so the
client can tell them apart by ``error_code`` and ``reason``.
"""


class VotingError(Exception):
    """
    Base exception for voting-related errors.

    All custom voting exceptions inherit from this.
    """

    default_status_code = 400
    default_message = "A voting error occurred"
    reason = "voting error"

    def __init__(self, message=None, status_code=None):
        """
        Initialize exception.

        Args:
            message: Error message (defaults to default_message)
            status_code: HTTP status code (defaults to default_status_code)
        """
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status_code
        super().__init__(self.message)


# Validation errors: malformed input, never retried


class InvalidVoteError(VotingError):
    """Raised when required vote fields are missing."""

    default_status_code = 400
    default_message = "Candidate and fingerprint are required"
    reason = "missing fields"


class InvalidCandidateError(VotingError):
    """Raised when the candidate is not one of the poll's candidates."""

    default_status_code = 400
    default_message = "Invalid candidate"
    reason = "invalid candidate"


class FingerprintValidationError(VotingError):
    """Raised when a fingerprint fails format validation."""

    default_status_code = 400
    default_message = "Invalid device fingerprint"
    reason = "invalid fingerprint"


class RequestTooLargeError(VotingError):
    """Raised when the request body exceeds the configured size."""

    default_status_code = 413
    default_message = "Request body too large"
    reason = "request too large"


# Policy rejections


class PollClosedError(VotingError):
    """Raised when trying to vote after the poll has closed."""

    default_status_code = 403
    default_message = "This poll is closed"
    reason = "poll closed"


class AnonymizingNetworkError(VotingError):
    """Raised when the client IP belongs to a VPN, proxy or hosting network."""

    default_status_code = 403
    default_message = (
        "VPN or proxy usage detected. Please vote from a regular internet connection."
    )
    reason = "anonymizing network"


class DuplicateVoteError(VotingError):
    """Raised when this device has already voted."""

    default_status_code = 409
    default_message = "A vote has already been cast from this device"
    reason = "duplicate"


class FallbackLockoutError(VotingError):
    """Raised when a second fallback fingerprint votes from the same network."""

    default_status_code = 409
    default_message = (
        "A private-browsing vote has already been cast from this network. "
        "Only one fallback vote is accepted per IP address."
    )
    reason = "fallback lockout"


class BurstLimitError(VotingError):
    """Raised when too many distinct devices vote from one network in a short window."""

    default_status_code = 409
    default_message = (
        "Too many votes from this network in a short period. Please try again later."
    )
    reason = "burst limit"


class DeviceSignatureError(VotingError):
    """Raised when the same IP and browser return with a different fingerprint."""

    default_status_code = 409
    default_message = (
        "A vote has already been cast from this network and browser. "
        "Private browsing mode detected."
    )
    reason = "device signature"


class IPVoteLimitError(VotingError):
    """Raised when an IP address has reached its absolute vote cap."""

    default_status_code = 409
    default_message = "Too many votes have been cast from this network"
    reason = "ip vote limit"


class RateLimitExceededError(VotingError):
    """Raised when rate limit is exceeded."""

    default_status_code = 429
    default_message = "Rate limit exceeded. Please try again later."
    reason = "rate limited"


# Storage failures


class StorageError(VotingError):
    """Raised when the vote ledger cannot be read or written."""

    default_status_code = 500
    default_message = "The vote could not be recorded"
    reason = "storage failure"
