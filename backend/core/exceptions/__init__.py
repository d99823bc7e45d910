from .voting_errors import (  # noqa: F401
    AnonymizingNetworkError,
    BurstLimitError,
    DeviceSignatureError,
    DuplicateVoteError,
    FallbackLockoutError,
    FingerprintValidationError,
    InvalidCandidateError,
    InvalidVoteError,
    IPVoteLimitError,
    PollClosedError,
    RateLimitExceededError,
    RequestTooLargeError,
    StorageError,
    VotingError,
)

__all__ = [
    "VotingError",
    "InvalidVoteError",
    "InvalidCandidateError",
    "FingerprintValidationError",
    "RequestTooLargeError",
    "PollClosedError",
    "AnonymizingNetworkError",
    "DuplicateVoteError",
    "FallbackLockoutError",
    "BurstLimitError",
    "DeviceSignatureError",
    "IPVoteLimitError",
    "RateLimitExceededError",
    "StorageError",
]
