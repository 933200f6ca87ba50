"""API key pool with round-robin rotation, rate limiting and failure cooldown.

Example usage:
    >>> from hydroplan.credentials import CredentialPool, CredentialSelector
    >>> selector = CredentialSelector(CredentialPool(["key-a", "key-b"]))
    >>> selector.select_credential(), selector.select_credential()
    ('key-a', 'key-b')
"""

from .lib import (
    DEFAULT_FAILURE_COOLDOWN,
    DEFAULT_RATE_LIMIT,
    DEFAULT_RATE_WINDOW,
    CredentialPool,
    CredentialSelector,
    CredentialStatus,
    ExhaustedCredentialsError,
)

__all__ = [
    "DEFAULT_RATE_LIMIT",
    "DEFAULT_RATE_WINDOW",
    "DEFAULT_FAILURE_COOLDOWN",
    "CredentialPool",
    "CredentialSelector",
    "CredentialStatus",
    "ExhaustedCredentialsError",
]
