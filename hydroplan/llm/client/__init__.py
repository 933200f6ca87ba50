"""Model clients bound to rotating credentials."""

from .lib import (
    CREDENTIAL_ERRORS,
    BackendFactory,
    ClientProvider,
    ModelClient,
    ModelClientFactory,
)

__all__ = [
    "BackendFactory",
    "CREDENTIAL_ERRORS",
    "ClientProvider",
    "ModelClient",
    "ModelClientFactory",
]
