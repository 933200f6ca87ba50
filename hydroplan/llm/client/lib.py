"""Model client factory.

Binds a freshly selected credential to a new backend instance. The
generator asks for a new client on every attempt, so a retry always goes
out with whatever key the selector considers healthiest at that moment.
"""

import logging
from collections.abc import Callable
from typing import Protocol

from hydroplan.core.log import mask_secret
from hydroplan.credentials import CredentialSelector, ExhaustedCredentialsError
from hydroplan.llm.backend import (
    AuthenticationError,
    ClientConstructionError,
    GenerationConfig,
    LLMBackend,
    RateLimitError,
)

logger = logging.getLogger(__name__)

BackendFactory = Callable[[str], LLMBackend]

# Errors that say something about the key rather than the request
CREDENTIAL_ERRORS: tuple[type[Exception], ...] = (AuthenticationError, RateLimitError)


class ModelClient:
    """A backend bound to one credential.

    Attributes:
        backend: The LLM backend serving requests.
        credential: The API key the backend was built with.
    """

    def __init__(self, backend: LLMBackend, credential: str):
        self.backend = backend
        self.credential = credential

    @property
    def label(self) -> str:
        """Masked credential, safe to log."""
        return mask_secret(self.credential)

    async def complete(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> str:
        """Send a prompt and return the raw response text."""
        result = await self.backend.generate(
            prompt, system_prompt=system_prompt, config=config
        )
        return result.content

    def __repr__(self) -> str:
        return f"ModelClient({self.backend.name}, key={self.label})"


class ClientProvider(Protocol):
    """Source of model clients for the generator."""

    def acquire(self) -> ModelClient:
        """Return a client bound to a usable credential."""
        ...

    def report_failure(self, client: ModelClient, error: Exception) -> None:
        """Record that a request through ``client`` failed."""
        ...


class ModelClientFactory:
    """Builds model clients from a credential selector.

    Args:
        selector: Chooses which credential the next client uses.
        backend_factory: Builds a backend for a given API key.
        max_attempts: Default number of select-and-build attempts.

    Example:
        >>> factory = ModelClientFactory(
        ...     selector,
        ...     lambda key: create_llm_backend("gemini-2.0-flash", api_key=key),
        ... )
        >>> client = factory.create_client()
        >>> text = await client.complete("...")
    """

    def __init__(
        self,
        selector: CredentialSelector,
        backend_factory: BackendFactory,
        *,
        max_attempts: int = 3,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.selector = selector
        self.backend_factory = backend_factory
        self.max_attempts = max_attempts

    def create_client(self, max_attempts: int | None = None) -> ModelClient:
        """Select a credential and build a client with it.

        Args:
            max_attempts: Override for the attempt budget.

        Returns:
            A ready ModelClient.

        Raises:
            ExhaustedCredentialsError: If no credential could be selected
                and nothing else went wrong.
            ClientConstructionError: If the last attempt failed while
                building the backend.
        """
        budget = max_attempts or self.max_attempts
        last_error: Exception | None = None

        for attempt in range(1, budget + 1):
            try:
                credential = self.selector.select_credential()
            except ExhaustedCredentialsError as e:
                logger.warning(f"Client attempt {attempt}/{budget}: {e}")
                last_error = e
                continue

            try:
                backend = self.backend_factory(credential)
            except Exception as e:
                label = mask_secret(credential)
                logger.warning(
                    f"Client attempt {attempt}/{budget}: "
                    f"failed to build backend with key {label}: {e}"
                )
                self.selector.mark_failed(credential)
                last_error = ClientConstructionError(
                    f"Failed to build backend with key {label}: {e}"
                )
                last_error.__cause__ = e
                continue

            client = ModelClient(backend, credential)
            logger.debug(f"Created {client!r}")
            return client

        if last_error is None:
            last_error = ExhaustedCredentialsError(
                "All API keys are either failed or rate limited"
            )
        raise last_error

    def acquire(self) -> ModelClient:
        """Return a new client using the default attempt budget."""
        return self.create_client()

    def report_failure(self, client: ModelClient, error: Exception) -> None:
        """Mark the client's credential failed if the error concerns the key.

        Parse errors, timeouts and generic transport errors leave the
        credential untouched.
        """
        if isinstance(error, CREDENTIAL_ERRORS):
            logger.warning(
                f"Key {client.label} rejected ({type(error).__name__}); "
                "marking as failed"
            )
            self.selector.mark_failed(client.credential)


__all__ = [
    "BackendFactory",
    "CREDENTIAL_ERRORS",
    "ClientProvider",
    "ModelClient",
    "ModelClientFactory",
]
