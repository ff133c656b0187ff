"""
Error taxonomy for the sales assistant.

Lower layers (stores, channel and backend adapters) raise these; only the
message orchestrator converts them into a customer-facing reply.
"""

from __future__ import annotations

from typing import Optional


class SalesBotError(Exception):
    """Base class for every error raised by salesbot."""


class ConfigurationError(SalesBotError):
    """A channel credential or backend API key is missing or invalid."""


class NotFoundError(SalesBotError):
    """An unknown module or conversation id was requested."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} {identifier!r} not found")
        self.kind = kind
        self.identifier = identifier


class ProviderError(SalesBotError):
    """A generation backend call did not succeed. Carries the vendor's raw error text."""

    def __init__(
        self,
        provider: str,
        raw_error: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(f"{provider} API error: {raw_error}")
        self.provider = provider
        self.raw_error = raw_error
        self.status_code = status_code


class ParsingError(SalesBotError):
    """A section of merchant training text could not be parsed."""


class PersistenceError(SalesBotError):
    """The module or conversation store failed."""
