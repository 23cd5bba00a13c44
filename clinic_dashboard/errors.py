"""
Error types shared by the upstream provider clients.

Read paths never raise on an unavailable provider: they return a FetchResult
whose ``data`` is empty or partial and whose ``error`` says what went wrong.
Only missing credentials are fatal for an endpoint.
"""

import logging
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigurationMissing(Exception):
    """Raised before any request when a provider's credentials are absent"""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"{provider} not configured")


class UpstreamRequestError(Exception):
    """A pass-through write to a provider was rejected"""

    def __init__(self, provider: str, status_code: int, message: str, details: Optional[str] = None):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(f"{provider}: {message} ({status_code})")


@dataclass(frozen=True)
class FetchError:
    provider: str
    message: str
    status_code: Optional[int] = None


@dataclass
class FetchResult(Generic[T]):
    """Data fetched from one provider plus the error that cut it short, if any"""

    data: list[T] = field(default_factory=list)
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: list[T]) -> "FetchResult[T]":
        return cls(data=data)

    @classmethod
    def failure(
        cls,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        partial: Optional[list[T]] = None,
    ) -> "FetchResult[T]":
        """Build a failed result, logging the failure once"""
        partial = partial or []
        status = f" (HTTP {status_code})" if status_code is not None else ""
        logger.error(
            f"❌ {provider} fetch failed{status}: {message} - continuing with {len(partial)} record(s)"
        )
        return cls(data=partial, error=FetchError(provider, message, status_code))


def degraded_sources(*results: FetchResult) -> list[str]:
    """Names of the providers whose fetch did not complete"""
    return sorted({r.error.provider for r in results if r.error is not None})
