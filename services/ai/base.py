import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)

# RewriteProviderError.kind 값
RATE_LIMITED = "rate_limited"
CREDENTIALS = "credentials"
UPSTREAM = "upstream"
EMPTY_RESPONSE = "empty_response"
UNKNOWN = "unknown"


class RewriteProviderError(Exception):
    """LLM provider failure, tagged with a kind so the API can tell rate limits and bad keys apart."""

    def __init__(self, provider: str, message: str, kind: str = UNKNOWN, status: Optional[int] = None):
        self.provider = provider
        self.kind = kind
        self.status = status
        super().__init__(f"{provider}: {message}")


def _status_of(exc) -> Optional[int]:
    for attr in ("status_code", "status", "code"):
        val = getattr(exc, attr, None)
        if isinstance(val, int):
            return val
    resp = getattr(exc, "response", None)
    val = getattr(resp, "status_code", None)
    return val if isinstance(val, int) else None


def kind_for_status(status: Optional[int]) -> str:
    if status == 429:
        return RATE_LIMITED
    if status in (401, 403):
        return CREDENTIALS
    if status is not None:
        return UPSTREAM
    return UNKNOWN


def as_provider_error(provider: str, exc: Exception) -> RewriteProviderError:
    if isinstance(exc, RewriteProviderError):
        return exc
    status = _status_of(exc)
    return RewriteProviderError(provider, str(exc) or exc.__class__.__name__, kind_for_status(status), status)


class Rewriter(ABC):
    """
    One LLM provider behind a string-in / string-out contract.
    Implementations raise RewriteProviderError on any failure and never retry.
    """

    name = "abstract"

    @abstractmethod
    def rewrite(self, original_text: str, from_style: Optional[str], to_style: str,
                preservation_percentage: int = 50) -> str:
        ...

    @abstractmethod
    def validate_credentials(self) -> bool:
        ...

    def _require_key(self, api_key: Optional[str], env_name: str) -> str:
        if not api_key:
            raise RewriteProviderError(self.name, f"{env_name} is not configured.", CREDENTIALS)
        return api_key

    def _non_empty(self, text: Optional[str]) -> str:
        text = (text or "").strip()
        if not text:
            raise RewriteProviderError(self.name, "Empty response from provider", EMPTY_RESPONSE)
        return text

    def _validate(self, ping) -> bool:
        """ping() 가 예외 없이 끝나면 True"""
        try:
            ping()
            return True
        except Exception as e:
            logger.warning("[%s] credential validation failed: %r", self.name, e)
            return False
