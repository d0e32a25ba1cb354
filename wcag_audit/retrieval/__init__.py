"""Page retrieval with timeout, CORS proxy fallback and backoff."""

from .fetcher import PageRetriever, proxied_url, validate_url

__all__ = [
    "PageRetriever",
    "proxied_url",
    "validate_url",
]
