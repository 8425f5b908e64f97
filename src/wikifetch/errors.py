"""Error taxonomy for everything the remote Wikibase side can cause.

Local I/O failures are plain ``OSError`` and are handled by the report sink.
"""

from __future__ import annotations


class RemoteServiceError(Exception):
    """The remote API could not fulfil a request."""


class TransportError(RemoteServiceError):
    """Network failure or non-success HTTP status, after retries."""


class UnexpectedResponseError(RemoteServiceError):
    """The API answered, but not with something we can interpret."""


class MediaWikiApiError(RemoteServiceError):
    """An ``error`` object returned by the MediaWiki action API."""

    def __init__(self, code: str, message: str):
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message


class NoSuchEntityError(MediaWikiApiError):
    pass


class MaxlagError(MediaWikiApiError):
    """Replication lag is above the requested ``maxlag``; safe to retry."""


class RateLimitError(MediaWikiApiError):
    pass


_ERRORS_BY_CODE: dict[str, type[MediaWikiApiError]] = {
    "no-such-entity": NoSuchEntityError,
    "maxlag": MaxlagError,
    "ratelimited": RateLimitError,
}


def error_from_payload(payload: dict) -> MediaWikiApiError:
    """Map an API ``error`` object to the matching exception instance."""

    code = str(payload.get("code") or "unknown")
    message = str(payload.get("info") or payload.get("*") or "")
    return _ERRORS_BY_CODE.get(code, MediaWikiApiError)(code, message)
