from __future__ import annotations

import logging

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from wikifetch.errors import MaxlagError
from wikifetch.settings import settings

logger = logging.getLogger(__name__)


def default_timeout() -> httpx.Timeout:
    return httpx.Timeout(connect=10.0, read=60.0, write=20.0, pool=10.0)


class HttpClientFactory:
    """Creates shared httpx clients with sane defaults.

    Keep one client per connection; do not create per-request.
    """

    @staticmethod
    def client(base_url: str | None = None, headers: dict | None = None) -> httpx.Client:
        merged = {"User-Agent": settings.user_agent, "Accept": "application/json"}
        merged.update(headers or {})
        return httpx.Client(
            base_url=base_url or "",
            headers=merged,
            timeout=default_timeout(),
            follow_redirects=True,
        )


TransientHttpError = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError, MaxlagError)


def transient_retry(attempts: int | None = None):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts or settings.retry_attempts),
        wait=wait_exponential_jitter(initial=0.5, max=10.0),
        retry=retry_if_exception_type(TransientHttpError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
