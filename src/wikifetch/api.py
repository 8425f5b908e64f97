from __future__ import annotations

import logging
from typing import Any

import httpx

from wikifetch.errors import TransportError, UnexpectedResponseError, error_from_payload
from wikifetch.http import HttpClientFactory, transient_retry
from wikifetch.settings import settings

logger = logging.getLogger(__name__)


class ApiConnection:
    """Connection to a MediaWiki action API (``api.php``) of a Wikibase site.

    Only read actions are needed here, so every request is a plain GET with
    ``format=json``. ``maxlag`` is sent on each request so that the server
    can ask us to back off; such answers are retried.
    """

    def __init__(
        self,
        api_url: str | None = None,
        *,
        client: httpx.Client | None = None,
        maxlag: int | None = None,
    ):
        self.api_url = api_url or settings.api_url
        self.maxlag = settings.maxlag if maxlag is None else maxlag
        self._client = client or HttpClientFactory.client()

    @classmethod
    def wikidata(cls, *, client: httpx.Client | None = None) -> ApiConnection:
        return cls(settings.api_url, client=client)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ApiConnection:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def send_action(self, action: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run one API action and return the decoded JSON body.

        Raises a ``MediaWikiApiError`` subclass when the body carries an
        ``error`` object and ``TransportError`` for network/HTTP failures.
        """

        query: dict[str, Any] = {"action": action, "format": "json"}
        if self.maxlag:
            query["maxlag"] = self.maxlag
        for key, value in (params or {}).items():
            if value is not None:
                query[key] = value

        try:
            data = self._get(query)
        except httpx.HTTPError as e:
            raise TransportError(f"{action} request to {self.api_url} failed: {e}") from e

        if "error" in data:
            err = error_from_payload(data["error"])
            logger.debug("API action %s returned error %s", action, err.code)
            raise err
        for warning in (data.get("warnings") or {}).values():
            logger.warning("API action %s warning: %s", action, warning)
        return data

    @transient_retry()
    def _get(self, query: dict[str, Any]) -> dict[str, Any]:
        logger.debug("GET %s %s", self.api_url, query)
        r = self._client.get(self.api_url, params=query)
        r.raise_for_status()
        try:
            data = r.json()
        except ValueError as e:
            raise UnexpectedResponseError(f"Non-JSON response from {self.api_url}") from e
        if not isinstance(data, dict):
            raise UnexpectedResponseError(f"Unexpected JSON payload from {self.api_url}")
        # maxlag answers must raise inside the retried call
        error = data.get("error")
        if isinstance(error, dict) and error.get("code") == "maxlag":
            raise error_from_payload(error)
        return data
