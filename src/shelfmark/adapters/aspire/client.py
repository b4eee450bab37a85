"""HTTP client for the Talis Aspire REST and linked-data APIs."""

from __future__ import annotations

import base64
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from shelfmark.adapters.http_client import HttpClient

from .schema import ListDetailsPayload, TokenResponse, UserProfilePayload

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    import httpx

    from shelfmark.config.aspire import AspireConfig
    from shelfmark.config.http import HttpClientConfig
    from shelfmark.domain.ports.fetching import LinkedDataBundle

log = getLogger(__name__)

RATE_LIMIT_HEADER = "x-ratelimit-limit"
RATE_REMAINING_HEADER = "x-ratelimit-remaining"
RATE_RESET_HEADER = "x-ratelimit-reset"


class AspireAPIError(RuntimeError):
    """Raised when the Aspire API returns a payload that cannot be used."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AspireAuthenticationError(AspireAPIError):
    """Raised when no usable API token can be obtained."""


@dataclass(frozen=True, slots=True)
class RateLimitStatus:
    """Rate limit headers from the most recent response. Informational only."""

    limit: int | None = None
    remaining: int | None = None
    reset: datetime | None = None


def _header_int(headers: httpx.Headers, name: str) -> int | None:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        log.debug("Ignoring non-numeric %s header %r", name, value)
        return None


class AspireClient:
    """Client for one Aspire tenancy.

    REST calls carry an OAuth bearer token obtained with the client credentials
    grant. The token is cached and refreshed once when a call is rejected with 401.
    Linked-data calls are anonymous.
    """

    def __init__(
        self,
        config: AspireConfig,
        *,
        http_client_factory: Callable[[HttpClientConfig], HttpClient] | None = None,
    ) -> None:
        self._config = config
        http_config = replace(
            config.http,
            response_hooks=(*config.http.response_hooks, self._record_rate_limit),
        )
        self._http = (http_client_factory or HttpClient)(http_config)
        self._token: str | None = None
        self.rate_limit = RateLimitStatus()

    def __enter__(self) -> AspireClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def url(self, path: str) -> str:
        """Return the full REST API URL for an endpoint path."""
        config = self._config
        return f"{config.api_root}/{config.api_version}/{config.tenancy_code}/{path}"

    def tenancy_url(self, path: str) -> str:
        return f"{self._config.tenancy_root}/{path}"

    def call(
        self,
        path: str,
        *,
        auth: bool = True,
        expand_path: bool = True,
        method: str | None = None,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        **params: Any,
    ) -> Any:
        """Call an API endpoint and return the parsed JSON body.

        Non-success responses are logged and give None. Extra keyword arguments are
        sent as query parameters.
        """

        url = self.url(path) if expand_path else path
        method = method or ("POST" if data is not None else "GET")
        request_headers = dict(headers or {})

        refresh = False
        while True:
            if auth:
                request_headers["Authorization"] = f"Bearer {self._api_token(refresh=refresh)}"
            response = self._http.request(
                method, url, headers=request_headers, data=data, params=params or None
            )
            if not auth or response.status_code != 401:
                break
            if refresh:
                self._token = None
                raise AspireAuthenticationError(
                    f"Aspire API rejected a fresh token for {url}", status_code=401
                )
            # the cached token has probably expired
            log.warning("Aspire API token rejected for %s, requesting a new token", url)
            refresh = True

        return self._parse(response)

    def get_linked_data(self, url: str, *, expand_path: bool = False) -> Any:
        """Return the linked-data JSON for a tenancy URL (".json" is appended if missing)."""
        if expand_path:
            url = self.tenancy_url(url)
        if not url.endswith(".json"):
            url = f"{url}.json"
        return self.call(url, auth=False, expand_path=False)

    # ReadingListSource

    def fetch_list_details(self, list_id: str, **params: str | int) -> dict[str, Any] | None:
        payload = self.call(f"lists/{list_id}", **params)
        if payload is None:
            return None
        try:
            return ListDetailsPayload.model_validate(payload).to_record()
        except ValueError as exc:
            raise AspireAPIError(f"Unexpected list details payload for {list_id}") from exc

    def fetch_list_history(self, list_id: str) -> Any:
        return self.call(f"lists/{list_id}/history")

    def fetch_user_profile(self, user_id: str) -> dict[str, Any] | None:
        payload = self.call(f"users/{user_id}")
        if payload is None:
            return None
        try:
            return UserProfilePayload.model_validate(payload).to_record()
        except ValueError as exc:
            raise AspireAPIError(f"Unexpected user profile payload for {user_id}") from exc

    def fetch_linked_data(self, uri: str) -> LinkedDataBundle:
        payload = self.get_linked_data(uri)
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise AspireAPIError(f"Unexpected linked data payload for {uri}")
        return payload

    def _api_token(self, *, refresh: bool = False) -> str:
        if self._token is not None and not refresh:
            return self._token

        self._token = None
        credentials = f"{self._config.client_id}:{self._config.client_secret}"
        authorization = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        response = self._http.post(
            self._config.auth_url,
            headers={"Authorization": f"Basic {authorization}"},
            data={"grant_type": "client_credentials"},
        )
        if not response.is_success:
            raise AspireAuthenticationError(
                f"Aspire token request failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            token = TokenResponse.model_validate(response.json())
        except ValueError as exc:
            raise AspireAuthenticationError("Unexpected Aspire token response") from exc

        log.debug("Obtained a new Aspire API token")
        self._token = token.access_token
        return self._token

    def _parse(self, response: httpx.Response) -> Any:
        if not response.is_success:
            log.warning(
                "Aspire API %s %s returned HTTP %s",
                response.request.method,
                response.request.url,
                response.status_code,
            )
            return None
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise AspireAPIError(
                f"Aspire API returned invalid JSON for {response.request.url}",
                status_code=response.status_code,
            ) from exc

    def _record_rate_limit(self, response: httpx.Response) -> None:
        headers = response.headers
        limit = _header_int(headers, RATE_LIMIT_HEADER)
        remaining = _header_int(headers, RATE_REMAINING_HEADER)
        reset = _header_int(headers, RATE_RESET_HEADER)
        # headers missing from this response keep their previous values
        current = self.rate_limit
        self.rate_limit = RateLimitStatus(
            limit=current.limit if limit is None else limit,
            remaining=current.remaining if remaining is None else remaining,
            reset=current.reset if reset is None else datetime.fromtimestamp(reset, tz=UTC),
        )
