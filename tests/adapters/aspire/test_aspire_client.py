from __future__ import annotations

import base64
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from shelfmark.adapters.aspire import (
    AspireAPIError,
    AspireAuthenticationError,
    AspireClient,
    RateLimitStatus,
)
from shelfmark.adapters.http_client import HttpClient
from shelfmark.config import AspireConfig
from shelfmark.domain.graph import LIST_DETAILS_PARAMS

if TYPE_CHECKING:
    from shelfmark.config import HttpClientConfig

TOKEN_URL = "https://users.example.com/1/oauth/tokens"
API = "https://rl.example.com/2/lancaster"
TENANCY = "http://lists.example.ac.uk"

Route = Callable[[httpx.Request], httpx.Response]


def _without_query(url: httpx.URL) -> str:
    return f"{url.scheme}://{url.host}{url.path}"


class FakeAspire:
    """Routes requests by URL path and records every request it sees."""

    def __init__(self, routes: dict[str, Route | list[Route]]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []
        self.token_count = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = _without_query(request.url)
        if url == TOKEN_URL and url not in self.routes:
            self.token_count += 1
            return httpx.Response(
                200,
                json={"access_token": f"tok-{self.token_count}", "expires_in": 3599},
            )
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404)
        if isinstance(route, list):
            # each response is served once, the last one repeatedly
            route = route.pop(0) if len(route) > 1 else route[0]
        return route(request)

    def client_factory(self) -> Callable[[HttpClientConfig], HttpClient]:
        def factory(config: HttpClientConfig) -> HttpClient:
            return HttpClient(config, transport=httpx.MockTransport(self.handler))

        return factory

    def requests_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if _without_query(r.url) == url]


def _json(payload: Any, status: int = 200, **headers: str) -> Route:
    return lambda _request: httpx.Response(status, json=payload, headers=headers)


def _status(status: int) -> Route:
    return lambda _request: httpx.Response(status)


@pytest.fixture
def config() -> AspireConfig:
    return AspireConfig(
        client_id="client-id",
        client_secret="client-secret",
        tenancy_code="lancaster",
        tenancy_root=TENANCY,
        api_root="https://rl.example.com",
        auth_url=TOKEN_URL,
    )


def _client(config: AspireConfig, fake: FakeAspire) -> AspireClient:
    return AspireClient(config, http_client_factory=fake.client_factory())


def test_list_details_uses_bearer_token_and_query(config: AspireConfig) -> None:
    fake = FakeAspire({f"{API}/lists/AB12": _json({"uri": "L", "items": [{"uri": "I1"}]})})

    with _client(config, fake) as client:
        details = client.fetch_list_details("AB12", **LIST_DETAILS_PARAMS)

    assert details == {"uri": "L", "items": [{"uri": "I1"}]}
    # "modules" was not sent, so it stays absent
    assert "modules" not in details

    (token_request,) = fake.requests_to(TOKEN_URL)
    expected = base64.b64encode(b"client-id:client-secret").decode("ascii")
    assert token_request.headers["Authorization"] == f"Basic {expected}"
    assert token_request.content == b"grant_type=client_credentials"

    (request,) = fake.requests_to(f"{API}/lists/AB12")
    assert request.headers["Authorization"] == "Bearer tok-1"
    assert dict(request.url.params) == {
        "bookjacket": "1",
        "draft": "1",
        "editions": "1",
        "history": "0",
    }


def test_list_details_keeps_empty_modules_and_extra_keys(config: AspireConfig) -> None:
    payload = {"modules": [], "timePeriod": {"title": "2016-17"}, "listType": "draft"}
    fake = FakeAspire({f"{API}/lists/AB12": _json(payload)})

    details = _client(config, fake).fetch_list_details("AB12")

    assert details == {
        "modules": [],
        "timePeriod": {"title": "2016-17"},
        "listType": "draft",
    }


def test_token_is_cached_between_calls(config: AspireConfig) -> None:
    fake = FakeAspire(
        {
            f"{API}/lists/AB12/history": _json([{"event": "created"}]),
            f"{API}/users/U1": _json({"firstName": "Ann", "email": "a@lancaster.ac.uk"}),
        }
    )
    client = _client(config, fake)

    assert client.fetch_list_history("AB12") == [{"event": "created"}]
    profile = client.fetch_user_profile("U1")

    assert fake.token_count == 1
    assert profile is not None
    assert profile["firstName"] == "Ann"
    assert profile["email"] == ["a@lancaster.ac.uk"]
    assert profile["role"] == []


def test_rejected_token_is_refreshed_once(config: AspireConfig) -> None:
    fake = FakeAspire({f"{API}/lists/AB12/history": [_status(401), _json(["ok"])]})

    result = _client(config, fake).fetch_list_history("AB12")

    assert result == ["ok"]
    assert fake.token_count == 2
    authorizations = [
        r.headers["Authorization"] for r in fake.requests_to(f"{API}/lists/AB12/history")
    ]
    assert authorizations == ["Bearer tok-1", "Bearer tok-2"]


def test_second_rejection_raises_and_drops_token(config: AspireConfig) -> None:
    fake = FakeAspire({f"{API}/lists/AB12/history": _status(401)})
    client = _client(config, fake)

    with pytest.raises(AspireAuthenticationError) as exc:
        client.fetch_list_history("AB12")

    assert exc.value.status_code == 401
    assert fake.token_count == 2

    with pytest.raises(AspireAuthenticationError):
        client.fetch_list_history("AB12")
    # no token survived the failure, so a new one was requested
    assert fake.token_count == 4


def test_failed_token_request_raises(config: AspireConfig) -> None:
    fake = FakeAspire({TOKEN_URL: _status(403)})

    with pytest.raises(AspireAuthenticationError) as exc:
        _client(config, fake).fetch_list_history("AB12")

    assert exc.value.status_code == 403
    assert fake.requests_to(f"{API}/lists/AB12/history") == []


def test_malformed_token_response_raises(config: AspireConfig) -> None:
    fake = FakeAspire({TOKEN_URL: _json({"token_type": "bearer"})})

    with pytest.raises(AspireAuthenticationError):
        _client(config, fake).fetch_list_history("AB12")


def test_unsuccessful_responses_give_none(
    config: AspireConfig, caplog: pytest.LogCaptureFixture
) -> None:
    fake = FakeAspire({f"{API}/lists/GONE": _status(404), f"{API}/users/U1": _status(500)})
    client = _client(config, fake)

    with caplog.at_level("WARNING", logger="shelfmark.adapters.aspire.client"):
        assert client.fetch_list_details("GONE") is None
        assert client.fetch_user_profile("U1") is None

    assert "HTTP 404" in caplog.text
    assert "HTTP 500" in caplog.text


def test_invalid_json_raises(config: AspireConfig) -> None:
    fake = FakeAspire(
        {f"{API}/lists/AB12/history": lambda _request: httpx.Response(200, text="<html>")}
    )

    with pytest.raises(AspireAPIError):
        _client(config, fake).fetch_list_history("AB12")


def test_malformed_list_fields_read_as_absent(config: AspireConfig) -> None:
    fake = FakeAspire(
        {
            f"{API}/lists/NULL": _json({"name": "Reading", "items": None}),
            f"{API}/lists/MIXED": _json(
                {
                    "uri": 42,
                    "items": [None, {"uri": "x"}, "I2"],
                    "modules": "HIST101",
                    "timePeriod": ["2016-17"],
                }
            ),
        }
    )
    client = _client(config, fake)

    assert client.fetch_list_details("NULL") == {"name": "Reading", "items": []}
    assert client.fetch_list_details("MIXED") == {
        "uri": None,
        "items": [{"uri": "x"}],
        "modules": None,
        "timePeriod": None,
    }


def test_malformed_user_profile_fields_read_as_empty(config: AspireConfig) -> None:
    fake = FakeAspire(
        {
            f"{API}/users/U1": _json(
                {
                    "uri": "http://example.com/users/U1",
                    "firstName": None,
                    "surname": ["Other"],
                    "email": {"primary": "a@lancaster.ac.uk"},
                    "role": ["Staff", None, 3],
                }
            ),
            f"{API}/users/U2": _json({"email": "b@lancaster.ac.uk", "role": None}),
        }
    )
    client = _client(config, fake)

    assert client.fetch_user_profile("U1") == {
        "uri": "http://example.com/users/U1",
        "firstName": None,
        "surname": None,
        "email": [],
        "role": ["Staff"],
    }
    profile = client.fetch_user_profile("U2")
    assert profile is not None
    assert profile["email"] == ["b@lancaster.ac.uk"]
    assert profile["role"] == []


def test_non_object_payloads_raise(config: AspireConfig) -> None:
    fake = FakeAspire(
        {
            f"{API}/users/U1": _json(["a@lancaster.ac.uk"]),
            f"{API}/lists/AB12": _json("none"),
        }
    )
    client = _client(config, fake)

    with pytest.raises(AspireAPIError, match="user profile"):
        client.fetch_user_profile("U1")
    with pytest.raises(AspireAPIError, match="list details"):
        client.fetch_list_details("AB12")


def test_linked_data_is_fetched_anonymously(config: AspireConfig) -> None:
    bundle = {f"{TENANCY}/lists/AB12": {"http://rdfs.org/sioc/spec/name": []}}
    fake = FakeAspire({f"{TENANCY}/lists/AB12.json": _json(bundle)})
    client = _client(config, fake)

    assert client.fetch_linked_data(f"{TENANCY}/lists/AB12") == bundle
    assert client.get_linked_data("lists/AB12.json", expand_path=True) == bundle

    assert fake.token_count == 0
    assert all("Authorization" not in r.headers for r in fake.requests)


def test_linked_data_failures(config: AspireConfig) -> None:
    fake = FakeAspire({f"{TENANCY}/lists/LIST.json": _json(["not", "a", "bundle"])})
    client = _client(config, fake)

    assert client.fetch_linked_data(f"{TENANCY}/lists/MISSING") == {}
    with pytest.raises(AspireAPIError):
        client.fetch_linked_data(f"{TENANCY}/lists/LIST")


def test_rate_limit_headers_are_recorded(config: AspireConfig) -> None:
    reset = int(datetime(2024, 1, 1, tzinfo=UTC).timestamp())
    fake = FakeAspire(
        {
            f"{API}/lists/A/history": _json(
                [],
                **{
                    "X-RateLimit-Limit": "100",
                    "X-RateLimit-Remaining": "99",
                    "X-RateLimit-Reset": str(reset),
                },
            ),
            f"{API}/lists/B/history": _json([], **{"X-RateLimit-Remaining": "98"}),
        }
    )
    client = _client(config, fake)
    assert client.rate_limit == RateLimitStatus()

    client.fetch_list_history("A")
    client.fetch_list_history("B")

    assert client.rate_limit == RateLimitStatus(
        limit=100, remaining=98, reset=datetime(2024, 1, 1, tzinfo=UTC)
    )


def test_post_when_data_is_given(config: AspireConfig) -> None:
    fake = FakeAspire(
        {f"{API}/lists/AB12/publish": lambda request: httpx.Response(202, json=request.method)}
    )

    result = _client(config, fake).call("lists/AB12/publish", data={"confirm": "1"})

    assert result == "POST"
    (request,) = fake.requests_to(f"{API}/lists/AB12/publish")
    assert request.content == b"confirm=1"


def test_urls(config: AspireConfig) -> None:
    client = _client(config, FakeAspire({}))

    assert client.url("lists/AB12") == f"{API}/lists/AB12"
    assert client.tenancy_url("lists/AB12") == f"{TENANCY}/lists/AB12"
