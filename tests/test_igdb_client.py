import io
import json
from urllib.error import HTTPError

import pytest

from igdb.client import IGDBClient, escape_search_term, resolve_igdb_page_size


class RecordedRequest:
    def __init__(self, url, data=None, method=None):
        self.url = url
        self.data = data
        self.method = method
        self.headers = {}

    def add_header(self, key, value):
        self.headers[key] = value


class FakeResponse:
    def __init__(self, payload):
        self._body = json.dumps(payload).encode("utf-8")

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeOpener:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome)


def make_client(opener, **kwargs):
    return IGDBClient(
        client_id="cid",
        client_secret="secret",
        user_agent="Tests/1.0",
        request_factory=RecordedRequest,
        opener=opener,
        env={},
        **kwargs,
    )


def http_error(code, body=b"", headers=None):
    return HTTPError("https://api.igdb.com/v4/games", code, "error", headers or {}, io.BytesIO(body))


def test_exchange_credentials_posts_client_credentials():
    opener = FakeOpener({"access_token": "abc", "expires_in": 100})
    client = make_client(opener)

    token, client_id = client.exchange_twitch_credentials()

    assert (token, client_id) == ("abc", "cid")
    request = opener.requests[0]
    assert request.url == IGDBClient.TOKEN_URL
    assert request.method == "POST"
    assert b"grant_type=client_credentials" in request.data
    assert b"client_secret=secret" in request.data


def test_exchange_credentials_requires_configuration():
    client = IGDBClient(env={}, opener=FakeOpener())

    with pytest.raises(RuntimeError, match="missing twitch client credentials"):
        client.exchange_twitch_credentials()


def test_exchange_credentials_rejects_response_without_token():
    client = make_client(FakeOpener({"message": "nope"}))

    with pytest.raises(RuntimeError, match="missing access token"):
        client.exchange_twitch_credentials()


def test_fetch_game_candidate_query_and_headers():
    opener = FakeOpener([{"id": 1025, "name": "Zelda"}])
    client = make_client(opener)

    payload = client.fetch_game_candidate("tok", "cid", 1025)

    assert payload == {"id": 1025, "name": "Zelda"}
    request = opener.requests[0]
    assert request.url == "https://api.igdb.com/v4/games"
    query = request.data.decode("utf-8")
    assert query.startswith("fields name, franchise,")
    assert "release_dates.*" in query
    assert "platforms.name" in query
    assert query.endswith("where id = 1025;")
    assert request.headers["Client-ID"] == "cid"
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.headers["User-Agent"] == "Tests/1.0"


def test_fetch_game_candidate_returns_none_when_missing():
    client = make_client(FakeOpener([]))

    assert client.fetch_game_candidate("tok", "cid", 5) is None


def test_batch_lookup_sets_limit_to_id_count():
    rows = [{"id": i, "name": f"Franchise {i}"} for i in range(1, 13)]
    opener = FakeOpener(rows)
    client = make_client(opener)

    result = client.fetch_franchises("tok", "cid", list(range(1, 13)) + [3, "x"])

    assert len(result) == 12
    request = opener.requests[0]
    assert request.url.endswith("/franchises")
    assert request.data.decode("utf-8") == (
        "fields name; where id = (1,2,3,4,5,6,7,8,9,10,11,12); limit 12;"
    )


def test_involved_companies_fields():
    opener = FakeOpener([])
    client = make_client(opener)

    client.fetch_involved_companies("tok", "cid", [7])

    assert opener.requests[0].data == (
        b"fields company.name, developer, publisher; where id = (7); limit 1;"
    )


def test_empty_id_batch_skips_request():
    opener = FakeOpener()
    client = make_client(opener)

    assert client.fetch_collections("tok", "cid", []) == []
    assert opener.requests == []


def test_http_error_raises_runtime_error_with_body():
    client = make_client(FakeOpener(http_error(500, b"boom")))

    with pytest.raises(RuntimeError, match="IGDB collections request failed: 500 boom"):
        client.fetch_collections("tok", "cid", [1])


def test_rate_limited_request_fails_without_retry():
    opener = FakeOpener(http_error(429, headers={"Retry-After": "2"}), [{"id": 1, "name": "Saga"}])
    client = make_client(opener)

    with pytest.raises(RuntimeError, match="IGDB franchises request failed: 429"):
        client.fetch_franchises("tok", "cid", [1])
    assert len(opener.requests) == 1


def test_search_escapes_term_and_pages():
    opener = FakeOpener([])
    client = make_client(opener)

    client.search_games("tok", "cid", 'Say "hi"', limit=20, offset=40)

    query = opener.requests[0].data.decode("utf-8")
    assert query.startswith('search "Say \\"hi\\""; ')
    assert "limit 20; offset 40;" in query


def test_popular_games_limit():
    opener = FakeOpener([{"id": 1}])
    client = make_client(opener)

    assert client.fetch_popular_games("tok", "cid", limit=30) == [{"id": 1}]
    assert "sort total_rating desc; limit 30;" in opener.requests[0].data.decode("utf-8")


def test_helpers():
    assert escape_search_term(' a\\b ') == "a\\\\b"
    assert resolve_igdb_page_size("abc") == 500
    assert resolve_igdb_page_size(0) == 500
    assert resolve_igdb_page_size(900) == 500
    assert resolve_igdb_page_size(25) == 25
