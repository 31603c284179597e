def test_game_details_returns_resolved_metadata(app_client):
    client, _store, _covers = app_client

    resp = client.get("/gameDetails/1025?platform=4&region=5")

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["title"] == "The Legend of Zelda: Ocarina of Time"
    assert data["platform"] == "Nintendo 64"
    assert data["region"] == "Japan"
    assert data["releaseDate"] == "1998-11-21"
    assert data["developer"] == ["Nintendo EAD", "Grezzo"]
    assert data["publisher"] == ["Nintendo"]
    assert data["franchise"] == ["The Legend of Zelda"]
    assert data["series"] == ["Zelda"]
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_game_details_malformed_id_is_empty_record(app_client, fake_igdb):
    client, _store, _covers = app_client

    resp = client.get("/gameDetails/abc123")

    assert resp.status_code == 200
    assert resp.get_json() == {
        "title": "",
        "platform": "",
        "region": "",
        "releaseDate": "",
        "publisher": [],
        "developer": [],
        "franchise": [],
        "series": [],
    }
    assert fake_igdb.calls == []


def test_game_details_not_found(app_client):
    client, _store, _covers = app_client

    resp = client.get("/gameDetails/424242")

    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Game not found"}


def test_game_details_upstream_failure(app_client, fake_igdb):
    client, _store, _covers = app_client
    fake_igdb.fail.add("game")

    resp = client.get("/gameDetails/1025")

    assert resp.status_code == 502
    assert resp.get_json() == {"error": "Failed to fetch game details"}


def test_game_details_partial_relations(app_client, fake_igdb):
    client, _store, _covers = app_client
    fake_igdb.fail.add("collections")

    resp = client.get("/gameDetails/1025")

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["series"] == []
    assert data["franchise"] == ["The Legend of Zelda"]


def test_popular_games(app_client, fake_igdb):
    client, _store, _covers = app_client

    resp = client.get("/games")

    assert resp.status_code == 200
    assert resp.get_json() == [{"id": 1, "name": "Popular"}]
    assert ("popular", 30) in fake_igdb.calls


def test_token_failure_is_bad_gateway(app_client, fake_igdb):
    client, _store, _covers = app_client
    fake_igdb.fail.add("token")

    resp = client.get("/games")

    assert resp.status_code == 502
    assert resp.get_json() == {"error": "Failed to retrieve access token"}


def test_search_requires_query(app_client, fake_igdb):
    client, _store, _covers = app_client

    resp = client.get("/search?q=%20")

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing search query"}
    assert fake_igdb.calls == []


def test_search_filters_unsafe_results(app_client, fake_igdb):
    client, _store, _covers = app_client
    fake_igdb.search_results = [
        {"id": 1, "name": "Zelda"},
        {"id": 2, "name": "Lewd Quest"},
        {"id": 3, "name": "Rated", "age_ratings": [{"id": 12}]},
    ]

    resp = client.get("/search?q=zelda&limit=5&offset=10")

    assert resp.status_code == 200
    assert [game["id"] for game in resp.get_json()] == [1]
    assert ("search", ("zelda", 5, 10)) in fake_igdb.calls

    unfiltered = client.get("/search?q=zelda&safe=0")
    assert [game["id"] for game in unfiltered.get_json()] == [1, 2, 3]


def test_search_non_positive_limit_uses_default(app_client, fake_igdb):
    client, _store, _covers = app_client

    for limit in ("-5", "0", "many"):
        resp = client.get(f"/search?q=zelda&limit={limit}")
        assert resp.status_code == 200

    assert [call for name, call in fake_igdb.calls if name == "search"] == [
        ("zelda", 10, 0),
        ("zelda", 10, 0),
        ("zelda", 10, 0),
    ]
