"""Pytest fixtures shared across the test suite."""

import pytest

from tests.app_helpers import ZELDA_PAYLOAD, FakeIGDBClient, build_app


@pytest.fixture
def fake_igdb():
    return FakeIGDBClient(
        games={1025: ZELDA_PAYLOAD},
        companies=[
            {"id": 11, "company": {"name": "Nintendo EAD"}, "developer": True, "publisher": False},
            {"id": 12, "company": {"name": "Nintendo"}, "developer": False, "publisher": True},
            {"id": 13, "company": {"name": "Grezzo"}, "developer": True, "publisher": False},
        ],
        franchises=[{"id": 596, "name": "The Legend of Zelda"}, {"id": 1200, "name": ""}],
        collections=[{"id": 106, "name": "Zelda"}],
        popular=[{"id": 1, "name": "Popular"}],
    )


@pytest.fixture
def app_client(tmp_path, fake_igdb):
    flask_app, store, covers = build_app(tmp_path, fake_igdb)
    return flask_app.test_client(), store, covers
