import io
import json

from PIL import Image

from tests.app_helpers import LOCAL_PREFIX, FakeIGDBClient, build_app


def _png_bytes(size=(4, 6)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 10, 10)).save(buffer, format="PNG")
    buffer.seek(0)
    return buffer


class ImageOpener:
    def __init__(self, body=b"jpeg-bytes"):
        self.body = body
        self.urls = []

    def __call__(self, request):
        self.urls.append(request.full_url)
        return io.BytesIO(self.body)


def test_save_and_list_games(app_client):
    client, store, _covers = app_client

    resp = client.post("/savedGames", json={"id": "1025", "title": "Zelda", "status": "Backlog"})
    again = client.post("/savedGames", json={"id": "1025", "title": "Zelda"})

    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Game entry saved successfully", "id": "1025"}
    assert again.get_json()["id"] == "1025-1"
    listed = client.get("/savedGames").get_json()
    assert [game["id"] for game in listed] == ["1025", "1025-1"]
    assert listed[0]["priority"] == "Normal"
    assert store.get_game("1025")["title"] == "Zelda"


def test_save_rejects_missing_id(app_client):
    client, _store, _covers = app_client

    resp = client.post("/savedGames", json={"title": "No id"})

    assert resp.status_code == 400
    assert client.post("/savedGames", data="nope").status_code == 400


def test_update_existing_and_missing(app_client):
    client, store, _covers = app_client
    store.add_game({"id": "7", "title": "Before"})

    resp = client.put("/savedGames", json={"id": "7", "title": "After", "priority": "High"})
    missing = client.put("/savedGames", json={"id": "8", "title": "Ghost"})

    assert resp.status_code == 200
    assert resp.get_json() == {"id": "7", "title": "After", "priority": "High"}
    assert missing.status_code == 404
    assert missing.get_json() == {"error": "Game not found"}


def test_delete_removes_entry_and_cover(app_client):
    client, store, covers = app_client
    store.add_game({"id": "7", "title": "Doomed"})
    covers.ensure_exists()
    covers.path_for("7").write_bytes(b"img")

    resp = client.delete("/savedGames/7")

    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Game entry deleted successfully"}
    assert store.list_games() == []
    assert not covers.path_for("7").exists()


def test_remote_cover_is_downloaded_once(tmp_path):
    opener = ImageOpener()
    flask_app, _store, covers = build_app(tmp_path, FakeIGDBClient(), opener=opener)
    client = flask_app.test_client()

    client.post("/savedGames", json={"id": "9", "coverUrl": "//images.igdb.com/t_cover_big/a.jpg"})
    client.put("/savedGames", json={"id": "9", "coverUrl": "//images.igdb.com/t_cover_big/a.jpg"})
    client.post("/savedGames", json={"id": "10", "coverUrl": f"{LOCAL_PREFIX}10.jpg"})

    assert opener.urls == ["https://images.igdb.com/t_cover_big/a.jpg"]
    assert covers.path_for("9").read_bytes() == b"jpeg-bytes"


def test_cover_download_failure_still_saves_entry(tmp_path):
    def failing_opener(_request):
        raise OSError("offline")

    flask_app, store, _covers = build_app(tmp_path, FakeIGDBClient(), opener=failing_opener)

    resp = flask_app.test_client().post(
        "/savedGames", json={"id": "3", "coverUrl": "https://example.com/c.jpg"}
    )

    assert resp.status_code == 200
    assert store.get_game("3") is not None


def test_upload_cover_and_serve_it(app_client):
    client, _store, covers = app_client

    resp = client.post(
        "/uploadCover",
        data={"id": "42", "cover": (_png_bytes(), "shot.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    data = resp.get_json()
    assert data == {
        "message": "Cover uploaded",
        "coverUrl": f"{LOCAL_PREFIX}42.jpg",
        "filename": "42.jpg",
    }
    with Image.open(covers.path_for("42")) as img:
        assert img.format == "JPEG"
        assert img.size == (4, 6)

    served = client.get("/covers/42.jpg")
    assert served.status_code == 200
    assert served.data == covers.path_for("42").read_bytes()


def test_upload_cover_validation(app_client):
    client, _store, _covers = app_client

    missing = client.post("/uploadCover", data={"id": "42"}, content_type="multipart/form-data")
    wrong_type = client.post(
        "/uploadCover",
        data={"id": "42", "cover": (io.BytesIO(b"GIF89a"), "anim.gif")},
        content_type="multipart/form-data",
    )

    assert missing.status_code == 400
    assert missing.get_json() == {"error": "Missing file or id"}
    assert wrong_type.status_code == 400
    assert "Only accepts" in wrong_type.get_json()["error"]


def test_sort_config_endpoints(app_client, tmp_path):
    client, _store, _covers = app_client

    assert client.get("/sortConfig").get_json() == {"sortOption": "none", "groupBy": "none"}

    resp = client.post("/sortConfig", json={"sortOption": "title-asc", "groupBy": "series"})
    assert resp.get_json() == {"message": "Config saved"}
    assert json.loads((tmp_path / "sortConfig.json").read_text()) == {
        "sortOption": "title-asc",
        "groupBy": "series",
    }
    assert client.get("/sortConfig").get_json()["groupBy"] == "series"

    bad = client.post("/sortConfig", json={"sortOption": "colour", "groupBy": "none"})
    assert bad.status_code == 400


def test_statistics_endpoint(app_client):
    client, store, _covers = app_client
    store.add_game({"id": "1", "status": "Finished", "rating": 8, "platform": "PC", "playTime": "1:30"})
    store.add_game({"id": "2", "status": "Playing", "platform": "PC"})
    store.add_game({"id": "3", "status": "Wishlist", "platform": "Switch"})

    resp = client.get("/statistics")

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["groupBy"] == "platform"
    assert data["overall"]["status"][0]["count"] == 2
    assert [group["name"] for group in data["groups"]] == ["PC"]
    assert data["overall"]["rating"]["average"] == 8

    assert client.get("/statistics?groupBy=colour").status_code == 400
