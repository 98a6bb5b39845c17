# tests/test_flickr_client.py
# Flickr REST client against a mocked requests.Session

from unittest.mock import MagicMock

import pytest
import requests

from core.models import PhotoRecord
from core.result import Err, Ok
from core.services.interfaces import FlickrError
from infrastructure.flickr_client import API_URL, FlickrClient
from infrastructure.settings import JsonSettings


def _response(payload=None, content=b"", status_error=None):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.content = content
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    return resp


def _photo_json(photo_id, **extra):
    item = {"id": photo_id, "server": "7", "secret": "abc", "farm": 1, "title": f"t{photo_id}"}
    item.update(extra)
    return item


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


def _route(session, payload, images):
    """Serve `payload` for the API URL and `images[url]` for image URLs."""

    def _get(url, params=None, timeout=None):
        if url == API_URL:
            return _response(payload)
        content = images.get(url)
        if content is None:
            return _response(status_error=requests.exceptions.HTTPError("404"))
        return _response(content=content)

    session.get.side_effect = _get


class TestSearch:
    def test_parses_photos_and_thumbnails(self, session, jpeg_bytes):
        payload = {
            "stat": "ok",
            "photos": {
                "photo": [
                    _photo_json("1", width_m="500", height_m="375"),
                    _photo_json("2"),
                ]
            },
        }
        images = {
            "https://live.staticflickr.com/7/1_abc_m.jpg": jpeg_bytes(240, 180),
            "https://live.staticflickr.com/7/2_abc_m.jpg": jpeg_bytes(120, 240),
        }
        _route(session, payload, images)

        result = FlickrClient("key", per_page=5, session=session).search("cats")

        assert isinstance(result, Ok)
        group = result.value
        assert group.search_term == "cats"
        assert [p.photo_id for p in group.photos] == ["1", "2"]
        assert (group.photos[0].width, group.photos[0].height) == (500, 375)
        # no size extras: dimensions come from the thumbnail
        assert (group.photos[1].width, group.photos[1].height) == (120, 240)
        assert group.photos[1].farm == 1
        assert set(group.thumbnails) == {"1", "2"}
        assert group.thumbnails["1"].size == (240, 180)

    def test_sends_search_parameters(self, session):
        _route(session, {"stat": "ok", "photos": {"photo": []}}, {})
        FlickrClient("key", per_page=7, timeout=3, session=session).search("red fox")
        _, kwargs = session.get.call_args
        params = kwargs["params"]
        assert params["method"] == "flickr.photos.search"
        assert params["api_key"] == "key"
        assert params["text"] == "red fox"
        assert params["per_page"] == 7
        assert params["format"] == "json"
        assert params["nojsoncallback"] == 1
        assert kwargs["timeout"] == 3

    def test_skips_photos_whose_thumbnail_fails(self, session, jpeg_bytes):
        payload = {"stat": "ok", "photos": {"photo": [_photo_json("1"), _photo_json("2")]}}
        images = {"https://live.staticflickr.com/7/2_abc_m.jpg": jpeg_bytes()}
        _route(session, payload, images)
        result = FlickrClient("key", session=session).search("cats")
        assert [p.photo_id for p in result.value.photos] == ["2"]

    def test_skips_undecodable_thumbnail(self, session):
        payload = {"stat": "ok", "photos": {"photo": [_photo_json("1")]}}
        _route(session, payload, {"https://live.staticflickr.com/7/1_abc_m.jpg": b"not an image"})
        result = FlickrClient("key", session=session).search("cats")
        assert result.value.photos == []

    def test_skips_malformed_entries(self, session, jpeg_bytes):
        payload = {"stat": "ok", "photos": {"photo": [{"id": "1"}, "junk", _photo_json("3")]}}
        _route(session, payload, {"https://live.staticflickr.com/7/3_abc_m.jpg": jpeg_bytes()})
        result = FlickrClient("key", session=session).search("cats")
        assert [p.photo_id for p in result.value.photos] == ["3"]

    def test_api_failure_is_error_value(self, session):
        _route(session, {"stat": "fail", "code": 100, "message": "Invalid API Key"}, {})
        result = FlickrClient("bad", session=session).search("cats")
        assert isinstance(result, Err)
        assert isinstance(result.reason, FlickrError)
        assert result.reason.code == 100
        assert "Invalid API Key" in str(result.reason)

    @pytest.mark.parametrize("payload", [{}, {"stat": "ok"}, {"stat": "ok", "photos": {}}, []])
    def test_unknown_response_is_error_value(self, session, payload):
        _route(session, payload, {})
        result = FlickrClient("key", session=session).search("cats")
        assert isinstance(result, Err)
        assert result.reason.message == "Unknown API response"

    def test_transport_error_is_error_value(self, session):
        session.get.side_effect = requests.exceptions.ConnectionError("offline")
        result = FlickrClient("key", session=session).search("cats")
        assert isinstance(result, Err)
        assert "offline" in str(result.reason)

    def test_invalid_json_is_error_value(self, session):
        resp = _response()
        resp.json.side_effect = ValueError("Expecting value")
        session.get.return_value = resp
        session.get.side_effect = None
        result = FlickrClient("key", session=session).search("cats")
        assert isinstance(result, Err)


class TestLargeImage:
    def test_loads_large_variant(self, session, jpeg_bytes):
        session.get.return_value = _response(content=jpeg_bytes(1024, 768))
        photo = PhotoRecord(photo_id="9", server="7", secret="abc")
        result = FlickrClient("key", session=session).load_large_image(photo)
        assert isinstance(result, Ok)
        assert result.value.size == (1024, 768)
        args, _ = session.get.call_args
        assert args[0] == "https://live.staticflickr.com/7/9_abc_b.jpg"

    def test_http_error_is_error_value(self, session):
        session.get.return_value = _response(status_error=requests.exceptions.HTTPError("500"))
        photo = PhotoRecord(photo_id="9", server="7", secret="abc")
        result = FlickrClient("key", session=session).load_large_image(photo)
        assert isinstance(result, Err)


def test_from_settings_expands_environment(monkeypatch):
    monkeypatch.setenv("FLICKR_TEST_KEY", "secret-key")
    settings = JsonSettings.from_dict(
        {"flickr": {"api_key": "$FLICKR_TEST_KEY", "per_page": "12", "timeout_sec": 4}}
    )
    client = FlickrClient.from_settings(settings)
    assert client.api_key == "secret-key"
    assert client.per_page == 12
    assert client.timeout == 4.0
