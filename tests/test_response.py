import json
import re

import pytest

from feroxscan.response import (
    FeroxResponse,
    OutputLevel,
    path_length_of_url,
    status_colorizer,
    url_depth,
)

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def strip(text):
    return ANSI.sub("", text)


def test_reached_max_depth_returns_early_on_zero():
    response = FeroxResponse(url="http://localhost")
    assert response.reached_max_depth(0, 0) is False


def test_reached_max_depth_current_depth_equals_max():
    response = FeroxResponse(url="http://localhost/one/two")
    assert response.reached_max_depth(0, 2) is True


def test_reached_max_depth_current_depth_less_than_max():
    response = FeroxResponse(url="http://localhost")
    assert response.reached_max_depth(0, 2) is False


def test_reached_max_depth_base_depth_equals_max_depth():
    response = FeroxResponse(url="http://localhost/one/two")
    assert response.reached_max_depth(2, 2) is False


def test_reached_max_depth_current_greater_than_max():
    response = FeroxResponse(url="http://localhost/one/two/three")
    assert response.reached_max_depth(0, 2) is True


def test_default_values():
    response = FeroxResponse()
    assert response.url == "http://localhost/"
    assert response.status == 200
    assert response.content_length == 0
    assert response.wildcard is False
    assert response.output_level is OutputLevel.DEFAULT


def test_set_text_counts():
    response = FeroxResponse()
    response.set_text("pellentesque diam volutpat commodo sed egestas egestas fringilla")
    assert response.content_length == 64
    assert response.line_count == 1
    assert response.word_count == 8

    response.set_text("one two\nthree\n")
    assert response.line_count == 2
    assert response.word_count == 3
    assert response.content_length == 14


def test_drop_text():
    response = FeroxResponse()
    response.set_text("body")
    response.drop_text()
    assert response.text == ""
    assert response.content_length == 4


def test_set_url_valid_and_invalid():
    response = FeroxResponse()
    response.set_url("http://localhost/stuff")
    assert response.url == "http://localhost/stuff"
    response.set_url("\\\\\\")
    assert response.url == "http://localhost/stuff"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("http://localhost/stuff", 5),
        ("http://localhost/stuff/", 5),
        ("http://localhost/a/bcd", 3),
        ("http://localhost/", 0),
    ],
)
def test_path_length_of_url(url, expected):
    assert path_length_of_url(url) == expected


def test_url_depth_orders_paths():
    assert url_depth("http://localhost/") < url_depth("http://localhost/one")
    assert url_depth("http://localhost/one") < url_depth("http://localhost/one/two")


@pytest.mark.parametrize(
    "url,expected",
    [
        ("http://localhost/stuff.js", True),
        ("http://localhost/stuff?id=1", True),
        ("http://localhost/stuff", False),
        ("http://localhost/dir/", False),
    ],
)
def test_is_file(url, expected):
    assert FeroxResponse(url=url).is_file() is expected


def test_is_directory_redirect_with_slash():
    response = FeroxResponse(url="http://localhost/admin", status=301, headers={"Location": "/admin/"})
    assert response.is_directory() is True


def test_is_directory_redirect_elsewhere():
    response = FeroxResponse(url="http://localhost/admin", status=302, headers={"Location": "/login"})
    assert response.is_directory() is False


def test_is_directory_redirect_without_location():
    response = FeroxResponse(url="http://localhost/admin", status=301)
    assert response.is_directory() is False


@pytest.mark.parametrize(
    "url,status,expected",
    [
        ("http://localhost/admin/", 200, True),
        ("http://localhost/admin/", 403, True),
        ("http://localhost/admin", 200, False),
        ("http://localhost/admin/", 404, False),
    ],
)
def test_is_directory_success(url, status, expected):
    assert FeroxResponse(url=url, status=status).is_directory() is expected


def test_status_colorizer_keeps_text():
    assert strip(status_colorizer("200")) == "200"
    assert strip(status_colorizer("WLD")) == "WLD"
    assert status_colorizer("200") != status_colorizer("404")


def test_as_str_normal():
    response = FeroxResponse(url="http://localhost/api")
    response.set_text("a b\nc")
    line = strip(response.as_str())
    assert line == "200        2l        3w        5c http://localhost/api\n"


def test_as_str_silent_is_url_only():
    response = FeroxResponse(url="http://localhost/api", output_level=OutputLevel.SILENT)
    assert response.as_str() == "http://localhost/api\n"


def test_as_str_wildcard_with_redirect():
    response = FeroxResponse(
        url="http://localhost/stuff", status=301, headers={"Location": "/else"}, wildcard=True
    )
    text = strip(response.as_str())
    assert text.startswith("WLD")
    assert "Got 301 for http://localhost/stuff (url length: 5)" in text
    assert "redirects to => /else" in text
    assert text.endswith("\n")


def test_str_display():
    response = FeroxResponse(url="http://localhost/x", content_length=7)
    assert str(response) == "FeroxResponse { url: http://localhost/x, status: 200 OK, content-length: 7 }"


def test_json_round_trip():
    response = FeroxResponse(
        url="http://localhost/images",
        original_url="http://localhost",
        status=301,
        headers={"Location": "/images/", "Server": "nginx"},
        wildcard=True,
    )
    response.set_text("one two\nthree")
    text = response.as_json()
    assert text.endswith("\n")
    data = json.loads(text)
    assert data["type"] == "response"
    assert data["path"] == "/images"
    assert data["status"] == 301

    again = FeroxResponse.from_json(text)
    assert again.url == response.url
    assert again.original_url == response.original_url
    assert again.status == 301
    assert again.content_length == response.content_length
    assert again.line_count == 2
    assert again.word_count == 3
    assert again.headers == {"location": "/images/", "server": "nginx"}
    assert again.wildcard is True


def test_from_json_ignores_bad_fields():
    text = json.dumps(
        {
            "url": "not a url",
            "status": 70000,
            "content_length": -3,
            "wildcard": "yes",
            "headers": {"bad name": 5},
        }
    )
    response = FeroxResponse.from_json(text)
    assert response.url == "http://localhost/"
    assert response.status == 200
    assert response.content_length == 0
    assert response.wildcard is False
    assert response.headers == {"unknown": ""}


def test_from_json_rejects_non_object():
    with pytest.raises(ValueError):
        FeroxResponse.from_json("[1, 2]")