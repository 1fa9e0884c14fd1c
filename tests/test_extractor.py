import pytest

from feroxscan.extractor import ExtractionTarget, Extractor
from feroxscan.response import FeroxResponse


def _response(url="http://localhost", text="nulla pharetra diam sit amet nisl suscipit"):
    resp = FeroxResponse()
    resp.set_url(url)
    resp.set_text(text)
    return resp


@pytest.fixture
def robots_ext():
    return Extractor(target=ExtractionTarget.ROBOTS_TXT, url="http://localhost")


@pytest.fixture
def body_ext():
    return Extractor(target=ExtractionTarget.RESPONSE_BODY, response=_response())


@pytest.mark.parametrize(
    "path, expected",
    [
        (
            "homepage/assets/img/icons/handshake.svg",
            [
                "homepage/",
                "homepage/assets/",
                "homepage/assets/img/",
                "homepage/assets/img/icons/",
                "homepage/assets/img/icons/handshake.svg",
            ],
        ),
        ("/homepage/assets/", ["homepage/", "homepage/assets"]),
        ("homepage", ["homepage"]),
        ("/homepage", ["homepage"]),
    ],
)
def test_get_sub_paths_from_path(robots_ext, body_ext, path, expected):
    r_paths = robots_ext.get_sub_paths_from_path(path)
    b_paths = body_ext.get_sub_paths_from_path(path)
    assert sorted(r_paths) == sorted(expected)
    assert sorted(b_paths) == sorted(expected)


def test_sub_paths_longest_first(body_ext):
    assert body_ext.get_sub_paths_from_path("/a/b/c.php") == ["a/b/c.php", "a/b/", "a/"]


def test_builder_bails_when_neither_url_nor_response():
    with pytest.raises(ValueError):
        Extractor(target=ExtractionTarget.ROBOTS_TXT, url="")


def test_non_base_url_bails():
    extractor = Extractor(target=ExtractionTarget.ROBOTS_TXT, url="\\\\\\")
    with pytest.raises(ValueError):
        extractor.join_link("admin")


def test_join_link_happy_path(robots_ext, body_ext):
    assert robots_ext.join_link("admin") == "http://localhost/admin"
    assert body_ext.join_link("shmadmin") == "http://localhost/shmadmin"


def test_join_link_with_invalid_fragment(robots_ext, body_ext):
    with pytest.raises(ValueError):
        robots_ext.join_link("\\\\\\\\")
    with pytest.raises(ValueError):
        body_ext.join_link("\\\\\\\\")


def test_sub_links(robots_ext):
    assert robots_ext.sub_links("/one/two.txt") == {
        "http://localhost/one/two.txt",
        "http://localhost/one/",
    }


def test_body_absolute_url_other_domain_is_ignored():
    resp = _response(
        text='"http://definitely.not.a.thing.probably.com/homepage/assets/img/icons/handshake.svg"'
    )
    extractor = Extractor(response=resp)
    assert extractor.extract_from_body() == set()


def test_body_absolute_url_same_domain():
    resp = _response(
        url="http://example.com/",
        text='"http://example.com/homepage/assets/img/icons/handshake.svg"',
    )
    extractor = Extractor(response=resp)
    assert extractor.extract_from_body() == {
        "http://example.com/homepage/assets/img/icons/handshake.svg",
        "http://example.com/homepage/assets/img/icons/",
        "http://example.com/homepage/assets/img/",
        "http://example.com/homepage/assets/",
        "http://example.com/homepage/",
    }


def test_body_relative_link():
    resp = _response(text="<script src='/js/app.js'></script>")
    extractor = Extractor(response=resp)
    assert extractor.extract_from_body() == {
        "http://localhost/js/app.js",
        "http://localhost/js/",
    }


def test_body_without_links(body_ext):
    assert body_ext.extract_from_body() == set()


def test_body_extraction_requires_response():
    extractor = Extractor(target=ExtractionTarget.RESPONSE_BODY, url="http://localhost")
    with pytest.raises(ValueError):
        extractor.extract_from_body()


def test_robots_extraction(robots_ext):
    text = "User-agent: *\nDisallow: /admin/panel\nAllow: /public\n"
    assert robots_ext.extract_from_robots(text) == {
        "http://localhost/admin/panel",
        "http://localhost/admin/",
        "http://localhost/public",
    }


def test_robots_empty_rule_ignored(robots_ext):
    assert robots_ext.extract_from_robots("User-agent: *\nDisallow: \n") == set()


def test_robots_query_is_encoded(robots_ext):
    assert robots_ext.extract_from_robots("Disallow: /search?q=1") == {
        "http://localhost/search%3Fq=1"
    }


def test_robots_with_unparsable_url():
    extractor = Extractor(target=ExtractionTarget.ROBOTS_TXT, url="\\\\\\")
    with pytest.raises(ValueError):
        extractor.extract_from_robots("Allow: /x")


def test_expected_requests(body_ext):
    assert body_ext.expected_requests(3, 0) == 3
    assert body_ext.expected_requests(3, 2) == 6


def test_base_url(robots_ext, body_ext):
    assert robots_ext.base_url() == "http://localhost/"
    assert body_ext.base_url() == "http://localhost/"