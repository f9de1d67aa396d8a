import pytest

from models.responses import RepoRef
from services.errors import (
    InvalidInput,
    InvalidURL,
    RateLimited,
    RepoAnalyzerError,
    RepoNotFound,
    UpstreamError,
)
from services.url_parser import parse_github_url


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/a/b",
        "https://github.com/a/b/",
        "https://github.com/a/b.git",
        "https://github.com/a/b.git/",
        "http://www.github.com/a/b",
        "github.com/a/b",
        "  https://github.com/a/b  ",
        "https://github.com/a/b/tree/main/src",
        "https://github.com/a/b?tab=readme-ov-file",
    ],
)
def test_parse_variants(url):
    assert parse_github_url(url) == RepoRef(owner="a", name="b")


def test_parse_keeps_dots_and_dashes_in_name():
    ref = parse_github_url("https://github.com/vercel/next.js")
    assert ref.owner == "vercel"
    assert ref.name == "next.js"
    assert ref.full_name == "vercel/next.js"


@pytest.mark.parametrize(
    "url",
    [
        "",
        "not a url",
        "https://gitlab.com/a/b",
        "https://github.com/only-owner",
        "https://github.com/",
    ],
)
def test_parse_rejects(url):
    with pytest.raises(InvalidURL):
        parse_github_url(url)


def test_invalid_url_maps_to_400():
    with pytest.raises(InvalidInput) as exc_info:
        parse_github_url("https://example.com/a/b")
    assert exc_info.value.status_code == 400
    assert "github.com/owner/repo" in exc_info.value.message


@pytest.mark.parametrize(
    "error_type, status",
    [(InvalidURL, 400), (RepoNotFound, 404), (RateLimited, 429), (UpstreamError, 500)],
)
def test_status_comes_from_error_type(error_type, status):
    error = error_type("boom")
    assert isinstance(error, RepoAnalyzerError)
    assert error.status_code == status
    assert error.message == "boom"


def test_repo_ref_is_immutable():
    ref = parse_github_url("https://github.com/a/b")
    with pytest.raises(Exception):
        ref.owner = "c"
