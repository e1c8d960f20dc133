from urllib.parse import parse_qs, urlsplit

import pytest

from src.kiteauth.exceptions import InvalidInputError
from src.kiteauth.login_url import build_login_url


def test_build_login_url_without_redirect_params() -> None:
    url = build_login_url("demo_key")

    parts = urlsplit(url)
    assert parts.scheme == "https"
    assert parts.netloc == "kite.zerodha.com"
    assert parts.path == "/connect/login"
    assert parse_qs(parts.query) == {"v": ["3"], "api_key": ["demo_key"]}


def test_build_login_url_with_redirect_params() -> None:
    redirect_params = "some=X&more=Y z"
    url = build_login_url("demo_key", redirect_params)

    query = parse_qs(urlsplit(url).query)
    assert query == {
        "v": ["3"],
        "api_key": ["demo_key"],
        "redirect_params": [redirect_params],
    }


def test_build_login_url_is_stable() -> None:
    assert build_login_url("demo_key", "a=1") == build_login_url("demo_key", "a=1")
    assert build_login_url("demo_key") == "https://kite.zerodha.com/connect/login?api_key=demo_key&v=3"


def test_build_login_url_custom_login_url() -> None:
    url = build_login_url("demo_key", login_url="https://login.example.com/connect/login")
    assert url.startswith("https://login.example.com/connect/login?")


@pytest.mark.parametrize("api_key", ["", "   ", "\t\n"])
def test_build_login_url_requires_api_key(api_key: str) -> None:
    with pytest.raises(InvalidInputError):
        build_login_url(api_key, "")
