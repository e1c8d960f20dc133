from urllib.parse import urlencode

from .exceptions import InvalidInputError

LOGIN_URL = "https://kite.zerodha.com/connect/login"
KITE_CONNECT_VERSION = "3"


def build_login_url(api_key: str, redirect_params: str = "", *, login_url: str = LOGIN_URL) -> str:
    """
    Build the Kite login URL the user opens to obtain a request token.

    redirect_params is passed through verbatim and handed back by Kite on the
    redirect after login. Query keys are sorted so the output is stable.
    """
    if not api_key or not api_key.strip():
        raise InvalidInputError("api_key is required")

    query = {
        "v": KITE_CONNECT_VERSION,
        "api_key": api_key,
    }
    if redirect_params:
        query["redirect_params"] = redirect_params

    return f"{login_url}?{urlencode(sorted(query.items()))}"
