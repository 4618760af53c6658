import logging
import threading
from typing import Any

import requests


CONNECT_TIMEOUT_S = 5
READ_TIMEOUT_S = 20
USER_AGENT = "LinerNotes/1.0"
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

log = logging.getLogger(__name__)

_local = threading.local()


class ProviderError(Exception):
    """An enrichment lookup failed (network, HTTP status or unexpected payload)."""


def session() -> requests.Session:
    """Returns the calling worker thread's session; requests sessions are not thread-safe."""

    s: requests.Session | None = getattr(_local, "session", None)
    if s is None:
        s = requests.Session()
        s.headers.update({"User-Agent": USER_AGENT})
        _local.session = s
    return s


def request(method: str, url: str, **kwargs: Any) -> requests.Response:
    kwargs.setdefault("timeout", (CONNECT_TIMEOUT_S, READ_TIMEOUT_S))
    try:
        r = session().request(method, url, **kwargs)
        r.raise_for_status()
    except requests.RequestException as e:
        raise ProviderError(f"{method} {url} failed: {e}") from e
    return r


def get_json(url: str, **kwargs: Any) -> Any:
    r = request("GET", url, **kwargs)
    try:
        return r.json()
    except ValueError as e:
        raise ProviderError(f"GET {url} returned invalid JSON: {e}") from e
