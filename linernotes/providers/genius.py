# pyright: reportAny=false

import logging
from typing import Any

from bs4 import BeautifulSoup

from linernotes.providers.http import BROWSER_USER_AGENT, ProviderError, get_json, request


GENIUS_API_URL = "https://api.genius.com"
LYRICS_CONTAINER_ATTR = "data-lyrics-container"
LYRICS_CONTAINER_SELECTOR = f'div[{LYRICS_CONTAINER_ATTR}="true"]'
MAX_LYRICS_CHARS = 3000

log = logging.getLogger(__name__)


def genius_get(path: str, token: str, **params: Any) -> dict:
    return get_json(f"{GENIUS_API_URL}{path}", params=params or None, headers={"Authorization": f"Bearer {token}"})


def search_first_hit(token: str, query: str) -> dict | None:
    """Returns the `result` of the first search hit, or None."""

    search = genius_get("/search", token, q=query)
    hits = (search.get("response") or {}).get("hits") or []
    if not hits:
        return None
    return hits[0].get("result")


def album_description(token: str, artist: str, album: str) -> str:
    """
    Fetches an album description via song search, then song, then album.
    Returns an empty string when any step has nothing to offer.
    """

    try:
        hit = search_first_hit(token, f"{artist} {album}")
        if not hit or hit.get("id") is None:
            log.info(f"[genius] no hits for «{album}» by {artist}")
            return ""

        song = genius_get(f"/songs/{hit['id']}", token)
        album_ref = ((song.get("response") or {}).get("song") or {}).get("album") or {}
        if album_ref.get("id") is None:
            return ""

        album_json = genius_get(f"/albums/{album_ref['id']}", token)
    except ProviderError as e:
        log.warning(f"[genius] album lookup failed for «{album}» by {artist}: {e}")
        return ""

    description = ((album_json.get("response") or {}).get("album") or {}).get("description_preview") or ""
    return "" if description == "?" else description


def song_url(token: str, title: str, artist: str) -> str | None:
    hit = search_first_hit(token, f"{artist} {title}")
    if not hit or not hit.get("url"):
        log.info(f"[genius] no hits for «{title}» by {artist}")
        return None
    return hit["url"]


def extract_lyrics(html: str) -> str:
    """Collects the text of every lyrics container block on a Genius song page."""

    soup = BeautifulSoup(html, "html.parser")
    sections: list[str] = []
    for block in soup.select(LYRICS_CONTAINER_SELECTOR):
        # Nested containers are already covered by their outermost one.
        if block.find_parent(attrs={LYRICS_CONTAINER_ATTR: "true"}) is not None:
            continue

        for br in block.find_all("br"):
            _ = br.replace_with("\n")

        text = block.get_text().strip()
        if text:
            sections.append(text)

    return "\n".join(sections)


def fetch_lyrics(url: str) -> str | None:
    """Scrapes plain-text lyrics from a song page, truncated to MAX_LYRICS_CHARS."""

    try:
        html = request("GET", url, headers={"User-Agent": BROWSER_USER_AGENT}).text
    except ProviderError as e:
        log.warning(f"[genius] could not load lyrics page: {e}")
        return None

    lyrics = extract_lyrics(html)
    if not lyrics.strip():
        return None
    return lyrics[:MAX_LYRICS_CHARS]
