# pyright: reportAny=false

import logging

from linernotes.providers.http import ProviderError, get_json


ITUNES_SEARCH_URL = "https://itunes.apple.com/search"

log = logging.getLogger(__name__)


def search_song(title: str, artist: str) -> dict | None:
    """Returns the best iTunes song hit for a track, or None."""

    json = get_json(
        ITUNES_SEARCH_URL,
        params={"term": f"{artist} {title}", "media": "music", "entity": "song", "limit": 1},
    )
    results = json.get("results") or []
    return results[0] if results else None


def album_metadata(album: str, artist: str) -> tuple[str, str]:
    """
    Returns (release_year, genre) for an album. Empty strings when iTunes has no
    matching album or cannot be reached; this metadata is a nice-to-have.
    """

    try:
        json = get_json(
            ITUNES_SEARCH_URL,
            params={"term": f"{artist} {album}", "media": "music", "entity": "album", "limit": 10},
        )
    except ProviderError as e:
        log.warning(f"[itunes] request failed for «{album}» by {artist}: {e}")
        return "", ""

    album_lc, artist_lc = album.lower(), artist.lower()
    hit = next(
        (
            r
            for r in json.get("results") or []
            if album_lc in str(r.get("collectionName", "")).lower() and artist_lc in str(r.get("artistName", "")).lower()
        ),
        None,
    )
    if not hit:
        return "", ""

    return str(hit.get("releaseDate", ""))[:4], str(hit.get("primaryGenreName", ""))
