import logging

from linernotes.core.models import AlbumInfo, ApiConfig
from linernotes.providers import claude, genius, itunes


ALBUM_MAX_TOKENS = 400

log = logging.getLogger(__name__)


def build_album_prompt(album: str, artist: str, year: str, genre: str, description: str) -> str:
    meta = f" (sorti en {year}, genre : {genre})" if year else ""

    if description:
        base = f'Pour l\'album "{album}" de {artist}{meta}, basé sur cette description :\n{description}\nRéponds en français.'
    else:
        base = f'En te basant sur tes connaissances, pour l\'album "{album}" de {artist}{meta}, réponds en français.'

    return (
        f"{base}\n\nRéponds UNIQUEMENT avec ce JSON valide (sans markdown) :"
        '{"context":"2-3 phrases sur le contexte et la genèse de l\'album",'
        '"notable_fact":"Un fait marquant ou anecdote sur cet album"}'
    )


def fetch_album_info(album: str, artist: str, api: ApiConfig) -> AlbumInfo | None:
    if not (api.genius_token and api.anthropic_key):
        log.info("[album_info] API keys missing, skipping.")
        return None

    release_year, genre = itunes.album_metadata(album, artist)
    description = genius.album_description(api.genius_token, artist, album)
    prompt = build_album_prompt(album, artist, release_year, genre, description)

    extracted = claude.ask_json(api.anthropic_key, prompt, ALBUM_MAX_TOKENS, "album")
    return AlbumInfo(
        release_year=release_year,
        genre=genre,
        context=str(extracted.get("context", "")),
        notable_fact=str(extracted.get("notable_fact", "")),
    )
