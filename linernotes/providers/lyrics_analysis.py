import logging

from linernotes.core.models import ApiConfig, LyricsAnalysis
from linernotes.providers import claude, genius


LYRICS_MAX_TOKENS = 450

log = logging.getLogger(__name__)


def build_lyrics_prompt(title: str, artist: str, lyrics: str | None) -> str:
    intro = f'Tu es un expert en musique et en analyse de textes. Pour le morceau "{title}" de {artist}'

    if lyrics:
        body = f"{intro}, voici les paroles :\n\n{lyrics}\n\nBasé sur ces paroles, explique en 3-4 phrases en français"
    else:
        body = f"{intro}, explique en 3-4 phrases en français (en te basant sur tes connaissances)"

    return (
        f"{body} : le thème principal, l'émotion portée, et ce que l'artiste "
        "cherche à exprimer. Sois précis et va au-delà du simple résumé.\n\n"
        'Réponds UNIQUEMENT avec ce JSON (sans markdown) : {"interpretation": "..."}'
    )


def fetch_lyrics_analysis(title: str, artist: str, api: ApiConfig) -> LyricsAnalysis | None:
    if not (api.genius_token and api.anthropic_key):
        log.info("[lyrics] API keys missing, skipping.")
        return None

    url = genius.song_url(api.genius_token, title, artist)
    if not url:
        return None

    lyrics = genius.fetch_lyrics(url)
    prompt = build_lyrics_prompt(title, artist, lyrics)

    extracted = claude.ask_json(api.anthropic_key, prompt, LYRICS_MAX_TOKENS, "lyrics")
    return LyricsAnalysis(interpretation=str(extracted.get("interpretation", "")))
