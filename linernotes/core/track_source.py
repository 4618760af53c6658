# pyright: reportAny=false, reportMissingTypeStubs=false, reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false

import logging
import os
import subprocess
from typing import Protocol, final

import spotipy
from spotipy.oauth2 import SpotifyPKCE

from linernotes.core.config import SOURCE_SPOTIFY
from linernotes.core.models import AppConfig, TrackSnapshot


SPOTIFY_SCOPE = "user-read-playback-state user-read-currently-playing"
SPOTIFY_CACHE_FILENAME = "spotify_token_cache"
OSASCRIPT_TIMEOUT_S = 10
FIELD_SEPARATOR = "|||"

APPLE_MUSIC_SCRIPT = f"""
if application "Music" is running then
    tell application "Music"
        if player state is not stopped then
            try
                set t to name of current track
                set ar to artist of current track
                set al to album of current track
                if player state is playing then
                    set s to "playing"
                else
                    set s to "paused"
                end if
                return t & "{FIELD_SEPARATOR}" & ar & "{FIELD_SEPARATOR}" & al & "{FIELD_SEPARATOR}" & s
            end try
        end if
    end tell
end if
return ""
"""

log = logging.getLogger(__name__)


class TrackSourceError(Exception):
    """The media player could not be queried."""


class TrackSource(Protocol):
    def query_current_track(self) -> TrackSnapshot | None: ...


def parse_osascript_output(raw: str) -> TrackSnapshot | None:
    raw = raw.strip()
    if not raw:
        return None

    parts = raw.split(FIELD_SEPARATOR, 3)
    if len(parts) != 4:
        log.warning(f"Unexpected player output: {raw!r}")
        return None

    title, artist, album, state = parts
    return TrackSnapshot(title=title, artist=artist, album=album, is_playing=state.strip() == "playing")


@final
class AppleMusicTrackSource:
    """Reads the Music app's current track through AppleScript."""

    def query_current_track(self) -> TrackSnapshot | None:
        try:
            completed = subprocess.run(
                ["osascript", "-e", APPLE_MUSIC_SCRIPT],
                capture_output=True,
                text=True,
                timeout=OSASCRIPT_TIMEOUT_S,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise TrackSourceError(f"osascript failed: {e}") from e

        if completed.returncode != 0:
            raise TrackSourceError(f"osascript exited with {completed.returncode}: {completed.stderr.strip()}")

        return parse_osascript_output(completed.stdout)


@final
class SpotifyTrackSource:
    """
    Reads the current playback state from the Spotify Web API.
    Reports nothing playing until a Client ID has been configured.
    """

    def __init__(self, config: AppConfig):
        self._config = config
        self._sp: spotipy.Spotify | None = None
        self.cache_path = os.path.join(config.data_directory, SPOTIFY_CACHE_FILENAME)

        if not config.player.spotify_client_id:
            log.info("No Spotify Client ID found in config. Spotify source stays idle.")
        else:
            self._initialize_client()

    def is_configured(self) -> bool:
        return self._sp is not None

    def _initialize_client(self):
        try:
            os.makedirs(self._config.data_directory, exist_ok=True)
            auth_manager = SpotifyPKCE(
                client_id=self._config.player.spotify_client_id,
                redirect_uri=self._config.player.spotify_redirect_uri,
                scope=SPOTIFY_SCOPE,
                cache_path=self.cache_path,
                open_browser=True,
            )
            self._sp = spotipy.Spotify(auth_manager=auth_manager)
            log.info("Spotify client initialized successfully.")
        except Exception as e:
            log.error(f"Failed to initialize Spotify client: {e}")

    def query_current_track(self) -> TrackSnapshot | None:
        if not self._sp:
            return None

        try:
            data = self._sp.current_user_playing_track()
        except spotipy.SpotifyException as e:
            raise TrackSourceError(f"Spotify API error: {e}") from e

        if not data or not data.get("item"):
            return None

        item = data["item"]
        album = item.get("album") or {}
        return TrackSnapshot(
            title=item.get("name", ""),
            artist=", ".join(a["name"] for a in item.get("artists", []) if a and a.get("name")),
            album=album.get("name", ""),
            is_playing=bool(data.get("is_playing", False)),
        )


def create_track_source(config: AppConfig) -> TrackSource:
    if config.player.source == SOURCE_SPOTIFY:
        log.info("Using Spotify as track source.")
        return SpotifyTrackSource(config)

    log.info("Using Apple Music as track source.")
    return AppleMusicTrackSource()
