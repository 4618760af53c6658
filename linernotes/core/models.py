from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass
class ApiConfig:
    genius_token: str
    anthropic_key: str


@dataclass
class PlayerConfig:
    source: str  # music, spotify
    poll_interval_ms: int
    spotify_client_id: str
    spotify_redirect_uri: str


@dataclass
class UIConfig:
    art_size: int
    hide_on_focus_loss: bool


@dataclass
class AppConfig:
    api: ApiConfig
    player: PlayerConfig
    ui: UIConfig
    app_directory: str
    data_directory: str
    config_path: str

    def has_keys(self) -> bool:
        return bool(self.api.genius_token) and bool(self.api.anthropic_key)


@dataclass(frozen=True)
class TrackSnapshot:
    title: str
    artist: str
    album: str
    is_playing: bool


@dataclass(frozen=True)
class TrackIdentity:
    title: str
    artist: str


class EnrichmentKind(Enum):
    ARTWORK = "artwork"
    ALBUM_INFO = "album_info"
    LYRICS_ANALYSIS = "lyrics_analysis"


class EnrichmentState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class EnrichmentResult:
    generation: int
    payload: Any
    state: EnrichmentState


@dataclass(frozen=True)
class AlbumInfo:
    release_year: str
    genre: str
    context: str
    notable_fact: str


@dataclass(frozen=True)
class LyricsAnalysis:
    interpretation: str
