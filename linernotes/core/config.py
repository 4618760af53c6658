# pyright: reportAny=false, reportUnknownMemberType=false

import logging
import os
import sys
from typing import Any, Callable

import toml

from linernotes.core.models import ApiConfig, AppConfig, PlayerConfig, UIConfig


APP_NAME = "LinerNotes"
CONFIG_FILE_NAME = "config.toml"
SOURCE_APPLE_MUSIC = "music"
SOURCE_SPOTIFY = "spotify"
TRACK_SOURCES = (SOURCE_APPLE_MUSIC, SOURCE_SPOTIFY)
DEFAULT_SPOTIFY_REDIRECT_URI = "http://127.0.0.1:8080/callback"
DEFAULT_POLL_INTERVAL = 3000
MIN_POLL_INTERVAL = 500
DEFAULT_ART_SIZE = 120

log = logging.getLogger(__name__)


def user_data_dir() -> str:
    home = os.path.expanduser("~")
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA", os.path.join(home, "AppData", "Roaming"))
    else:
        base = os.environ.get("XDG_CONFIG_HOME", os.path.join(home, ".config"))
    return os.path.join(base, APP_NAME)


def default_track_source() -> str:
    return SOURCE_APPLE_MUSIC if sys.platform == "darwin" else SOURCE_SPOTIFY


def get_default_config() -> AppConfig:
    app_directory = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
    data_directory = user_data_dir()

    return AppConfig(
        api=ApiConfig(genius_token="", anthropic_key=""),
        player=PlayerConfig(
            source=default_track_source(),
            poll_interval_ms=DEFAULT_POLL_INTERVAL,
            spotify_client_id="",
            spotify_redirect_uri=DEFAULT_SPOTIFY_REDIRECT_URI,
        ),
        ui=UIConfig(art_size=DEFAULT_ART_SIZE, hide_on_focus_loss=True),
        app_directory=app_directory,
        data_directory=data_directory,
        config_path=os.path.join(data_directory, CONFIG_FILE_NAME),
    )


def save_config(config: AppConfig):
    config_to_save = {
        "api": {
            "genius_token": config.api.genius_token,
            "anthropic_key": config.api.anthropic_key,
        },
        "player": {
            "source": config.player.source,
            "poll_interval_ms": config.player.poll_interval_ms,
            "spotify_client_id": config.player.spotify_client_id,
            "spotify_redirect_uri": config.player.spotify_redirect_uri,
        },
        "ui": {
            "art_size": config.ui.art_size,
            "hide_on_focus_loss": config.ui.hide_on_focus_loss,
        },
    }

    try:
        os.makedirs(os.path.dirname(config.config_path), exist_ok=True)
        with open(config.config_path, "w") as f:
            _ = toml.dump(config_to_save, f)
    except (IOError, OSError) as e:
        log.error(f"Failed to save configuration to {config.config_path}: {e}")


def _strict_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"not a boolean: {value!r}")


def _read[T](section: dict[str, object], key: str, cast: Callable[[Any], T], default: T) -> T:
    if key not in section:
        return default
    try:
        return cast(section[key])
    except (ValueError, TypeError):
        log.warning(f"Invalid value for '{key}' in config, using default '{default}'.")
        return default


def load_config() -> AppConfig:
    """
    Loads configuration from the user's file, safely falling back to defaults
    for any missing or invalid values. Creates the file if it doesn't exist.
    """

    config = get_default_config()

    if not os.path.exists(config.config_path):
        save_config(config)
        return config

    try:
        with open(config.config_path, "r") as f:
            user_config = toml.load(f)
    except toml.TomlDecodeError as e:
        log.warning(f"Failed to decode config file, using defaults. Error: {e}")
        return config

    api_section = user_config.get("api", {})
    if isinstance(api_section, dict):
        config.api.genius_token = _read(api_section, "genius_token", str, config.api.genius_token).strip()
        config.api.anthropic_key = _read(api_section, "anthropic_key", str, config.api.anthropic_key).strip()

    player_section = user_config.get("player", {})
    if isinstance(player_section, dict):
        source = _read(player_section, "source", str, config.player.source)
        if source in TRACK_SOURCES:
            config.player.source = source
        else:
            log.warning(f"Unknown track source '{source}', using '{config.player.source}'.")

        interval = _read(player_section, "poll_interval_ms", int, config.player.poll_interval_ms)
        config.player.poll_interval_ms = max(MIN_POLL_INTERVAL, interval)
        config.player.spotify_client_id = _read(player_section, "spotify_client_id", str, config.player.spotify_client_id)
        config.player.spotify_redirect_uri = _read(player_section, "spotify_redirect_uri", str, config.player.spotify_redirect_uri)

    ui_section = user_config.get("ui", {})
    if isinstance(ui_section, dict):
        config.ui.art_size = _read(ui_section, "art_size", int, config.ui.art_size)
        config.ui.hide_on_focus_loss = _read(ui_section, "hide_on_focus_loss", _strict_bool, config.ui.hide_on_focus_loss)

    return config
