# pyright: reportUnknownMemberType=false, reportAttributeAccessIssue=false, reportUnknownArgumentType=false, reportUnknownParameterType=false, reportMissingParameterType=false

import logging
from logging.handlers import RotatingFileHandler
import os
import signal
import sys
from typing import final

from PySide6.QtCore import QObject
from PySide6.QtWidgets import QApplication
from qt_material import apply_stylesheet

from linernotes.core.config import APP_NAME, load_config, save_config, user_data_dir
from linernotes.core.controller import NowPlayingController
from linernotes.core.dispatcher import EnrichmentFetch
from linernotes.core.models import AppConfig, EnrichmentKind, TrackSnapshot
from linernotes.core.tasks import ThreadPoolRunner
from linernotes.core.track_source import TrackSource, create_track_source
from linernotes.providers.album_info import fetch_album_info
from linernotes.providers.artwork import fetch_artwork
from linernotes.providers.lyrics_analysis import fetch_lyrics_analysis
from linernotes.ui.popup_window import PopupWindow
from linernotes.ui.setup_window import SetupWindow
from linernotes.ui.tray_icon import TrayIcon


APP_DISPLAY_NAME = "Liner Notes"
TRAY_ICON_PATH = os.path.join("assets", "tray-icon.svg")
SHUTDOWN_WAIT_MS = 2000

log = logging.getLogger(__name__)


def build_fetchers(config: AppConfig) -> dict[EnrichmentKind, EnrichmentFetch]:
    """
    Adapts each provider to the snapshot that triggered the lookup. API keys are
    read at call time so saved settings apply to the next track.
    """

    def artwork(track: TrackSnapshot):
        return fetch_artwork(track.title, track.artist)

    def album_info(track: TrackSnapshot):
        return fetch_album_info(track.album, track.artist, config.api)

    def lyrics_analysis(track: TrackSnapshot):
        return fetch_lyrics_analysis(track.title, track.artist, config.api)

    return {
        EnrichmentKind.ARTWORK: artwork,
        EnrichmentKind.ALBUM_INFO: album_info,
        EnrichmentKind.LYRICS_ANALYSIS: lyrics_analysis,
    }


def _track_source_key(config: AppConfig) -> tuple[str, str]:
    return config.player.source, config.player.spotify_client_id


@final
class LinerNotesApp(QObject):
    """
    Manages the lifecycle of the entire Liner Notes application and its components.
    """

    def __init__(self):
        super().__init__()
        log.info("Starting initialization.")
        self.config = self._load_initial_config()
        log.info("Initial configuration has been loaded.")

        self.setup_window = SetupWindow()
        log.info("SetupWindow is ready if needed.")

        self.track_source: TrackSource = create_track_source(self.config)
        self._track_source_key = _track_source_key(self.config)

        self.runner = ThreadPoolRunner()
        self.controller = NowPlayingController(
            self._query_current_track,
            build_fetchers(self.config),
            self.runner,
            self.config.player.poll_interval_ms,
        )
        log.info("NowPlayingController has been created.")

        self.popup_window = PopupWindow(self.config)
        log.info("PopupWindow has been created with the initial configuration.")

        icon_path = os.path.join(self.config.app_directory, TRAY_ICON_PATH)
        if not os.path.exists(icon_path):
            log.warning(f"Icon not found at {icon_path}, tray may not have an icon.")

        self.tray_icon = TrayIcon(APP_DISPLAY_NAME, icon_path, self.popup_window, self.config)
        log.info("TrayIcon has been initialized.")

        self._connect_signals()
        self._setup_shutdown_hooks()

    def _load_initial_config(self) -> AppConfig:
        try:
            log.info("Loading configuration...")

            config = load_config()
            log.info("Configuration loaded.")

            return config
        except Exception:
            log.exception("Fatal error: Failed to load configuration.")
            sys.exit(1)

    def _query_current_track(self) -> TrackSnapshot | None:
        return self.track_source.query_current_track()

    def _launch_setup_wizard(self):
        """Opens the setup dialog."""

        _ = self.setup_window.keys_saved.connect(self._on_setup_completed)
        _ = self.setup_window.finished.connect(lambda _result: self._start_normal_operation())
        log.info("SetupWizard hooks are connected.")

        self.setup_window.show()

    def _on_setup_completed(self, genius_token: str, anthropic_key: str):
        """Called when the user saves both API keys."""

        log.info("Setup completed. Saving configuration...")

        self.config.api.genius_token = genius_token
        self.config.api.anthropic_key = anthropic_key
        save_config(self.config)

    def _start_normal_operation(self):
        """Proceeds with normal startup flow."""

        if not self.config.has_keys():
            log.info("Running without API keys: album info and lyrics analysis are unavailable.")

        log.info("Starting track polling...")
        self.controller.start()

    def _connect_signals(self):
        """Connects all the application's internal signals and slots."""

        _ = self.tray_icon.configure_window.config_saved.connect(self._on_config_changed)
        log.info("ConfigureWindow signal '_on_config_changed' has been connected.")

        _ = self.controller.track_changed.connect(self.popup_window.set_track)
        log.info("NowPlayingController signal 'set_track' has been connected.")

        _ = self.controller.enrichment_changed.connect(self.popup_window.set_enrichment)
        log.info("NowPlayingController signal 'set_enrichment' has been connected.")

        log.info("Application signals connected.")

    def _setup_shutdown_hooks(self):
        """Sets up handlers for graceful application shutdown."""

        QApplication.instance().aboutToQuit.connect(self._on_about_to_quit)  # pyright: ignore[reportUnusedCallResult, reportOptionalMemberAccess]
        _ = signal.signal(signal.SIGINT, self._on_os_signal)
        _ = signal.signal(signal.SIGTERM, self._on_os_signal)

        log.info("Shutdown hooks registered.")

    def run(self):
        """Starts the application's main processes."""

        if not self.config.has_keys():
            log.info("API keys missing. Launching Setup Wizard.")
            self._launch_setup_wizard()
        else:
            self._start_normal_operation()

    def _on_config_changed(self, new_config: AppConfig):
        """Handles the 'hot reload' of the configuration."""

        log.info("Configuration changed, applying new settings...")
        self.config = new_config
        save_config(self.config)

        # The configure window edits the shared config in place, so compare
        # against the settings the current source was built from.
        source_key = _track_source_key(self.config)
        if source_key != self._track_source_key:
            log.info(f"Track source settings changed, switching to '{self.config.player.source}'.")
            self.track_source = create_track_source(self.config)
            self._track_source_key = source_key

        self.popup_window.on_config_changed(self.config)
        self.controller.on_config_changed(self.config)

        log.info("Settings applied and saved successfully.")

    def _on_about_to_quit(self):
        """Cleans up all resources before the application exits."""

        log.info("Shutdown sequence initiated...")
        self.controller.stop()

        if not self.runner.wait_for_done(SHUTDOWN_WAIT_MS):
            log.warning("Some lookups were still running at shutdown.")

        log.info("All components stopped. Shutdown complete.")
        log.info(f"--- Stopped {APP_DISPLAY_NAME} ---")

    def _on_os_signal(self, *_args):
        """Handles OS signals like Ctrl+C for a graceful exit."""

        log.info("OS shutdown signal received, quitting application.")
        QApplication.instance().quit()  # pyright: ignore[reportOptionalMemberAccess]


def setup_logging():
    """Configures logging to output to both console and log file."""

    log_formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    try:
        data_dir = user_data_dir()
        os.makedirs(data_dir, exist_ok=True)
        log_file_path = os.path.join(data_dir, "linernotes.log")

        # Create a rotating file handler. 1MB per file, keeping 5 old files
        file_handler = RotatingFileHandler(log_file_path, maxBytes=1 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)
    except Exception as e:
        root_logger.error(f"Failed to set up file logging: {e}")


def main() -> None:
    setup_logging()
    log.info(f"--- Starting {APP_DISPLAY_NAME} ---")

    app = QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(False)
    app.setApplicationName(APP_NAME)
    app.setApplicationDisplayName(APP_DISPLAY_NAME)

    extra = {"density_scale": "-1"}
    apply_stylesheet(app, "dark_cyan.xml", invert_secondary=False, extra=extra)

    liner_notes_app = LinerNotesApp()
    liner_notes_app.run()

    log.info("Entering Qt main event loop...")
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
