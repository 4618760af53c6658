# pyright: reportAttributeAccessIssue=false, reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownParameterType=false, reportAny=false, reportUnannotatedClassAttribute=false, reportUnknownArgumentType=false, reportOptionalMemberAccess=false

import logging
import os
from typing import override

from PySide6.QtCore import QElapsedTimer, QEvent, QPoint, QRect, Qt, Slot
from PySide6.QtGui import QColor, QImage, QPainter, QPainterPath, QPixmap
from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QVBoxLayout, QWidget

from linernotes.core.models import (
    AlbumInfo,
    AppConfig,
    EnrichmentKind,
    EnrichmentResult,
    EnrichmentState,
    LyricsAnalysis,
    TrackSnapshot,
)


WINDOW_WIDTH = 380
WINDOW_HEIGHT = 560
TITLE_MAX_LEN = 40
ARTIST_MAX_LEN = 48
ART_IMAGE_CORNER_RADIUS = 10
SCREEN_EDGE_MARGIN = 8
FOCUS_LOSS_GRACE_MS = 300

TEXT_NOTHING_PLAYING = "Nothing playing"
TEXT_LOADING = "Loading…"
TEXT_UNAVAILABLE = "Unavailable"
PILL_PLAYING = "Playing"
PILL_PAUSED = "Paused"

log = logging.getLogger(__name__)


def _truncate_text(text: str, max_length: int) -> str:
    """Truncates text with an ellipsis if it exceeds the max length."""
    return text[:max_length].rstrip() + "…" if len(text) > max_length else text


def placeholder_text(state: EnrichmentState) -> str:
    """Text shown in a section whose result carries no payload to render."""

    if state == EnrichmentState.LOADING:
        return TEXT_LOADING
    if state == EnrichmentState.UNAVAILABLE:
        return TEXT_UNAVAILABLE
    return ""


def popup_position(anchor: QRect, size: tuple[int, int], screen: QRect) -> QPoint:
    """
    Places the popup horizontally centred on the tray icon, below it, or above it
    when the tray sits at the bottom of the screen. Always kept inside `screen`.
    """

    width, height = size
    x = anchor.center().x() - width // 2
    y = anchor.bottom() + 1
    if y + height > screen.bottom():
        y = anchor.top() - height

    x = max(screen.left() + SCREEN_EDGE_MARGIN, min(x, screen.right() - width - SCREEN_EDGE_MARGIN))
    y = max(screen.top() + SCREEN_EDGE_MARGIN, min(y, screen.bottom() - height - SCREEN_EDGE_MARGIN))
    return QPoint(x, y)


class ArtLabel(QLabel):
    """A custom QLabel that paints its pixmap with rounded corners."""

    def __init__(self, *args, **kwargs):  # pyright: ignore[reportMissingParameterType]
        super().__init__(*args, **kwargs)
        self._pixmap: QPixmap | None = None
        self.radius = ART_IMAGE_CORNER_RADIUS

    @override
    def setPixmap(self, pixmap: QPixmap | None):  # pyright: ignore[reportIncompatibleMethodOverride]
        self._pixmap = pixmap
        self.update()

    @override
    def paintEvent(self, event):  # pyright: ignore[reportMissingParameterType, reportIncompatibleMethodOverride]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        path = QPainterPath()
        path.addRoundedRect(self.rect(), self.radius, self.radius)
        painter.setClipPath(path)
        if self._pixmap:
            painter.drawPixmap(self.rect(), self._pixmap)
        else:
            painter.fillRect(self.rect(), QColor(255, 255, 255, 20))


class PopupWindow(QWidget):
    """
    The tray popup. It renders the controller's now-playing state: the track
    header with a Playing/Paused pill, the artwork, and the album and lyrics
    sections, each of which can be idle, loading, ready or unavailable.
    """

    def __init__(self, config: AppConfig):
        super().__init__()
        self._config = config
        self._art_image: QImage | None = None
        self._focus_lost_timer = QElapsedTimer()

        self._art_label: ArtLabel
        self._title_label: QLabel
        self._artist_label: QLabel
        self._album_label: QLabel
        self._status_pill: QLabel
        self._album_meta_label: QLabel
        self._album_context_label: QLabel
        self._album_fact_label: QLabel
        self._lyrics_label: QLabel

        self._setup_window_properties()
        self._create_widgets()
        self._layout_widgets()
        self.set_track(None)

    def _setup_window_properties(self):
        """Sets the window flags, attributes, and size."""

        self.setWindowTitle("linernotes")
        self.setWindowFlags(Qt.WindowType.Tool | Qt.WindowType.FramelessWindowHint | Qt.WindowType.WindowStaysOnTopHint)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self.setFixedSize(WINDOW_WIDTH, WINDOW_HEIGHT)

        css_path = os.path.join(self._config.app_directory, "assets", "style.qss")
        if os.path.exists(css_path):
            with open(css_path, "r") as f:
                self.setStyleSheet(f.read())
        else:
            log.warning(f"Stylesheet not found at {css_path}")

    def _create_widgets(self):
        """Initializes all the child widgets for the popup."""

        self._art_label = ArtLabel()
        self._art_label.setFixedSize(self._config.ui.art_size, self._config.ui.art_size)

        self._title_label = QLabel()
        self._title_label.setObjectName("title")

        self._artist_label = QLabel()
        self._artist_label.setObjectName("artist")

        self._album_label = QLabel()
        self._album_label.setObjectName("album")

        self._status_pill = QLabel()
        self._status_pill.setObjectName("pill")
        self._status_pill.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._album_meta_label = QLabel()
        self._album_meta_label.setObjectName("meta")

        self._album_context_label = self._make_body_label()
        self._album_fact_label = self._make_body_label()
        self._lyrics_label = self._make_body_label()

    @staticmethod
    def _make_body_label() -> QLabel:
        label = QLabel()
        label.setObjectName("body")
        label.setWordWrap(True)
        label.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        return label

    @staticmethod
    def _make_section_header(text: str) -> QLabel:
        label = QLabel(text)
        label.setObjectName("section")
        return label

    def _layout_widgets(self):
        """Arranges the created widgets using layouts."""

        container = QFrame(self)
        container.setObjectName("container")
        container.setFixedSize(self.size())

        main_layout = QVBoxLayout(container)
        main_layout.setContentsMargins(16, 16, 16, 16)
        main_layout.setSpacing(10)

        header_layout = QHBoxLayout()
        header_layout.setSpacing(12)
        header_layout.addWidget(self._art_label)

        text_layout = QVBoxLayout()
        text_layout.setSpacing(2)
        text_layout.addWidget(self._title_label)
        text_layout.addWidget(self._artist_label)
        text_layout.addWidget(self._album_label)
        text_layout.addStretch()

        pill_layout = QHBoxLayout()
        pill_layout.addWidget(self._status_pill)
        pill_layout.addStretch()
        text_layout.addLayout(pill_layout)

        header_layout.addLayout(text_layout)
        main_layout.addLayout(header_layout)

        main_layout.addWidget(self._make_section_header("Album"))
        main_layout.addWidget(self._album_meta_label)
        main_layout.addWidget(self._album_context_label)
        main_layout.addWidget(self._album_fact_label)

        main_layout.addWidget(self._make_section_header("Lyrics"))
        main_layout.addWidget(self._lyrics_label)
        main_layout.addStretch()

    @Slot(object)  # pyright: ignore[reportArgumentType]
    def set_track(self, track: TrackSnapshot | None):
        """Renders the track header. Enrichment sections are driven separately."""

        if track is None:
            self._title_label.setText(TEXT_NOTHING_PLAYING)
            self._artist_label.setText("")
            self._album_label.setText("")
            self._status_pill.hide()
            return

        self._title_label.setText(_truncate_text(track.title, TITLE_MAX_LEN))
        self._artist_label.setText(_truncate_text(track.artist, ARTIST_MAX_LEN))
        self._album_label.setText(_truncate_text(track.album, ARTIST_MAX_LEN))
        self._status_pill.setText(PILL_PLAYING if track.is_playing else PILL_PAUSED)
        self._status_pill.setProperty("playing", track.is_playing)
        self._status_pill.style().unpolish(self._status_pill)
        self._status_pill.style().polish(self._status_pill)
        self._status_pill.show()

    @Slot(object, object)  # pyright: ignore[reportArgumentType]
    def set_enrichment(self, kind: EnrichmentKind, result: EnrichmentResult):
        if kind == EnrichmentKind.ARTWORK:
            self._render_artwork(result)
        elif kind == EnrichmentKind.ALBUM_INFO:
            self._render_album_info(result)
        else:
            self._render_lyrics_analysis(result)

    def _render_artwork(self, result: EnrichmentResult):
        image = result.payload if result.state == EnrichmentState.READY else None
        self._art_image = image if isinstance(image, QImage) else None
        self._update_art_pixmap()

    def _update_art_pixmap(self):
        if self._art_image is None:
            self._art_label.setPixmap(None)
            return

        size = self._config.ui.art_size
        scaled = self._art_image.scaled(
            size, size, Qt.AspectRatioMode.KeepAspectRatioByExpanding, Qt.TransformationMode.SmoothTransformation
        )
        self._art_label.setPixmap(QPixmap.fromImage(scaled))

    def _render_album_info(self, result: EnrichmentResult):
        info = result.payload
        if result.state != EnrichmentState.READY or not isinstance(info, AlbumInfo):
            self._album_meta_label.setText("")
            self._album_context_label.setText(placeholder_text(result.state))
            self._album_fact_label.setText("")
            return

        self._album_meta_label.setText(" · ".join(part for part in (info.release_year, info.genre) if part))
        self._album_context_label.setText(info.context)
        self._album_fact_label.setText(f"✦ {info.notable_fact}" if info.notable_fact else "")

    def _render_lyrics_analysis(self, result: EnrichmentResult):
        analysis = result.payload
        if result.state != EnrichmentState.READY or not isinstance(analysis, LyricsAnalysis):
            self._lyrics_label.setText(placeholder_text(result.state))
            return

        self._lyrics_label.setText(analysis.interpretation)

    def show_at(self, anchor: QRect):
        """Shows the popup next to `anchor` (the tray icon geometry) and focuses it."""

        screen = self.screen()
        if screen and anchor.isValid():
            self.move(popup_position(anchor, (self.width(), self.height()), screen.availableGeometry()))

        self.show()
        self.raise_()
        self.activateWindow()

    @override
    def changeEvent(self, event: QEvent):
        """Hides the popup once it loses focus, like a native menu bar popover."""

        super().changeEvent(event)
        if (
            event.type() == QEvent.Type.ActivationChange
            and self._config.ui.hide_on_focus_loss
            and self.isVisible()
            and not self.isActiveWindow()
        ):
            self.hide_for_focus_loss()

    def hide_for_focus_loss(self):
        self._focus_lost_timer.start()
        self.hide()

    def was_just_hidden_by_focus_loss(self) -> bool:
        """
        True right after a focus-loss hide. Clicking the tray icon takes focus
        from the popup before the click itself arrives, so the tray uses this
        to treat that click as "close" instead of reopening.
        """

        return self._focus_lost_timer.isValid() and not self._focus_lost_timer.hasExpired(FOCUS_LOSS_GRACE_MS)

    @override
    def paintEvent(self, event):  # pyright: ignore[reportMissingParameterType]
        """Overrides QWidget.paintEvent to ensure a transparent background."""

        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(0, 0, 0, 0))

    def on_config_changed(self, new_config: AppConfig):
        """Applies new configuration settings to the popup (hot-reload)."""

        log.info("Applying new UI configuration...")
        self._config = new_config
        self._art_label.setFixedSize(new_config.ui.art_size, new_config.ui.art_size)
        self._update_art_pixmap()
