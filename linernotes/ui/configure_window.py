import logging
from typing import final, override

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QShowEvent
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSizePolicy,
    QSpacerItem,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from linernotes.core.config import MIN_POLL_INTERVAL, TRACK_SOURCES, get_default_config
from linernotes.core.models import AppConfig


WINDOW_TITLE = "Configure Liner Notes"
WINDOW_WIDTH, WINDOW_HEIGHT = 440, 440

LABEL_GENIUS_TOKEN = "Genius Token:"
LABEL_ANTHROPIC_KEY = "Anthropic Key:"
LABEL_SOURCE = "Player:"
LABEL_CLIENT_ID = "Spotify Client ID:"
LABEL_POLL_INTERVAL = "Update Interval (ms):"
LABEL_ART_SIZE = "Artwork Size (px):"
CHECKBOX_HIDE_ON_FOCUS_LOSS = "Hide when focus is lost"

BUTTON_RESET = "Reset to Default"
BUTTON_SAVE = "Save && Apply"
BUTTON_CANCEL = "Cancel"

SPINBOX_ART_SIZE_RANGE = (64, 200)
SPINBOX_POLL_INTERVAL_RANGE = (MIN_POLL_INTERVAL, 30000)

log = logging.getLogger(__name__)


@final
class ConfigureWindow(QWidget):
    """
    A dialog window that allows the user to view and modify the application's
    configuration. It emits a `config_saved` signal with the updated config
    object when the user saves their changes.
    """

    config_saved = Signal(AppConfig)

    def __init__(self, config: AppConfig):
        super().__init__()

        # This holds a reference to the application's single, shared config object.
        self._shared_config = config
        self._defaults = get_default_config()

        self.genius_token_input: QLineEdit
        self.anthropic_key_input: QLineEdit
        self.source_choice: QComboBox
        self.client_id_input: QLineEdit
        self.poll_interval_spinbox: QSpinBox
        self.art_size_spinbox: QSpinBox
        self.hide_on_focus_loss_checkbox: QCheckBox

        self._create_widgets()
        self._layout_widgets()
        self._connect_signals()
        self._setup_window_flags()

    def _create_widgets(self):
        """Initializes all the child widgets for the configuration window."""

        self.genius_token_input = QLineEdit()
        self.genius_token_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.genius_token_input.setPlaceholderText("Not configured")

        self.anthropic_key_input = QLineEdit()
        self.anthropic_key_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.anthropic_key_input.setPlaceholderText("Not configured")

        self.source_choice = QComboBox()
        self.source_choice.addItems(list(TRACK_SOURCES))

        self.client_id_input = QLineEdit()
        self.client_id_input.setPlaceholderText("Only needed for Spotify")

        self.poll_interval_spinbox = QSpinBox()
        self.poll_interval_spinbox.setRange(*SPINBOX_POLL_INTERVAL_RANGE)
        self.poll_interval_spinbox.setSingleStep(500)

        self.art_size_spinbox = QSpinBox()
        self.art_size_spinbox.setRange(*SPINBOX_ART_SIZE_RANGE)
        self.art_size_spinbox.setSingleStep(8)

        self.hide_on_focus_loss_checkbox = QCheckBox(CHECKBOX_HIDE_ON_FOCUS_LOSS)

    def _layout_widgets(self):
        """Arranges the created widgets using layouts."""

        main_layout = QVBoxLayout(self)
        main_layout.setSpacing(15)

        form_layout = QFormLayout()
        form_layout.setFieldGrowthPolicy(QFormLayout.FieldGrowthPolicy.AllNonFixedFieldsGrow)
        form_layout.setLabelAlignment(Qt.AlignmentFlag.AlignLeft)
        form_layout.setFormAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        form_layout.setSpacing(10)

        header_api = QLabel("<b>API Keys</b>")
        header_api.setStyleSheet("margin-bottom: 5px;")
        form_layout.addRow(header_api)
        form_layout.addRow(LABEL_GENIUS_TOKEN, self.genius_token_input)
        form_layout.addRow(LABEL_ANTHROPIC_KEY, self.anthropic_key_input)

        form_layout.addRow(QLabel(""))

        header_player = QLabel("<b>Player</b>")
        header_player.setStyleSheet("margin-bottom: 5px;")
        form_layout.addRow(header_player)
        form_layout.addRow(LABEL_SOURCE, self.source_choice)
        form_layout.addRow(LABEL_CLIENT_ID, self.client_id_input)
        form_layout.addRow(LABEL_POLL_INTERVAL, self.poll_interval_spinbox)

        form_layout.addRow(QLabel(""))

        header_pref = QLabel("<b>Appearance & Behavior</b>")
        header_pref.setStyleSheet("margin-bottom: 5px;")
        form_layout.addRow(header_pref)
        form_layout.addRow(LABEL_ART_SIZE, self.art_size_spinbox)

        main_layout.addLayout(form_layout)

        checkbox_layout = QHBoxLayout()
        checkbox_layout.addWidget(self.hide_on_focus_loss_checkbox)
        checkbox_layout.addStretch()
        main_layout.addLayout(checkbox_layout)

        main_layout.addSpacerItem(QSpacerItem(20, 10, QSizePolicy.Policy.Minimum, QSizePolicy.Policy.Expanding))

        button_layout = QHBoxLayout()
        self.reset_button = QPushButton(BUTTON_RESET)
        self.save_button = QPushButton(BUTTON_SAVE)
        self.save_button.setDefault(True)
        self.close_button = QPushButton(BUTTON_CANCEL)

        button_layout.addWidget(self.reset_button)
        button_layout.addStretch()
        button_layout.addWidget(self.close_button)
        button_layout.addWidget(self.save_button)
        main_layout.addLayout(button_layout)

    def _connect_signals(self):
        """Connects the button click signals to their respective handlers."""

        _ = self.reset_button.clicked.connect(self._on_reset)
        _ = self.save_button.clicked.connect(self._on_save)
        _ = self.close_button.clicked.connect(self.close)

    def _load_config_into_ui(self, source: AppConfig):
        """Populates the UI fields from a given config object."""

        self.genius_token_input.setText(source.api.genius_token)
        self.anthropic_key_input.setText(source.api.anthropic_key)
        self.source_choice.setCurrentText(source.player.source)
        self.client_id_input.setText(source.player.spotify_client_id)
        self.poll_interval_spinbox.setValue(source.player.poll_interval_ms)
        self.art_size_spinbox.setValue(source.ui.art_size)
        self.hide_on_focus_loss_checkbox.setChecked(source.ui.hide_on_focus_loss)

    def _on_save(self):
        """
        Updates the shared config object with values from the UI, emits a
        signal to notify the rest of the application, and closes the window.
        """

        log.info("Saving new configuration.")

        self._shared_config.api.genius_token = self.genius_token_input.text().strip()
        self._shared_config.api.anthropic_key = self.anthropic_key_input.text().strip()
        self._shared_config.player.source = self.source_choice.currentText()
        self._shared_config.player.spotify_client_id = self.client_id_input.text().strip()
        self._shared_config.player.poll_interval_ms = self.poll_interval_spinbox.value()
        self._shared_config.ui.art_size = self.art_size_spinbox.value()
        self._shared_config.ui.hide_on_focus_loss = self.hide_on_focus_loss_checkbox.isChecked()

        self.config_saved.emit(self._shared_config)
        _ = self.close()

    def _on_reset(self):
        """Loads the default settings into the UI for preview."""

        log.info("Resetting settings to default values (preserving API keys).")
        self._load_config_into_ui(self._defaults)

        self.genius_token_input.setText(self._shared_config.api.genius_token)
        self.anthropic_key_input.setText(self._shared_config.api.anthropic_key)
        self.client_id_input.setText(self._shared_config.player.spotify_client_id)

    @override
    def showEvent(self, event: QShowEvent):
        """
        Overrides QWidget.showEvent to ensure the UI is populated with the
        latest values from the shared config object every time it is shown.
        """

        self._load_config_into_ui(self._shared_config)
        super().showEvent(event)

    def _setup_window_flags(self):
        """Sets the window title, flags, and size."""

        self.setWindowTitle(WINDOW_TITLE)
        self.setWindowFlags(Qt.WindowType.Dialog | Qt.WindowType.WindowStaysOnTopHint)
        self.setFixedSize(WINDOW_WIDTH, WINDOW_HEIGHT)
