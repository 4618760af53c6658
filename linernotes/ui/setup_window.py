import logging
from typing import final

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QDialog, QFormLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton, QVBoxLayout


WINDOW_TITLE = "Liner Notes - Setup"
WINDOW_WIDTH, WINDOW_HEIGHT = 520, 340

INTRO_HTML = """
<h3>Welcome to Liner Notes</h3>
Album stories and lyrics insights need a <b>Genius</b> client access token
(<a href='https://genius.com/api-clients'>genius.com/api-clients</a>) and an
<b>Anthropic</b> API key (<a href='https://console.anthropic.com/'>console.anthropic.com</a>).
<br><br>
Skipping is fine: artwork still works and the other sections show as unavailable.
"""
ERROR_MISSING_KEYS = "Both keys are required to save. Use 'Skip' to continue without them."

log = logging.getLogger(__name__)


@final
class SetupWindow(QDialog):
    """
    First-run dialog asking for the Genius token and the Anthropic key.
    Rejecting it (Skip) leaves both keys empty.
    """

    keys_saved = Signal(str, str)  # genius_token, anthropic_key

    def __init__(self):
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.setFixedSize(WINDOW_WIDTH, WINDOW_HEIGHT)
        self.setWindowFlags(Qt.WindowType.Dialog)

        self.genius_token_input: QLineEdit
        self.anthropic_key_input: QLineEdit
        self.error_label: QLabel
        self.skip_button: QPushButton
        self.save_button: QPushButton

        self._create_widgets()
        self._layout_widgets()
        self._connect_signals()

    def _create_widgets(self):
        self.genius_token_input = QLineEdit()
        self.genius_token_input.setPlaceholderText("Client access token")

        self.anthropic_key_input = QLineEdit()
        self.anthropic_key_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.anthropic_key_input.setPlaceholderText("sk-ant-...")

        self.error_label = QLabel(ERROR_MISSING_KEYS)
        self.error_label.setStyleSheet("color: #ff5555; font-size: 9pt;")
        self.error_label.hide()

        self.skip_button = QPushButton("Skip")
        self.save_button = QPushButton("Save && Start")
        self.save_button.setDefault(True)

    def _layout_widgets(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(24, 20, 24, 20)
        main_layout.setSpacing(14)

        intro = QLabel(INTRO_HTML)
        intro.setOpenExternalLinks(True)
        intro.setWordWrap(True)
        main_layout.addWidget(intro)

        form_layout = QFormLayout()
        form_layout.setFieldGrowthPolicy(QFormLayout.FieldGrowthPolicy.AllNonFixedFieldsGrow)
        form_layout.addRow("Genius Token:", self.genius_token_input)
        form_layout.addRow("Anthropic Key:", self.anthropic_key_input)
        form_layout.addRow(self.error_label)
        main_layout.addLayout(form_layout)
        main_layout.addStretch()

        button_layout = QHBoxLayout()
        button_layout.addWidget(self.skip_button)
        button_layout.addStretch()
        button_layout.addWidget(self.save_button)
        main_layout.addLayout(button_layout)

    def _connect_signals(self):
        _ = self.skip_button.clicked.connect(self.reject)
        _ = self.save_button.clicked.connect(self._on_save)
        for key_input in (self.genius_token_input, self.anthropic_key_input):
            _ = key_input.textChanged.connect(lambda: self.error_label.hide())

    def _on_save(self):
        genius_token = self.genius_token_input.text().strip()
        anthropic_key = self.anthropic_key_input.text().strip()

        if not genius_token or not anthropic_key:
            (self.anthropic_key_input if genius_token else self.genius_token_input).setFocus()
            self.error_label.show()
            return

        log.info("API keys entered in setup.")
        self.keys_saved.emit(genius_token, anthropic_key)
        self.accept()
