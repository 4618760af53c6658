# pyright: reportAttributeAccessIssue=false, reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownParameterType=false, reportAny=false, reportPossiblyUnboundVariable=false, reportUnannotatedClassAttribute=false, reportUnknownArgumentType=false, reportOptionalMemberAccess=false

import logging

from PySide6.QtCore import QRect
from PySide6.QtGui import QAction, QCursor, QIcon
from PySide6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

from linernotes.core.models import AppConfig
from linernotes.ui.configure_window import ConfigureWindow
from linernotes.ui.popup_window import PopupWindow


ACTION_TOGGLE_VISIBILITY = "Show Liner Notes"
ACTION_CONFIGURE = "Configure"
ACTION_QUIT = "Quit Liner Notes"

log = logging.getLogger(__name__)


class TrayIcon(QSystemTrayIcon):
    """
    Manages the application's system tray icon and its context menu. A left
    click toggles the popup under the icon.
    """

    def __init__(self, app_name: str, icon_path: str, popup: PopupWindow, config: AppConfig):
        app_instance = QApplication.instance()
        super().__init__(app_instance)

        self._popup = popup

        self.setIcon(QIcon(icon_path))
        self.setToolTip(app_name)

        self.configure_window = ConfigureWindow(config)
        self.setContextMenu(self._build_menu())

        _ = self.activated.connect(self._on_activated)
        self.show()
        log.info("System tray icon initialized.")

    def _build_menu(self) -> QMenu:
        """Creates and returns the context menu for the tray icon."""

        menu = QMenu()

        toggle_action = QAction(ACTION_TOGGLE_VISIBILITY, self)
        _ = toggle_action.triggered.connect(self.toggle_visibility)
        menu.addAction(toggle_action)

        configure_action = QAction(ACTION_CONFIGURE, self)
        _ = configure_action.triggered.connect(self._show_configure_window)
        menu.addAction(configure_action)

        _ = menu.addSeparator()

        quit_action = QAction(ACTION_QUIT, self)
        _ = quit_action.triggered.connect(QApplication.instance().quit)
        menu.addAction(quit_action)

        return menu

    def _on_activated(self, reason: QSystemTrayIcon.ActivationReason):
        """Handles left-click activation on the tray icon."""

        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self.toggle_visibility()

    def toggle_visibility(self):
        if self._popup.isVisible():
            self._popup.hide()
            return
        if self._popup.was_just_hidden_by_focus_loss():
            log.debug("Popup already closed by this click, not reopening.")
            return

        self._popup.show_at(self._anchor_rect())

    def _anchor_rect(self) -> QRect:
        """The tray icon geometry, or a point under the cursor where the platform has none."""

        rect = self.geometry()
        if rect.isValid() and not rect.isEmpty():
            return rect
        return QRect(QCursor.pos(), QCursor.pos())

    def _show_configure_window(self):
        """Shows the configuration window, ensuring it is raised to the front."""

        log.info("Opening configuration window.")
        self.configure_window.show()
        self.configure_window.raise_()
        self.configure_window.activateWindow()
