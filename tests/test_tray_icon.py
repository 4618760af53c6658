"""Tests for the tray icon's left-click toggle."""

import os

import pytest

from linernotes.core.config import APP_NAME, get_default_config
from linernotes.ui.popup_window import PopupWindow
from linernotes.ui.tray_icon import TrayIcon


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def popup(config):
    window = PopupWindow(config)
    yield window
    window.close()


@pytest.fixture
def tray(config, popup):
    icon = TrayIcon(APP_NAME, os.path.join(config.app_directory, "assets", "tray-icon.svg"), popup, config)
    yield icon
    icon.configure_window.close()
    icon.hide()


class TestToggleVisibility:
    def test_click_opens_hidden_popup(self, tray, popup):
        tray.toggle_visibility()

        assert popup.isVisible()

    def test_click_closes_visible_popup(self, tray, popup):
        popup.show()
        tray.toggle_visibility()

        assert not popup.isVisible()

    def test_click_that_stole_focus_does_not_reopen(self, tray, popup):
        """The popup already hid itself when the click took its focus."""
        popup.show()
        popup.hide_for_focus_loss()

        tray.toggle_visibility()

        assert not popup.isVisible()

    def test_later_click_reopens(self, tray, popup):
        popup.show()
        popup.hide_for_focus_loss()
        popup._focus_lost_timer.invalidate()

        tray.toggle_visibility()

        assert popup.isVisible()
