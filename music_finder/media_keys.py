import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut

from .i18n import tr

# Platform media keys routed exactly like the on-screen buttons.
MEDIA_KEY_ACTIONS = (
    ("Toggle Media Play/Pause", "toggle_play"),
    ("Media Play", "play"),
    ("Media Pause", "pause"),
    ("Media Next", "next_track"),
    ("Media Previous", "prev_track"),
)


def now_playing_title(title: str) -> str:
    app_name = tr("Music Finder")
    title = str(title or "").strip()
    return f"{title} - {app_name}" if title else app_name


class MediaControls:
    """OS-level media control: media keys in, now-playing metadata out."""

    def __init__(self, window, controller):
        self._window = window
        self._shortcuts = []
        for key_name, method in MEDIA_KEY_ACTIONS:
            shortcut = QShortcut(QKeySequence(key_name), window)
            shortcut.setContext(Qt.ApplicationShortcut)
            shortcut.activated.connect(getattr(controller, method))
            self._shortcuts.append(shortcut)
        controller.nowPlayingChanged.connect(self.update_metadata)
        logging.info("Media keys bound: %s", [name for name, _ in MEDIA_KEY_ACTIONS])

    def update_metadata(self, title: str, artwork_url: str):
        self._window.setWindowTitle(now_playing_title(title))
        self._window.setToolTip(title)
