import math
import os
import sys
from pathlib import Path

REPEAT_OFF = 0
REPEAT_ALL = 1
REPEAT_ONE = 2
# Order the repeat button cycles through.
REPEAT_CYCLE = (REPEAT_OFF, REPEAT_ALL, REPEAT_ONE)
REPEAT_GLYPHS = {REPEAT_OFF: "🔁", REPEAT_ALL: "🔂", REPEAT_ONE: "🔁1"}

THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/{quality}.jpg"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

APP_DIR_NAME = "MusicFinder"


def get_resource_path(relative_path: str) -> Path:
    """Get absolute path to resource, works for dev and for PyInstaller."""
    if getattr(sys, 'frozen', False):
        base_path = Path(sys._MEIPASS)
    else:
        base_path = Path(__file__).parent

    return base_path / relative_path


def get_user_data_dir() -> Path:
    """Get writable base directory for settings and logs."""
    if getattr(sys, "frozen", False):
        if os.name == "nt":
            base = Path(os.getenv("APPDATA") or Path.home() / "AppData" / "Roaming")
            app_data = base / APP_DIR_NAME
        else:
            base = Path(os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config")
            app_data = base / "music-finder"
        app_data.mkdir(parents=True, exist_ok=True)
        return app_data
    # In dev mode, keep it local for easy access
    return Path(__file__).parent


def get_user_data_path(filename: str) -> str:
    return str(get_user_data_dir() / filename)


def thumbnail_url(video_id: str, quality: str = "mqdefault") -> str:
    return THUMBNAIL_URL.format(video_id=video_id, quality=quality)


def watch_url(video_id: str) -> str:
    return WATCH_URL.format(video_id=video_id)


def is_known_duration(seconds) -> bool:
    if seconds is None:
        return False
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


def format_time(seconds) -> str:
    """Render seconds as m:ss (h:mm:ss past an hour); unknown values give 0:00."""
    if not is_known_duration(seconds):
        return "0:00"
    total_seconds = int(float(seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
