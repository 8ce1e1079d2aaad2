import logging

from PySide6.QtCore import QSettings

from .history import DEDUP_CURRENT, DEDUP_POLICIES
from .logic import WRAP_POLICIES, WRAP_REPEAT_ALL
from .session import UNLOAD_POLICIES, UNLOAD_WHEN_PLAYING
from .utils import get_user_data_path

VOLUME_KEY = "audio/volume"
LANGUAGE_KEY = "player/language"
DEDUP_POLICY_KEY = "navigation/dedup_policy"
WRAP_POLICY_KEY = "navigation/wrap_policy"
UNLOAD_POLICY_KEY = "session/unload_policy"
PREVENT_CLOSE_KEY = "session/prevent_close"
TICK_MS_KEY = "transport/tick_ms"
SEARCH_ENDPOINT_KEY = "search/endpoint"
SEARCH_LIMIT_KEY = "search/limit"
ENGINE_ORIGIN_KEY = "engine/origin"
LOG_LEVEL_KEY = "logging/level"

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}

DEFAULT_ORIGIN = "https://www.youtube.com"
MAX_SEARCH_RESULTS = 10


def _to_int(value, default: int, min_value: int | None = None, max_value: int | None = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = int(default)
    if min_value is not None:
        number = max(min_value, number)
    if max_value is not None:
        number = min(max_value, number)
    return number


def _to_choice(value, default: str, allowed: set[str]) -> str:
    token = str(value or "").strip()
    if token in allowed:
        return token
    return default


def _to_bool(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        if not token:
            return default
        return token in {"1", "true", "yes", "on"}
    if value is None:
        return default
    return bool(value)


def get_settings() -> QSettings:
    """Returns a QSettings object pointing to a visible .ini file."""
    path = get_user_data_path("settings.ini")
    return QSettings(path, QSettings.IniFormat)


def load_volume(default: int = 70) -> int:
    settings = get_settings()
    return _to_int(settings.value(VOLUME_KEY, default), default, 0, 100)


def save_volume(value: int) -> None:
    settings = get_settings()
    settings.setValue(VOLUME_KEY, max(0, min(100, int(value))))
    settings.sync()


def load_language_setting(default: str = "") -> str:
    """Loads saved language code, returns empty string if none (auto-detect)."""
    settings = get_settings()
    return str(settings.value(LANGUAGE_KEY, default) or "")


def save_language_setting(lang_code: str) -> None:
    settings = get_settings()
    settings.setValue(LANGUAGE_KEY, lang_code)
    settings.sync()


def load_navigation_settings():
    settings = get_settings()
    return {
        "dedup_policy": _to_choice(
            settings.value(DEDUP_POLICY_KEY, DEDUP_CURRENT), DEDUP_CURRENT, DEDUP_POLICIES
        ),
        "wrap_policy": _to_choice(
            settings.value(WRAP_POLICY_KEY, WRAP_REPEAT_ALL), WRAP_REPEAT_ALL, WRAP_POLICIES
        ),
    }


def save_navigation_settings(config: dict):
    settings = get_settings()
    if "dedup_policy" in config:
        settings.setValue(DEDUP_POLICY_KEY, _to_choice(config["dedup_policy"], DEDUP_CURRENT, DEDUP_POLICIES))
    if "wrap_policy" in config:
        settings.setValue(WRAP_POLICY_KEY, _to_choice(config["wrap_policy"], WRAP_REPEAT_ALL, WRAP_POLICIES))
    settings.sync()


def load_session_settings():
    settings = get_settings()
    return {
        "unload_policy": _to_choice(
            settings.value(UNLOAD_POLICY_KEY, UNLOAD_WHEN_PLAYING), UNLOAD_WHEN_PLAYING, UNLOAD_POLICIES
        ),
        "prevent_close": _to_bool(settings.value(PREVENT_CLOSE_KEY, True), True),
    }


def load_tick_interval(default: int = 1000) -> int:
    settings = get_settings()
    return _to_int(settings.value(TICK_MS_KEY, default), default, 100, 5000)


def load_search_settings():
    settings = get_settings()
    return {
        "endpoint": str(settings.value(SEARCH_ENDPOINT_KEY, "") or "").strip(),
        "limit": _to_int(
            settings.value(SEARCH_LIMIT_KEY, MAX_SEARCH_RESULTS), MAX_SEARCH_RESULTS, 1, MAX_SEARCH_RESULTS
        ),
    }


def save_search_settings(endpoint: str, limit: int = MAX_SEARCH_RESULTS):
    settings = get_settings()
    settings.setValue(SEARCH_ENDPOINT_KEY, str(endpoint or "").strip())
    settings.setValue(SEARCH_LIMIT_KEY, _to_int(limit, MAX_SEARCH_RESULTS, 1, MAX_SEARCH_RESULTS))
    settings.sync()


def load_engine_origin(default: str = DEFAULT_ORIGIN) -> str:
    settings = get_settings()
    return str(settings.value(ENGINE_ORIGIN_KEY, default) or default)


def load_log_level(default: str = "INFO") -> int:
    settings = get_settings()
    name = _to_choice(str(settings.value(LOG_LEVEL_KEY, default) or "").upper(), default, LOG_LEVELS)
    return getattr(logging, name)
