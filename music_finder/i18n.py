import json
import locale
import logging

from .utils import get_resource_path

# Fallback English dictionary
_default_en = {
    # Transport
    "Play / Pause": "Play / Pause",
    "Previous": "Previous",
    "Next": "Next",
    "Shuffle": "Shuffle",
    "Repeat Off": "Repeat Off",
    "Repeat All": "Repeat All",
    "Repeat One": "Repeat One",
    "Volume": "Volume",
    "Seek": "Seek",

    # Search / history
    "Search": "Search",
    "Search YouTube...": "Search YouTube...",
    "Searching...": "Searching...",
    "No results": "No results",
    "{} results": "{} results",
    "Results": "Results",
    "History": "History",
    "Nothing playing": "Nothing playing",

    # Video mode
    "Show video": "Show video",
    "Audio only": "Audio only",
    "Close video": "Close video",

    # Close guard
    "Music Finder": "Music Finder",
    "Leave Music Finder?": "Leave Music Finder?",
    "Playback is in progress. Close the player anyway?": "Playback is in progress. Close the player anyway?",
}

_translations = {}


def get_system_language():
    try:
        lang, _ = locale.getlocale()
        if lang:
            return lang.split('_')[0].lower()
    except (TypeError, ValueError):
        pass
    return "en"


def load_language(lang_code):
    global _translations
    lang_file = get_resource_path("locales") / f"{lang_code}.json"
    _translations = {}
    if not lang_file.exists():
        return
    try:
        with open(lang_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            _translations = data
    except Exception as e:
        logging.warning("Failed to load language '%s': %s", lang_code, e)


def setup_i18n(lang_code=None):
    if not lang_code:
        # Check settings first, then fall back to system
        from .settings import load_language_setting
        lang_code = load_language_setting("")
        if not lang_code:
            lang_code = get_system_language()
    load_language(lang_code)


def tr(text, *args):
    """Translate function. Takes a format string and optional positional arguments."""
    translated = _translations.get(text, _default_en.get(text, text))
    if args:
        try:
            return translated.format(*args)
        except Exception:
            return translated
    return translated
