import json
import logging
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from PySide6.QtCore import QThread, Signal

try:
    import yt_dlp
except Exception:
    yt_dlp = None

MAX_RESULTS = 10
SEARCH_TIMEOUT_SEC = 15
NO_TITLE = "No Title"


def _build_ytdlp_opts(extra: Optional[dict] = None) -> dict:
    opts = {
        "quiet": True,
        "no_warnings": True,
        "skip_download": True,
        "extract_flat": True,
    }
    if extra:
        opts.update(extra)
    return opts


def _normalize_results(items, limit: int) -> list[dict]:
    results = []
    if not isinstance(items, list):
        return results
    for item in items:
        if not isinstance(item, dict):
            continue
        video_id = str(item.get("videoId") or item.get("id") or "").strip()
        if not video_id:
            continue
        title = str(item.get("title") or "").strip() or NO_TITLE
        results.append({"videoId": video_id, "title": title})
        if len(results) >= limit:
            break
    return results


def _search_endpoint(query: str, endpoint: str, limit: int) -> list[dict]:
    url = f"{endpoint.rstrip('/')}/search?{urlencode({'q': query})}"
    req = Request(url, headers={"Accept": "application/json", "User-Agent": "MusicFinder"})
    with urlopen(req, timeout=SEARCH_TIMEOUT_SEC) as resp:
        payload = json.loads(resp.read().decode("utf-8", errors="replace"))
    return _normalize_results(payload, limit)


def _search_ytdlp(query: str, limit: int) -> list[dict]:
    if yt_dlp is None:
        logging.warning("YouTube search unavailable: yt-dlp not installed")
        return []
    with yt_dlp.YoutubeDL(_build_ytdlp_opts()) as ydl:
        info = ydl.extract_info(f"ytsearch{limit}:{query}", download=False)
    entries = info.get("entries") if isinstance(info, dict) else None
    return _normalize_results(list(entries or []), limit)


def search_videos(query: str, limit: int = MAX_RESULTS, endpoint: str = "") -> list[dict]:
    """Search YouTube; returns up to ``limit`` {videoId, title} dicts, [] on failure."""
    query = str(query or "").strip()
    if not query:
        return []
    limit = max(1, min(MAX_RESULTS, int(limit)))
    try:
        if endpoint:
            results = _search_endpoint(query, endpoint, limit)
        else:
            results = _search_ytdlp(query, limit)
    except (HTTPError, URLError, TimeoutError, ValueError) as e:
        logging.info("Search request failed: query=%r endpoint=%r err=%s", query, endpoint, e)
        return []
    except Exception as e:
        logging.exception("Search failed: query=%r err=%s", query, e)
        return []
    logging.info("Search finished: query=%r results=%d", query, len(results))
    return results


class SearchWorker(QThread):
    finished_results = Signal(str, list)

    def __init__(self, query: str, limit: int = MAX_RESULTS, endpoint: str = "", parent=None):
        super().__init__(parent)
        self.query = query
        self.limit = limit
        self.endpoint = endpoint

    def run(self):
        results = search_videos(self.query, limit=self.limit, endpoint=self.endpoint)
        self.finished_results.emit(self.query, results)
