"""Music Finder: search YouTube, play through mpv, navigate a shuffle/repeat history."""

__version__ = "1.0.0"
