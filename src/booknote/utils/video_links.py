# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the video links unit so this responsibility stays isolated, testable, and easy to evolve.

import re

_YOUTUBE_ID = re.compile(
    r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=|shorts/)([^#&?]*).*"
)

EMBED_BASE = "https://www.youtube.com/embed/"


def get_youtube_id(url: str | None) -> str | None:
    """Return the 11-character video id of a share link, or None."""
    if not url:
        return None
    match = _YOUTUBE_ID.match(url)
    if match and len(match.group(2)) == 11:
        return match.group(2)
    return None


def embed_url(url: str | None) -> str | None:
    video_id = get_youtube_id(url)
    return f"{EMBED_BASE}{video_id}" if video_id else None
