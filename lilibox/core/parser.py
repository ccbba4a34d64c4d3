# Copyright (c) 2025 Trae AI. All rights reserved.

import re
from .models import ParsedName

# "The Summer I Turned Pretty S02E01.mkv" -> title + S02E01
EPISODE_PATTERN = re.compile(r"^(?P<title>.+?)\s+(?P<token>S(?P<season>\d+)E(?P<episode>\d+))", re.IGNORECASE)
EXTENSION_PATTERN = re.compile(r"\.[^/.]+$")
TRAILING_TOKEN_PATTERN = re.compile(r"[sS]\d+[eE]\d+.*$")


def strip_extension(name: str) -> str:
    return EXTENSION_PATTERN.sub("", name)


def parse_file_name(name: str) -> ParsedName:
    """
    Parses a raw file name into show/season/episode.

    Never fails: names without an SxxExx token fall back to the
    extension-less name with an Unknown season.
    """
    match = EPISODE_PATTERN.match(name)
    if match:
        return ParsedName(
            show=match.group("title").strip(),
            season=f"S{match.group('season')}",
            episode=f"E{match.group('episode')}",
            full_episode=match.group("token").upper(),
        )

    return ParsedName(
        show=strip_extension(name),
        season="Unknown",
        episode="01",
        full_episode="Unknown",
    )


def episode_number(parsed: ParsedName) -> int:
    digits = re.sub(r"\D", "", parsed.episode)
    return int(digits) if digits else 0


def strip_episode_token(title: str) -> str:
    """
    Removes a residual SxxExx token (and anything after it) from a show title.
    """
    return TRAILING_TOKEN_PATTERN.sub("", title).strip()
