# Copyright (c) 2025 Trae AI. All rights reserved.

from typing import Dict, Iterable
from .models import MediaEntry, ShowGroup, OTHER_MEDIA
from .parser import episode_number


class Grouper:
    """
    Groups MediaEntries into ShowGroups keyed by their parsed show name.
    """

    def group(self, entries: Iterable[MediaEntry]) -> Dict[str, ShowGroup]:
        groups: Dict[str, ShowGroup] = {}

        for entry in entries:
            show_name = entry.parsed_name.show or OTHER_MEDIA
            if show_name not in groups:
                groups[show_name] = ShowGroup(show_name=show_name)
            seasons = groups[show_name].seasons
            seasons.setdefault(entry.parsed_name.season, []).append(entry)

        # sorted() is stable, so equal episode numbers keep listing order
        for group in groups.values():
            for season, season_entries in group.seasons.items():
                group.seasons[season] = sorted(
                    season_entries, key=lambda e: episode_number(e.parsed_name)
                )

        return groups
