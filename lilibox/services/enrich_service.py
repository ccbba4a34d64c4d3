# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

from lilibox.core.errors import MetadataLookupError
from lilibox.core.models import ShowGroup, ShowMetadata, OTHER_MEDIA
from lilibox.core.parser import strip_episode_token
from lilibox.infrastructure.tmdb import TmdbClient

logger = logging.getLogger(__name__)


class EnrichService:
    def __init__(self, tmdb_client: TmdbClient, max_workers: int = 4):
        self.tmdb_client = tmdb_client
        self.max_workers = max(1, max_workers)

    def lookup(self, show_name: str) -> Optional[ShowMetadata]:
        """
        Looks up one show. Failures are logged and reported as missing metadata.
        """
        title = strip_episode_token(show_name)
        if not title:
            return None

        try:
            show = self.tmdb_client.search_tv(title)
        except MetadataLookupError as e:
            logger.error(f"Error fetching TMDB data for {show_name}: {e}")
            return None
        except Exception as e:
            logger.exception(f"Unexpected error fetching TMDB data for {show_name}: {e}")
            return None

        if show is None:
            return None

        return ShowMetadata(
            tmdb_id=show.id,
            name=show.name,
            overview=show.overview,
            poster_path=show.poster_path,
            backdrop_path=show.backdrop_path,
            poster_url=self.tmdb_client.image_url(show.poster_path),
            backdrop_url=self.tmdb_client.image_url(show.backdrop_path),
            first_air_date=show.first_air_date or None,
            vote_average=show.vote_average,
        )

    def enrich(self, groups: Dict[str, ShowGroup]) -> Dict[str, ShowGroup]:
        """
        Attaches TMDB metadata to every group except "Other Media".
        Issues one query per show, concurrently, and returns once all have settled.
        """
        if not self.tmdb_client.enabled:
            logger.info("TMDB API key not configured. Skipping metadata enrichment.")
            return groups

        show_names = [name for name in groups if name != OTHER_MEDIA]
        if not show_names:
            return groups

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(show_names))) as pool:
            results = pool.map(self.lookup, show_names)
            for show_name, metadata in zip(show_names, results):
                groups[show_name].metadata = metadata

        return groups
