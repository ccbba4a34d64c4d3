# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from typing import Dict, Optional

import requests
from pydantic import ValidationError

from ..core.errors import MetadataLookupError
from ..core.models import TmdbShow

logger = logging.getLogger(__name__)


class TmdbClient:
    """
    Searches TMDB for TV shows by title. One request per call, no retries.
    """

    BASE_URL = "https://api.themoviedb.org/3"

    def __init__(self, api_key: Optional[str], image_base_url: str = "https://image.tmdb.org/t/p/w500",
                 timeout: float = 10.0):
        self.api_key = api_key
        self.image_base_url = image_base_url.rstrip("/")
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _get(self, url: str, params: Dict) -> Dict:
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise MetadataLookupError(f"Request error for {url}: {e}") from e

    def search_tv(self, title: str) -> Optional[TmdbShow]:
        """
        Returns the best (first) TV match for `title`, or None when TMDB has no result.
        """
        params = {
            "api_key": self.api_key,
            "query": title,
            "language": "en-US",
            "page": 1,
        }
        logger.info(f"Searching TMDB for: '{title}'")
        data = self._get(f"{self.BASE_URL}/search/tv", params)

        if not isinstance(data, dict):
            raise MetadataLookupError(f"Unexpected TMDB payload for '{title}': {type(data).__name__}")
        results = data.get("results") or []
        if not isinstance(results, list):
            raise MetadataLookupError(f"Unexpected TMDB results for '{title}': {type(results).__name__}")
        if not results:
            logger.info(f"No TMDB results found for: '{title}'")
            return None

        try:
            show = TmdbShow.model_validate(results[0])
        except ValidationError as e:
            raise MetadataLookupError(f"Unexpected TMDB result for '{title}': {e}") from e

        logger.info(f"Found TMDB data for: '{show.name}' (TMDB: {show.id})")
        return show

    def image_url(self, path: Optional[str]) -> Optional[str]:
        return f"{self.image_base_url}{path}" if path else None
