# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from typing import List

from lilibox.core.grouper import Grouper
from lilibox.core.models import DriveFile, MediaEntry, ShowGroup
from lilibox.core.parser import parse_file_name
from lilibox.infrastructure.drive import DriveClient
from .enrich_service import EnrichService

logger = logging.getLogger(__name__)

MEDIA_MIME_PREFIXES = ("video/", "image/")


class CatalogService:
    """
    Lists the media folder and turns it into enriched ShowGroups.

    Every call reads live from Google Drive; nothing is cached, so a refresh
    is the same operation as a normal listing.
    """

    def __init__(self, config, drive_client: DriveClient, enrich_service: EnrichService):
        self.config = config
        self.drive_client = drive_client
        self.enrich_service = enrich_service
        self.grouper = Grouper()

    def to_entry(self, drive_file: DriveFile) -> MediaEntry:
        return MediaEntry(
            id=drive_file.id,
            name=drive_file.name,
            mime_type=drive_file.mime_type,
            size=drive_file.size,
            modified_time=drive_file.modified_time,
            web_view_link=drive_file.web_view_link,
            thumbnail=drive_file.thumbnail_link,
            parsed_name=parse_file_name(drive_file.name),
        )

    def list_entries(self) -> List[MediaEntry]:
        files = self.drive_client.list_files(self.config.media_folder_id, MEDIA_MIME_PREFIXES)
        return [self.to_entry(f) for f in files]

    def list_catalog(self, enrich: bool = True) -> List[ShowGroup]:
        """
        Raises ProviderUnavailable or UpstreamError when the listing fails.
        Metadata failures only leave the affected show without metadata.
        """
        logger.info("Fetching fresh media files from Google Drive...")
        entries = self.list_entries()
        groups = self.grouper.group(entries)
        if enrich:
            groups = self.enrich_service.enrich(groups)

        logger.info(f"Found {len(entries)} media files in {len(groups)} shows")
        return list(groups.values())
