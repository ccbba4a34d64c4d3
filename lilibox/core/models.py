# Copyright (c) 2025 Trae AI. All rights reserved.

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

OTHER_MEDIA = "Other Media"


class ParsedName(BaseModel):
    """
    Show/season/episode descriptor derived from a file name.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    show: str
    season: str = "Unknown"
    episode: str = "01"
    full_episode: str = "Unknown"


class MediaEntry(BaseModel):
    """
    Represents a single file in the media folder.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    mime_type: str = ""
    size: Optional[int] = None  # Absent for some provider entries
    modified_time: Optional[datetime] = None
    web_view_link: Optional[str] = None
    thumbnail: Optional[str] = None
    parsed_name: ParsedName

    @computed_field(alias="isVideo")
    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")


class ShowMetadata(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tmdb_id: Optional[int] = None
    name: str
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    first_air_date: Optional[str] = None
    vote_average: Optional[float] = None


class ShowGroup(BaseModel):
    """
    Represents one logical show: its episodes bucketed by season plus optional TMDB metadata.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    show_name: str
    metadata: Optional[ShowMetadata] = None
    seasons: Dict[str, List[MediaEntry]] = Field(default_factory=dict)

    @computed_field(alias="episodes")
    @property
    def episodes(self) -> List[MediaEntry]:
        return [entry for entries in self.seasons.values() for entry in entries]


class DriveFile(BaseModel):
    """
    A file record as reported by Google Drive (camelCase on the wire).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = ""
    name: str
    mime_type: str = ""
    size: Optional[int] = None  # Drive sends this as a string
    modified_time: Optional[datetime] = None
    web_view_link: Optional[str] = None
    thumbnail_link: Optional[str] = None


class TmdbShow(BaseModel):
    id: int
    name: str
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    first_air_date: Optional[str] = None
    vote_average: Optional[float] = None


class StreamRange(BaseModel):
    """
    An inclusive byte range, already validated against the file size.
    """

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.end}/{size}"

    def header_value(self) -> str:
        return f"bytes={self.start}-{self.end}"
