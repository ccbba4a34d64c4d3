# Copyright (c) 2025 Trae AI. All rights reserved.

import os
import yaml
from pathlib import Path
from typing import Optional
from pydantic import BaseModel

ENV_OVERRIDES = {
    "MEDIA_FOLDER_ID": "media_folder_id",
    "TMDB_API_KEY": "tmdb_api_key",
    "PORT": "server_port",
}


class Config(BaseModel):
    media_folder_id: str = ""
    tmdb_api_key: Optional[str] = None
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p/w500"
    credentials_path: Path = Path("credentials.json")
    token_path: Path = Path("token.json")
    static_dir: Optional[Path] = None
    server_port: int = 3000
    server_host: str = "0.0.0.0"
    enrichment_workers: int = 4
    stream_chunk_size: int = 256 * 1024
    request_timeout: float = 30.0
    verbose: bool = False

    @classmethod
    def load(cls, path: str = "config.yaml") -> "Config":
        data = {}
        if Path(path).exists():
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        for env_name, field in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                data[field] = value
        return cls(**data)
