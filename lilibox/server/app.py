# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import sys
from pathlib import Path
from typing import Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from ..core.config import Config
from ..core.errors import LiliBoxError, RangeNotSatisfiable, StreamingFailed
from ..infrastructure.drive import DriveClient
from ..infrastructure.tmdb import TmdbClient
from ..services.catalog_service import CatalogService
from ..services.enrich_service import EnrichService
from ..services.stream_service import StreamService

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

# Summaries used as `error` in JSON failures, by endpoint.
ERROR_SUMMARIES = {
    "get_catalog": "Failed to fetch media files",
    "stream": "Failed to stream video",
}


class Server:
    def __init__(self, config_path: str = "config.yaml", drive_client: Optional[DriveClient] = None,
                 tmdb_client: Optional[TmdbClient] = None):
        self.config = Config.load(config_path)

        logging.basicConfig(
            level=logging.DEBUG if self.config.verbose else logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[logging.StreamHandler(sys.stdout)]
        )
        self.logger = logging.getLogger("lilibox.server.app")

        static_dir = self.config.static_dir or Path(__file__).parent / "static"
        self.app = Flask(__name__, static_folder=str(static_dir), static_url_path="")
        CORS(
            self.app,
            resources={r"/api/*": {"origins": "*"}},
            allow_headers=["Range"],
            expose_headers=["Content-Range", "Content-Length", "Accept-Ranges"],
        )

        # Infrastructure
        self.drive_client = drive_client or DriveClient.from_token_file(
            self.config.token_path, timeout=self.config.request_timeout
        )
        self.tmdb_client = tmdb_client or TmdbClient(
            self.config.tmdb_api_key, image_base_url=self.config.tmdb_image_base_url
        )

        # Services
        self.enrich_service = EnrichService(self.tmdb_client, max_workers=self.config.enrichment_workers)
        self.catalog_service = CatalogService(self.config, self.drive_client, self.enrich_service)
        self.stream_service = StreamService(self.config, self.drive_client)

        self._setup_routes()

    def _setup_routes(self):
        @self.app.errorhandler(LiliBoxError)
        def handle_error(e: LiliBoxError):
            self.logger.error(f"{e.kind} in {request.path}: {e} ({e.details})")
            response = jsonify(e.to_dict(ERROR_SUMMARIES.get(request.endpoint)))
            if request.endpoint == "get_catalog":
                response.status_code = 500
                response.headers.update(NO_CACHE_HEADERS)
            else:
                response.status_code = e.status_code
            if isinstance(e, RangeNotSatisfiable) and e.size is not None:
                response.headers["Content-Range"] = f"bytes */{e.size}"
            return response

        # Serves the browser client when static_dir holds an index.html; 404 otherwise.
        @self.app.route("/")
        def index():
            return self.app.send_static_file("index.html")

        @self.app.route("/api/health")
        def health():
            return jsonify({
                "status": "ok",
                "drive_ready": self.drive_client.is_ready,
                "tmdb_enabled": self.tmdb_client.enabled,
            })

        # Refresh is the same live listing; there is no server-side cache to bypass.
        @self.app.route("/api/catalog")
        @self.app.route("/api/catalog/refresh")
        @self.app.route("/api/media")
        @self.app.route("/api/media/refresh")
        def get_catalog():
            if request.path.endswith("/refresh") or "refresh" in request.args:
                self.logger.info("Force refreshing media files from Google Drive...")
            groups = self.catalog_service.list_catalog()
            response = jsonify([group.model_dump(mode="json", by_alias=True) for group in groups])
            response.headers.update(NO_CACHE_HEADERS)
            return response

        @self.app.route("/api/stream/<file_id>")
        def stream(file_id: str):
            stream_response = self.stream_service.open_stream(file_id, request.headers.get("Range"))
            try:
                return Response(
                    stream_response.body,
                    status=stream_response.status,
                    headers=stream_response.headers,
                    direct_passthrough=True,
                )
            except (TypeError, ValueError) as e:
                stream_response.body.close()
                raise StreamingFailed("Failed to build stream response", details=str(e)) from e

    def run(self):
        self.logger.info(f"LiliBox server running on http://{self.config.server_host}:{self.config.server_port}")
        if not self.drive_client.is_ready:
            self.logger.warning("Google Drive is not authorized yet. Run the 'auth' command.")
        if not self.config.media_folder_id:
            self.logger.warning("media_folder_id is not set (config.yaml or MEDIA_FOLDER_ID).")
        self.app.run(host=self.config.server_host, port=self.config.server_port, threaded=True)


if __name__ == "__main__":
    server = Server()
    server.run()
