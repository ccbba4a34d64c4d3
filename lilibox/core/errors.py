# Copyright (c) 2025 Trae AI. All rights reserved.

from typing import Optional


class LiliBoxError(Exception):
    """
    Base error. Carries a machine-readable kind and the HTTP status it maps to.
    """

    kind = "Error"
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self, summary: Optional[str] = None) -> dict:
        """
        With a summary, the summary becomes `error` and the message moves to `details`.
        """
        if summary:
            return {"error": summary, "kind": self.kind, "details": self.message}
        payload = {"error": self.message, "kind": self.kind}
        if self.details:
            payload["details"] = self.details
        return payload


class ProviderUnavailable(LiliBoxError):
    """Storage provider has no valid credential or cannot be reached."""

    kind = "ProviderUnavailable"


class NotFound(LiliBoxError):
    kind = "NotFound"
    status_code = 404


class RangeNotSatisfiable(LiliBoxError):
    kind = "RangeNotSatisfiable"
    status_code = 416

    def __init__(self, message: str, size: Optional[int] = None):
        super().__init__(message)
        self.size = size


class UpstreamError(LiliBoxError):
    kind = "UpstreamError"


class StreamingFailed(LiliBoxError):
    kind = "StreamingFailed"


class MetadataLookupError(Exception):
    """TMDB request or response failure. Never leaves the enrichment step."""
