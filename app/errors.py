"""
Error taxonomy shared by the services and the HTTP layer.

Every error carries a machine-readable ``code`` and the HTTP status the
API should answer with, so route handlers can render a uniform
``{"error": code, "message": ...}`` envelope.
"""
from typing import Any, Dict, Optional


class SteamStatsError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class UpstreamError(SteamStatsError):
    """An upstream Steam endpoint failed or answered with a non-2xx status."""

    code = "upstream_error"

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message, code=code)
        self.upstream_status = upstream_status


class NotFoundError(SteamStatsError):
    code = "not_found"
    status_code = 404


class MissingApiKeyError(SteamStatsError):
    code = "missing_api_key"


class MalformedMatchError(ValueError):
    """A live feed record could not be interpreted as a match."""
