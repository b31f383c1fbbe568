"""
API error taxonomy.

Every error carries the HTTP status it renders as; main.py turns any
ApiError into a JSON body of the form {"error": message}.
"""
from typing import Any, Dict, Optional


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message}
        body.update(self.extra)
        return body


class AuthError(ApiError):
    """Missing, invalid or expired token."""
    status_code = 401


class BadRequestError(ApiError):
    """Missing/malformed parameters or a business rule violation."""
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class ConfigError(ApiError):
    """A required API key is not configured."""
    status_code = 500


class UpstreamError(ApiError):
    """A provider answered non-2xx or could not be reached."""
    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class ServiceUnavailableError(ApiError):
    status_code = 503
