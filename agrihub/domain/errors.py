from __future__ import annotations

from typing import List, Optional


class AgriHubError(Exception):
    """Base error; `message` is safe to show to the user."""

    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInputError(AgriHubError):
    """Raised before any network call when the collected input is unusable."""

    kind = "invalid_input"

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        self.missing_fields = list(missing_fields or [])
        super().__init__(message)


class UpstreamRequestError(AgriHubError):
    kind = "upstream"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponseError(AgriHubError):
    kind = "malformed"


class DeviceError(AgriHubError):
    kind = "device"


class NotFoundError(AgriHubError):
    kind = "not_found"
