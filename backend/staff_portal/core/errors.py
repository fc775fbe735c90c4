from __future__ import annotations


class PortalError(Exception):
    """Base class for failures the portal reports back to its callers."""


class AuthError(PortalError):
    """The Planday credential exchange failed or is not configured."""


class UpstreamError(PortalError):
    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamBadRequest(UpstreamError):
    """Upstream rejected the shape of the request (HTTP 400).

    Probing code treats this as "try the next format" rather than a failure.
    """


class UpstreamOtherError(UpstreamError):
    """Any other upstream failure, including transport errors."""


class ValidationError(PortalError):
    """Caller input that parsed but cannot be served."""


def classify_upstream_status(status_code: int, body: str) -> UpstreamError:
    message = f"Planday API {status_code}: {body}"
    if status_code == 400:
        return UpstreamBadRequest(status_code, message)
    return UpstreamOtherError(status_code, message)
