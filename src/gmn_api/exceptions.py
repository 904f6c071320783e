"""Error taxonomy for the API.

Every error carries the HTTP status it maps to and the message that is safe to
show a client. The web layer converts these into ``{"error": public_message}``;
the exception text itself is for logs only.
"""


class GMNError(Exception):
    """Base class for all errors raised by the service."""

    status_code = 500
    public_message = "Internal error"

    def __init__(self, message: str | None = None, public_message: str | None = None):
        super().__init__(message or public_message or self.public_message)
        if public_message:
            self.public_message = public_message


class InvalidRequest(GMNError):
    """Bad, missing or disallowed client input."""

    status_code = 400
    public_message = "Invalid request"


class DomainNotAllowed(InvalidRequest):
    """URL host is not on the domain allowlist."""

    public_message = "Domain not allowed"

    def __init__(self, hostname: str | None, public_message: str | None = None):
        self.hostname = hostname
        super().__init__(f"Host not allowed: {hostname!r}", public_message)


class UpstreamFailure(GMNError):
    """Network error or bad response from an upstream service."""

    public_message = "Failed to fetch"


class FetchFailed(UpstreamFailure):
    """Fetching an article page failed."""

    public_message = "Reader failed"

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Fetch failed for {url}: {reason}")


class ExtractionFailed(GMNError):
    """No plausible content block could be found in the page."""

    public_message = "Unable to parse article"
