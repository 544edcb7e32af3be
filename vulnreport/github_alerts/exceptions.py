from typing import Optional


class VulnerabilityReportError(Exception):
    pass


class ConfigurationError(VulnerabilityReportError):
    """Raised before any network call when the scan cannot be configured."""
    pass


class MissingCredential(ConfigurationError):
    pass


class MissingOrganization(ConfigurationError):
    pass


class FetchFailed(VulnerabilityReportError):
    """
    A page request did not succeed. The whole scan is abandoned.

    Attributes:
        page: 1-based index of the page being fetched
        cursor: The after-cursor sent with that request (None for the first page)
        reason: Description of the underlying failure
    """

    def __init__(self, page: int, cursor: Optional[str], reason: str):
        self.page = page
        self.cursor = cursor
        self.reason = reason
        super().__init__(f"Fetching page {page} (cursor={cursor!r}) failed: {reason}")


class InvalidScanConfig(ConfigurationError):
    pass
