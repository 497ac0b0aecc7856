"""HeatLens error types.

Raised by the core; the API layer converts them to JSON responses.
"""

from __future__ import annotations


class HeatLensError(Exception):
    """Base class for all engine errors."""


class InvalidSample(HeatLensError):
    """A raw sample with unusable viewport or coordinate data."""


class PartitionNotFound(HeatLensError):
    """The requested site/page has no recorded samples at all.

    Distinct from an empty dataset: the page is unknown, so the caller
    should retry later once pages have been recorded.
    """

    retryable = True

    def __init__(self, site_id: int, page_url: str, message: str = "no recorded pages yet") -> None:
        super().__init__(message)
        self.site_id = site_id
        self.page_url = page_url
        self.message = message


class MalformedDataset(HeatLensError):
    """A dataset violates its invariants and must not be rendered."""
