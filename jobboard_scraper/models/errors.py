class JobScraperError(Exception):
    """Base class for errors raised by the job board scraper."""


class MalformedListingError(JobScraperError):
    """A raw listing lacks the title or link needed to identify it."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Malformed {source} listing: {reason}")


class EnrichmentError(JobScraperError):
    """Fetching or extracting a listing's detail page failed."""


class StoreUnavailableError(JobScraperError):
    """The durable job store could not be reached."""


class ContentGenerationError(JobScraperError):
    """The article rewriting service failed or returned nothing."""


class WordPressPublishError(JobScraperError):
    """A WordPress site rejected a draft or answered unexpectedly."""
