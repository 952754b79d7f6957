"""Error taxonomy. Each class carries the HTTP status the API answers with."""


class SeoAnalyzerError(Exception):
    """Base error; unexpected failures surface as a plain 500."""

    status_code = 500


class InvalidInput(SeoAnalyzerError):
    status_code = 400


class InvalidUrl(InvalidInput):
    def __init__(self, message: str = "Invalid URL format") -> None:
        super().__init__(message)


class RateLimited(SeoAnalyzerError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again later.") -> None:
        super().__init__(message)


class NotFound(SeoAnalyzerError):
    status_code = 404


class FetchFailed(SeoAnalyzerError):
    """The page could not be downloaded (bad status, timeout, network)."""


class AnalysisFailed(SeoAnalyzerError):
    """The text-generation call errored or returned nothing."""
