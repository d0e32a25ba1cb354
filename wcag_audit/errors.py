"""Failure taxonomy for accessibility scans.

Every failure that leaves the scan pipeline is a ScanError carrying a
human-readable message, suitable for showing to the person who requested
the scan as-is.
"""


class ScanError(Exception):
    """Base exception for scan failures."""

    kind = "scan_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(ScanError):
    """The URL is not a syntactically valid absolute http(s) URL."""

    kind = "invalid_input"


class RetrievalFailedError(ScanError):
    """Direct and proxied retrieval attempts were all exhausted."""

    kind = "retrieval_failed"


class EmptyResponseError(ScanError):
    """Retrieval succeeded but the body was blank."""

    kind = "empty_response"


class AbortedByTimeoutError(ScanError):
    """A single attempt exceeded its timeout and was cancelled."""

    kind = "aborted_by_timeout"


class EvaluationError(ScanError):
    """The rule engine or normalizer failed."""

    kind = "evaluation_error"


INVALID_URL_MESSAGE = "Please enter a valid URL (e.g., https://example.com)"

RETRIEVAL_FAILED_MESSAGE = (
    "Failed to access the website. This could be due to:\n"
    "• The website blocking access\n"
    "• Invalid URL format\n"
    "• Website is currently offline\n\n"
    "Please verify the URL and try again."
)

EMPTY_RESPONSE_MESSAGE = "The website returned an empty response"

TIMEOUT_MESSAGE = "The request timed out. Please try again."

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while testing the website."
