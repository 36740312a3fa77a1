"""
Exception taxonomy for the scraping pipeline.

Only the two fatal boundaries raise: the list pages (when *both* are missing)
and the detail scorecard (when it is missing or the match id is invalid).
Everything below those boundaries degrades to "-", None or an empty list.
"""


class CricketDataError(Exception):
    """Base class for every error the pipeline surfaces to callers."""

    code = "INTERNAL_ERROR"
    status = 500
    public_message = "Unexpected server error while processing cricket data."


class InvalidMatchIdError(CricketDataError):
    code = "BAD_REQUEST"
    status = 400
    public_message = "Invalid match id provided."


class UpstreamFetchError(CricketDataError):
    code = "UPSTREAM_FETCH_FAILED"
    status = 502
    public_message = "Could not fetch cricket data from upstream source."


class PayloadParseError(CricketDataError):
    code = "PARSE_FAILED"
    status = 502
    public_message = "Could not parse upstream cricket payload."


def to_api_error(error: BaseException) -> dict:
    """Map an exception to the public ``{code, message, status}`` payload."""
    if isinstance(error, CricketDataError):
        return {
            "code": error.code,
            "message": error.public_message,
            "status": error.status,
        }

    return {
        "code": CricketDataError.code,
        "message": CricketDataError.public_message,
        "status": CricketDataError.status,
    }
