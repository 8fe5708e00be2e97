"""
Errors raised by the parking data pipeline.

Failures are contained at the smallest boundary that can absorb them:
a relay attempt, a page, a source. Only NoDataAvailable reaches the caller.
"""


class ParkingDataError(Exception):
    """Base class for pipeline errors."""


class NetworkFailure(ParkingDataError):
    """A single request timed out or could not connect."""


class MalformedResponse(ParkingDataError):
    """Non-2xx status, a body that is not JSON, or an unexpected payload shape."""


class FetchExhausted(ParkingDataError):
    """The direct request and every relay failed for one URL."""

    def __init__(self, url: str):
        super().__init__(f"Unable to fetch data from {url} even with relays")
        self.url = url


class NoDataAvailable(ParkingDataError):
    """No source produced any parking lot."""

    DEFAULT_MESSAGE = (
        "Unable to load any parking lot data. "
        "Check the network connection or the upstream API status."
    )

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)
