"""
Exception taxonomy shared by the API and the dashboard.

Server side: validation failures become HTTP 400 responses, store failures
HTTP 500. Client side: API failures and unusable chart data become render
states of the chart area.
"""

from typing import Optional, Sequence


class DashboardError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(DashboardError):
    """A request parameter is missing or not one of the accepted values."""

    field = None

    def __init__(self, message: str, valid_options: Optional[Sequence[str]] = None,
                 received=None, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.valid_options = list(valid_options) if valid_options is not None else None
        self.received = received
        self.details = details


class InvalidCategory(ValidationError):
    field = "accidentType"


class InvalidDimension(ValidationError):
    field = "segmentType"


class InvalidYear(ValidationError):
    field = "year"


class UpstreamQueryError(DashboardError):
    """The aggregation store rejected or failed a query."""


class ApiError(DashboardError):
    """The dashboard could not get a usable response from the API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NoData(DashboardError):
    """The API answered with zero rows."""


class NoValidData(DashboardError):
    """Every row the API returned failed label/value validation."""
