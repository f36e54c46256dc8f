"""
Harvester error taxonomy.

- ConfigurationError: fatal precondition failure, nothing is requested or exported
- TransportError: the page request failed, the loop aborts and the partial data is exported
- PaginationAnomaly: advisory, stops the loop but the harvest still counts as completed
- ExportError: the workbook could not be written
"""

from typing import Optional


class HarvestError(Exception):
    """Base class for all harvester errors."""


class ConfigurationError(HarvestError):
    """Required configuration (e.g. the bearer token) is missing or invalid."""


class TransportError(HarvestError):
    """A page request failed with a non-success status or a network fault."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PageDecodeError(TransportError):
    """The response body could not be parsed as a JSON object."""


class PaginationAnomaly(HarvestError):
    """The API signalled more data but returned no cursor to fetch it with."""


class ExportError(HarvestError):
    """Serializing or writing the output workbook failed."""
