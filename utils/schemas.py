"""
Pydantic Schemas - Harvest Data Models

Defines the models passed between harvester components:
- Page requests and decoded page responses
- Harvest configuration and outcome
- Export results and the final run report
- Probe diagnostics

Usage:
    from utils.schemas import PageRequest

    request = PageRequest(base_url=..., resource_path=..., page_size=100)
    response = await client.get(request.url, params=request.params)
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, validator


class PageRequest(BaseModel):
    """One GET request for a single page.

    The cursor is absent for the first page and otherwise is the exact
    token returned by the previous page.
    """

    base_url: str = Field(..., description="API root, e.g. https://data.inaproc.id/api")
    resource_path: str = Field(..., description="Resource below /v1/")
    page_size: int = Field(..., gt=0, description="Records requested per page")
    filter_params: dict[str, str] = Field(default_factory=dict, description="Fixed query filters")
    cursor: Optional[str] = Field(default=None, description="Continuation token")

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/v1/{self.resource_path.strip('/')}"

    @property
    def params(self) -> dict[str, str]:
        """Query parameters; the transport URL-encodes them."""
        params = dict(self.filter_params)
        params["limit"] = str(self.page_size)
        if self.cursor:
            params["cursor"] = self.cursor
        return params


class PageResponse(BaseModel):
    """Decoded page body."""

    records: list[Any] = Field(default_factory=list, description="Records in page order")
    next_cursor: Optional[str] = Field(default=None, description="Token for the next page")
    more_available: Optional[bool] = Field(default=None, description="Advisory 'has more' flag")

    @validator("next_cursor")
    def validate_next_cursor(cls, v: Optional[str]) -> Optional[str]:
        """A cursor, when present, must be non-empty."""
        if v is not None and not v:
            raise ValueError("next_cursor must be a non-empty string")
        return v


class HarvestConfig(BaseModel):
    """Run parameters for one harvest loop."""

    base_url: str
    resource_path: str
    page_size: int = Field(..., gt=0)
    filter_params: dict[str, str] = Field(default_factory=dict)
    inter_page_delay: float = Field(default=1.0, ge=0)
    max_consecutive_failures: int = Field(default=0, ge=0, description="Retries on retryable statuses")
    retry_status_codes: list[int] = Field(default_factory=lambda: [429])
    retry_backoff_min: float = Field(default=2.0, ge=0)
    retry_backoff_max: float = Field(default=60.0, ge=0)


class HarvestStatus(str, Enum):
    """Terminal status of a harvest."""

    COMPLETED = "completed"
    FAILED_WITH_PARTIAL = "failed-with-partial"


class HarvestOutcome(BaseModel):
    """What the pager reports when the loop ends."""

    status: HarvestStatus
    pages_fetched: int = Field(default=0, ge=0)
    record_count: int = Field(default=0, ge=0)
    error: Optional[str] = Field(default=None, description="Transport failure message")
    anomaly: Optional[str] = Field(default=None, description="Pagination anomaly message")


class ExportResult(BaseModel):
    """A written workbook."""

    filename: str
    record_count: int = Field(..., ge=0)


class HarvestReport(BaseModel):
    """Final report of a harvest run."""

    outcome: HarvestOutcome
    export: Optional[ExportResult] = None


class ProbeReport(BaseModel):
    """Where a live API response keeps its pagination fields."""

    status_code: int
    root_keys: list[str] = Field(default_factory=list)
    meta: Optional[Any] = None
    cursor_at_root: Optional[Any] = None
    pagination: Optional[Any] = None
    next_page_url: Optional[Any] = None
    has_cursor_key: bool = False
    has_more_key: bool = False
