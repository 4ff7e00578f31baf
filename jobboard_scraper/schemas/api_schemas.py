"""
Pydantic models for API request/response schemas
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from enum import Enum


class JobSource(str, Enum):
    INDEED = "indeed"
    ROZEE = "rozee"
    JOBZ = "jobz"


class ListingEntry(BaseModel):
    """One raw extraction as produced by an external scraper"""
    listing: Dict[str, Any] = Field(..., description="Search-result card fields")
    detail: Optional[Dict[str, Any]] = Field(None, description="Detail page fields, if fetched")
    detailError: Optional[str] = Field(None, description="Why the detail page could not be read")


class IngestRequest(BaseModel):
    """Request model for ingesting raw listings of one role"""
    source: JobSource
    role: str = Field(..., min_length=1, description="Search role the listings were found for")
    entries: List[ListingEntry] = Field(default_factory=list)
    limit: Optional[int] = Field(None, ge=1, description="Only take the first N listings")

    class Config:
        json_schema_extra = {
            "example": {
                "source": "indeed",
                "role": "Developer",
                "entries": [
                    {
                        "listing": {
                            "title": "Backend Developer",
                            "link": "https://pk.indeed.com/viewjob?jk=abc123",
                            "company": "Acme",
                            "location": "Lahore",
                        },
                        "detail": {"jobDescription": "Build APIs."},
                    }
                ],
            }
        }


class RoleSummaryResponse(BaseModel):
    role: str
    source: str = ""
    saved: int = 0
    skipped: int = 0
    dropped: int = 0
    failed: int = 0
    degraded: int = 0
    error: Optional[str] = None


class IngestResponse(BaseModel):
    """Response for an ingest request"""
    success: bool
    message: str
    summary: RoleSummaryResponse
    saved_job_ids: List[str] = []
    snapshot_file: Optional[str] = Field(None, description="Raw snapshot the entries were merged into")


class JobsListResponse(BaseModel):
    """Response for listing stored jobs"""
    success: bool
    total_count: int
    jobs: List[Dict[str, Any]]


class StatsResponse(BaseModel):
    total_jobs: int
    unpublished_jobs: int
    degraded_jobs: int
    total_inserted: int = 0
    duplicates_skipped: int = 0
    missing_identity: int = 0
    errors: int = 0
