"""
Job data models.

`RawListing` / `RawDetail` are the source-agnostic shapes produced by the
per-site adapters; `JobRecord` is the canonical document stored in MongoDB.
Stored documents keep camelCase keys (``jobId``, ``jobRole`` ...) so existing
collections stay readable.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from jobboard_scraper.utils.text_processor import TextProcessor


JOB_DETAIL_FACETS = (
    "jobType",
    "shiftAndSchedule",
    "workSetting",
    "workplaceType",
    "compensationDetails",
    "contractType",
    "securityClearance",
    "travelRequirement",
    "jobIndustry",
    "functionalArea",
    "totalPositions",
    "gender",
    "careerLevel",
    "applyBefore",
    "postingDate",
)


def filter_job_details(details: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Keep known facets with a non-empty value, in canonical facet order."""
    if not details:
        return {}

    filtered = {}
    for facet in JOB_DETAIL_FACETS:
        value = TextProcessor.clean_text(details.get(facet))
        if value:
            filtered[facet] = value
    return filtered


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Raw inputs
# =============================================================================


class RawListing(BaseModel):
    """One search-result card as extracted by a scraper."""

    title: str = ""
    link: str = ""
    company: str = ""
    company_url: str = ""
    location: str = ""
    snippet: str = ""
    salary_hint: str = ""
    posted_hint: str = ""
    vacant_positions: List[str] = Field(default_factory=list)
    facets: Dict[str, str] = Field(default_factory=dict)


class DescriptionSection(BaseModel):
    heading: str
    items: List[str] = Field(default_factory=list)
    text: str = ""


class RawDetail(BaseModel):
    """Fields pulled from a listing's own page."""

    title: str = ""
    company_name: str = ""
    company_profile_url: str = ""
    location: str = ""
    salary: str = ""
    posted_at: str = ""
    description: str = ""
    description_items: List[str] = Field(default_factory=list)
    sections: List[DescriptionSection] = Field(default_factory=list)
    key_facts: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    job_details: Dict[str, str] = Field(default_factory=dict)
    experience: str = ""
    education: str = ""
    apply_url: str = ""
    external_apply_url: str = ""


# =============================================================================
# Canonical record
# =============================================================================


class JobRecord(BaseModel):
    job_id: str = Field(alias="jobId")
    source: str = ""
    search_role: str = Field(alias="searchRole")
    job_role: str = Field(alias="jobRole")

    company_name: str = Field(default="", alias="companyName")
    company_profile_url: str = Field(default="", alias="companyProfileUrl")

    apply_now_url: str = Field(default="", alias="applyNowUrl")
    external_apply_url: str = Field(default="", alias="externalApplyUrl")
    detail_url: str = Field(default="", alias="detailUrl")

    location: str = ""
    salary: str = ""
    posted_at: str = Field(default="", alias="postedAt")

    job_details: Dict[str, str] = Field(default_factory=dict, alias="jobDetails")
    job_description: str = Field(default="", alias="jobDescription")
    benefits: List[str] = Field(default_factory=list)
    experience: str = ""
    education: str = ""

    # WordPress publishing tracking
    published_to_wordpress: bool = Field(default=False, alias="publishedToWordPress")
    wordpress_post_id: Optional[int] = Field(default=None, alias="wordPressPostId")
    wordpress_post_url: Optional[str] = Field(default=None, alias="wordPressPostUrl")
    published_at: Optional[datetime] = Field(default=None, alias="publishedAt")

    scraped_at: datetime = Field(default_factory=utc_now, alias="scrapedAt")
    error: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("job_details", mode="before")
    @classmethod
    def _drop_empty_facets(cls, value):
        return filter_job_details(value)

    @field_validator("benefits", mode="before")
    @classmethod
    def _dedupe_benefits(cls, value):
        if not value:
            return []
        return TextProcessor.dedupe(TextProcessor.clean_text(item) for item in value)

    def to_document(self) -> Dict[str, Any]:
        """Serialize for MongoDB using the stored camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "JobRecord":
        data = {key: value for key, value in document.items() if key not in ("_id", "createdAt", "updatedAt")}
        return cls.model_validate(data)
