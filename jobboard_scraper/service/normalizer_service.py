"""
Record Normalizer

Turns a source-agnostic raw listing (plus its optional detail payload) into the
canonical `JobRecord`. Field precedence, applied per destination field:

1. structured detail value over a derived value
2. detail page value over search-card value
3. non-placeholder text over boilerplate
4. search-card value, then ""
"""

import re
from typing import Iterable, List, Optional, Union

from jobboard_scraper.models.errors import MalformedListingError
from jobboard_scraper.models.job_models import (
    DescriptionSection,
    JobRecord,
    RawDetail,
    RawListing,
    filter_job_details,
    utc_now,
)
from jobboard_scraper.service.identity_service import resolve_job_id
from jobboard_scraper.utils.logging import setup_logger
from jobboard_scraper.utils.text_processor import TextProcessor

logger = setup_logger(__name__)


BENEFIT_BOILERPLATE_PATTERNS = [
    re.compile(r"^benefits:?$", re.IGNORECASE),
    re.compile(r"pulled from the full job description", re.IGNORECASE),
]
EXPERIENCE_HINT = re.compile(r"experience", re.IGNORECASE)
EDUCATION_HINT = re.compile(r"degree|diploma|education", re.IGNORECASE)


# =============================================================================
# Helpers
# =============================================================================


def extract_benefits(*sources: Union[str, Iterable[str], None]) -> List[str]:
    """Collect benefit lines from several sources, split, filter and dedupe."""
    candidates: List[str] = []
    for source in sources:
        if not source:
            continue
        entries = [source] if isinstance(source, str) else source
        for entry in entries:
            candidates.extend(TextProcessor.clean_multiline(entry))

    benefits = [
        item for item in candidates
        if not any(pattern.search(item) for pattern in BENEFIT_BOILERPLATE_PATTERNS)
    ]
    return TextProcessor.dedupe(benefits)


def format_section(section: DescriptionSection) -> str:
    heading = TextProcessor.clean_text(section.heading)
    items = [TextProcessor.clean_text(item) for item in section.items]
    items = [item for item in items if item]
    if items:
        bullets = "\n".join(f"- {item}" for item in items)
        return f"{heading}:\n{bullets}" if heading else bullets

    text = "\n".join(TextProcessor.clean_multiline(section.text))
    if text:
        return f"{heading}:\n{text}" if heading else text
    return ""


def build_description(listing: RawListing, detail: Optional[RawDetail]) -> str:
    """Assemble the description; blank-line separated, snippet as fallback."""
    sections: List[str] = []

    if detail is not None:
        sections.append(TextProcessor.clean_text(detail.description))
        sections.extend(format_section(section) for section in detail.sections)

    if listing.vacant_positions:
        sections.append(format_section(DescriptionSection(heading="Vacant Positions", items=listing.vacant_positions)))

    if detail is not None and detail.key_facts:
        facts = [TextProcessor.clean_text(fact) for fact in detail.key_facts]
        sections.append("\n".join(fact for fact in facts if fact))

    description = "\n\n".join(section for section in sections if section)
    return description or TextProcessor.strip_tags(listing.snippet)


def pick_posted_at(*candidates: Optional[str]) -> str:
    for candidate in candidates:
        text = TextProcessor.clean_text(candidate)
        if text and not TextProcessor.is_placeholder(text):
            return text
    return ""


def derive_from_items(items: Iterable[str], pattern: re.Pattern) -> str:
    for item in items:
        text = TextProcessor.clean_text(item)
        if text and pattern.search(text):
            return text
    return ""


# =============================================================================
# Record Normalizer
# =============================================================================


class RecordNormalizer:
    def validate(self, source: str, listing: RawListing) -> None:
        if not TextProcessor.clean_text(listing.title):
            raise MalformedListingError(source, f"missing title (link={listing.link or 'none'})")
        if not TextProcessor.clean_text(listing.link):
            raise MalformedListingError(source, f"missing link (title={listing.title})")

    def normalize(
        self,
        source: str,
        role: str,
        listing: RawListing,
        detail: Optional[RawDetail] = None,
        error: Optional[str] = None,
    ) -> JobRecord:
        """
        Map one listing to a `JobRecord`.

        Raises `MalformedListingError` when the title or link is empty. When
        ``error`` is given the detail payload is ignored and the record keeps
        only summary fields plus the error message.
        """
        self.validate(source, listing)

        if error:
            detail = None

        link = TextProcessor.clean_text(listing.link)
        clean = TextProcessor.first_non_empty

        facets = dict(listing.facets)
        if detail is not None:
            facets.update({key: value for key, value in detail.job_details.items() if TextProcessor.clean_text(value)})

        experience = ""
        education = ""
        benefits: List[str] = []
        if detail is not None:
            experience = clean(detail.experience) or derive_from_items(detail.description_items, EXPERIENCE_HINT)
            education = clean(detail.education) or derive_from_items(detail.description_items, EDUCATION_HINT)
            benefits = extract_benefits(detail.benefits)

        description = build_description(listing, detail)
        detail = detail or RawDetail()

        record = JobRecord(
            job_id=resolve_job_id(link, source),
            source=source,
            search_role=TextProcessor.clean_text(role),
            job_role=clean(detail.title, listing.title),
            company_name=clean(detail.company_name, listing.company),
            company_profile_url=clean(detail.company_profile_url, listing.company_url),
            apply_now_url=clean(detail.apply_url, detail.external_apply_url, link),
            external_apply_url=clean(detail.external_apply_url),
            detail_url=link,
            location=clean(detail.location, listing.location),
            salary=clean(detail.salary, listing.salary_hint),
            posted_at=pick_posted_at(detail.posted_at, listing.posted_hint),
            job_details=filter_job_details(facets),
            job_description=description,
            benefits=benefits,
            experience=experience,
            education=education,
            scraped_at=utc_now(),
            error=TextProcessor.clean_text(error) or None,
        )

        if record.error:
            logger.warning(f"Degraded {source} record {record.job_id}: {record.error}")
        return record
