"""
Per-source adapters.

Scrapers hand over whatever their page extraction returned: loosely keyed dicts
whose shape differs per job board. Each adapter maps those dicts into the
shared `RawListing` / `RawDetail` shapes so the normalizer stays source-agnostic.
"""

from typing import Any, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, PageElement, Tag

from jobboard_scraper.models.job_models import DescriptionSection, RawDetail, RawListing
from jobboard_scraper.utils.text_processor import TextProcessor


INDEED = "indeed"
ROZEE = "rozee"
JOBZ = "jobz"

JOBZ_BASE_URL = "https://www.jobz.pk"

HEADING_TAGS = ("b", "strong")
ENTRY_BREAK_TAGS = ("br", "p", "li", "div", "ul", "ol")
BULLET_MARKS = "-*• "


def _text(value: Any) -> str:
    """Text of a plain value or of a ``{"text", "href"}`` link cell."""
    if isinstance(value, dict):
        return TextProcessor.first_non_empty(value.get("text"), value.get("href"))
    if isinstance(value, (int, float)):
        return str(value)
    return TextProcessor.clean_text(value)


def _href(value: Any) -> str:
    if isinstance(value, dict):
        return TextProcessor.clean_text(value.get("href"))
    return ""


def _pick(raw: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        text = _text(raw.get(key))
        if text:
            return text
    return ""


def _pick_link(raw: Dict[str, Any], *keys: str) -> str:
    """Like `_pick`, but a link cell gives its ``href`` rather than its text."""
    for key in keys:
        value = raw.get(key)
        text = _href(value) or _text(value)
        if text:
            return text
    return ""


def _items(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return TextProcessor.clean_multiline(value)
    return [text for text in (_text(item) for item in value) if text]


class LabelTable:
    """Case-insensitive lookup over a detail page's label/value rows."""

    def __init__(self, rows: Optional[Dict[str, Any]]):
        self._rows: Dict[str, Any] = {}
        for label, value in (rows or {}).items():
            key = TextProcessor.clean_text(label).rstrip(":").lower()
            if key:
                self._rows[key] = value

    def raw(self, *labels: str) -> Any:
        for label in labels:
            value = self._rows.get(label.lower())
            if _text(value):
                return value
        return None

    def get(self, *labels: str) -> str:
        return _text(self.raw(*labels))

    def facets(self, label_map: Dict[str, Iterable[str]]) -> Dict[str, str]:
        return {facet: self.get(*labels) for facet, labels in label_map.items()}


def format_salary_range(min_value: Any, max_value: Any, fallback_text: Any = "") -> str:
    """Render a PKR salary range, e.g. ``PKR 50,000 - PKR 80,000``."""

    def to_number(value: Any) -> Optional[float]:
        try:
            number = float(str(value).replace(",", ""))
        except (TypeError, ValueError):
            return None
        return number if number > 0 else None

    low = to_number(min_value)
    high = to_number(max_value)
    if low is None and high is None:
        return _text(fallback_text)

    if low is not None and high is not None and low != high:
        return f"PKR {low:,.0f} - PKR {high:,.0f}"

    return f"PKR {(low if low is not None else high):,.0f}"


def _is_inside(element: PageElement, ancestor: Tag) -> bool:
    return any(parent is ancestor for parent in element.parents)


def extract_list_section(html: Optional[str], title: str) -> List[str]:
    """
    Bullet entries following a ``<b>title</b>`` or ``<strong>title</strong>``
    heading in description HTML, up to the next bold heading.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    wanted = TextProcessor.clean_text(title).lower()
    heading = next(
        (
            tag
            for tag in soup.find_all(HEADING_TAGS)
            if TextProcessor.clean_text(tag.get_text(" ")).rstrip(":").lower() == wanted
        ),
        None,
    )
    if heading is None:
        return []

    entries: List[str] = []
    current: List[str] = []
    for element in heading.next_elements:
        if isinstance(element, Tag):
            if element.name in HEADING_TAGS:
                break
            if element.name in ENTRY_BREAK_TAGS:
                entries.append(" ".join(current))
                current = []
        elif isinstance(element, NavigableString) and not isinstance(element, Comment):
            if not _is_inside(element, heading):
                current.append(str(element))
    entries.append(" ".join(current))

    items = (TextProcessor.clean_text(entry).lstrip(BULLET_MARKS).strip() for entry in entries)
    return [item for item in items if item]


# =============================================================================
# Adapters
# =============================================================================


class SourceAdapter:
    source: str = ""

    def to_listing(self, raw: Dict[str, Any]) -> RawListing:
        return RawListing(
            title=_pick(raw, "title"),
            link=_pick_link(raw, "link", "url"),
            company=_pick(raw, "company", "companyName"),
            company_url=_pick_link(raw, "companyLink", "companyUrl"),
            location=_pick(raw, "location", "city"),
            snippet=_pick(raw, "snippet"),
            salary_hint=_pick(raw, "salaryHint", "salary"),
            posted_hint=_pick(raw, "postedHint", "postedAt"),
        )

    def to_detail(self, raw: Optional[Dict[str, Any]]) -> Optional[RawDetail]:
        raise NotImplementedError


class IndeedAdapter(SourceAdapter):
    source = INDEED

    FACET_LABELS = {
        "jobType": ("Job type",),
        "shiftAndSchedule": ("Shift and schedule", "Shift & schedule", "Schedule"),
        "workSetting": ("Work setting",),
        "workplaceType": ("Workplace type",),
        "compensationDetails": ("Compensation", "Compensation & benefits"),
        "contractType": ("Contract type",),
        "securityClearance": ("Security clearance",),
        "travelRequirement": ("Travel requirement", "Travel requirements"),
    }

    def to_listing(self, raw: Dict[str, Any]) -> RawListing:
        listing = super().to_listing(raw)
        listing.salary_hint = _pick(raw, "salaryOnCard", "salaryHint", "salary")
        return listing

    def to_detail(self, raw: Optional[Dict[str, Any]]) -> Optional[RawDetail]:
        if not raw:
            return None

        table = LabelTable(raw.get("detailSections"))
        job_details = {key: _text(value) for key, value in (raw.get("jobDetails") or {}).items()}
        job_details.update({facet: value for facet, value in table.facets(self.FACET_LABELS).items() if value})

        return RawDetail(
            title=_pick(raw, "title"),
            company_name=_pick(raw, "companyName", "company"),
            company_profile_url=_pick(raw, "companyProfileUrl"),
            location=_pick(raw, "location"),
            salary=TextProcessor.first_non_empty(table.get("Pay", "Salary", "Compensation"), _pick(raw, "salary")),
            posted_at=_pick(raw, "postedAt"),
            description=_pick(raw, "jobDescription", "description"),
            description_items=_items(raw.get("descriptionItems")),
            benefits=_items(raw.get("benefits")),
            job_details=job_details,
            experience=TextProcessor.first_non_empty(
                table.get("Experience", "Experience level"), _pick(raw, "experience")
            ),
            education=TextProcessor.first_non_empty(
                table.get("Education", "Education level"), _pick(raw, "education")
            ),
            apply_url=_pick(raw, "applyNowUrl"),
            external_apply_url=_pick(raw, "externalApplyUrl"),
        )


class RozeeAdapter(SourceAdapter):
    source = ROZEE

    FACET_LABELS = {
        "jobIndustry": ("Industry", "Job Industry"),
        "functionalArea": ("Functional Area",),
        "totalPositions": ("Total Positions",),
        "shiftAndSchedule": ("Job Shift",),
        "jobType": ("Job Type",),
        "gender": ("Gender",),
        "careerLevel": ("Career Level",),
        "applyBefore": ("Apply Before",),
        "postingDate": ("Posting Date",),
        "compensationDetails": ("Salary Range",),
    }
    SECTION_TITLES = (
        ("Key Responsibilities", "keyResponsibilities", "Key Responsibilities"),
        ("Required Qualifications", "requiredQualifications", "Required Qualifications"),
        ("Preferred Qualifications & Benefits", "preferredQualifications", "Preferred Qualifications and Benefits"),
    )

    def to_listing(self, raw: Dict[str, Any]) -> RawListing:
        listing = super().to_listing(raw)
        listing.location = _pick(raw, "city", "location")
        listing.salary_hint = format_salary_range(raw.get("salaryMin"), raw.get("salaryMax"), raw.get("salaryText"))
        listing.snippet = TextProcessor.strip_tags(raw.get("snippet"))
        return listing

    def to_detail(self, raw: Optional[Dict[str, Any]]) -> Optional[RawDetail]:
        if not raw:
            return None

        table = LabelTable(raw.get("jobDetails"))
        description_html = raw.get("descriptionHtml") or ""

        sections = []
        section_items = {}
        for heading, key, html_title in self.SECTION_TITLES:
            items = _items(raw.get(key)) or extract_list_section(description_html, html_title)
            section_items[key] = items
            sections.append(DescriptionSection(heading=heading, items=items))
        about = _pick(raw, "aboutCompany")
        if about:
            sections.append(DescriptionSection(heading="About the Company", text=about))

        return RawDetail(
            title=_pick(raw, "title"),
            company_name=_pick(raw, "company"),
            location=_pick(raw, "location"),
            salary=TextProcessor.first_non_empty(_pick(raw, "salaryDetail"), table.get("Salary", "Salary Range")),
            posted_at=_pick(raw, "posted", "postedAt"),
            description=_pick(raw, "jobDescription"),
            sections=sections,
            benefits=_items(raw.get("skills")) + section_items["preferredQualifications"],
            job_details=table.facets(self.FACET_LABELS),
            experience=table.get("Minimum Experience", "Experience"),
            education=table.get("Minimum Education", "Education"),
        )


class JobzAdapter(SourceAdapter):
    source = JOBZ

    def to_listing(self, raw: Dict[str, Any]) -> RawListing:
        listing = super().to_listing(raw)
        vacant_positions = _items(raw.get("vacantPositions"))
        listing.location = _pick(raw, "city", "location")
        listing.posted_hint = _pick(raw, "date", "postedAt")
        listing.vacant_positions = vacant_positions
        listing.facets = {
            "jobIndustry": _pick(raw, "industry"),
            "postingDate": listing.posted_hint,
            "totalPositions": str(len(vacant_positions)) if vacant_positions else "",
        }
        return listing

    def to_detail(self, raw: Optional[Dict[str, Any]]) -> Optional[RawDetail]:
        if not raw:
            return None

        table = LabelTable(raw.get("detailMap"))
        apply_cell = table.raw("Apply Online if applicable")
        apply_href = _href(apply_cell)

        key_facts = []
        whatsapp = table.raw("WhatsApp Channel")
        if _text(whatsapp):
            key_facts.append(self._link_fact("WhatsApp Channel", whatsapp))
        if table.get("Online Applicants"):
            key_facts.append(f"Online Applicants: {table.get('Online Applicants')}")
        if _text(apply_cell):
            key_facts.append(self._link_fact("Apply Online", apply_cell))
        if table.get("Newspaper"):
            key_facts.append(f"Newspaper: {table.get('Newspaper')}")

        highlights = _items(raw.get("bulletHighlights"))
        website = table.raw("Organization Website")

        return RawDetail(
            title=_pick(raw, "title"),
            company_name=TextProcessor.first_non_empty(table.get("Organization"), _pick(raw, "company")),
            company_profile_url=_href(website) or _text(website),
            location=table.get("Vacancy Location", "Area / Town"),
            salary=table.get("Salary", "Salary Range", "Pay"),
            posted_at=table.get("Date Posted / Updated"),
            description=_pick(raw, "jobDescription"),
            sections=[DescriptionSection(heading="Key Highlights", items=highlights)],
            key_facts=key_facts,
            benefits=TextProcessor.split_items(table.get("Facilities", "Benefits")),
            job_details={
                "jobIndustry": table.get("Job Industry"),
                "jobType": table.get("Job Type"),
                "functionalArea": table.get("Category / Sector"),
                "totalPositions": table.get("Vacancy", "Total Positions"),
                "gender": table.get("Gender"),
                "careerLevel": table.get("Career Level"),
                "applyBefore": table.get("Expected Last Date"),
                "postingDate": table.get("Date Posted / Updated"),
                "workplaceType": table.get("Vacancy Location"),
                "workSetting": table.get("Area / Town"),
                "compensationDetails": table.get("Salary", "Salary Range"),
            },
            experience=table.get("Experience", "Experience Level"),
            education=table.get("Education"),
            apply_url=apply_href,
            external_apply_url=apply_href if apply_href and not apply_href.startswith(JOBZ_BASE_URL) else "",
        )

    @staticmethod
    def _link_fact(label: str, cell: Any) -> str:
        href = _href(cell)
        text = _text(cell)
        return f"{label}: {text} ({href})" if href else f"{label}: {text}"


ADAPTERS: Dict[str, SourceAdapter] = {
    INDEED: IndeedAdapter(),
    ROZEE: RozeeAdapter(),
    JOBZ: JobzAdapter(),
}


def get_adapter(source: str) -> SourceAdapter:
    try:
        return ADAPTERS[source.lower()]
    except KeyError:
        raise ValueError(f"Unknown job source: {source!r} (expected one of {', '.join(ADAPTERS)})")
