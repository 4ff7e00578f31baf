import pytest

from jobboard_scraper.models.errors import MalformedListingError
from jobboard_scraper.models.job_models import DescriptionSection, RawDetail, RawListing
from jobboard_scraper.service.normalizer_service import (
    RecordNormalizer,
    build_description,
    extract_benefits,
    pick_posted_at,
)


@pytest.fixture
def normalizer():
    return RecordNormalizer()


def test_developer_listing_without_detail(normalizer):
    listing = RawListing(
        title="Software Developer",
        link="https://x.test/viewjob?jk=abc123",
        company="Acme",
        location="Lahore",
    )

    record = normalizer.normalize("indeed", "Developer", listing)

    assert record.job_id == "indeed-abc123"
    assert record.search_role == "Developer"
    assert record.job_role == "Software Developer"
    assert record.company_name == "Acme"
    assert record.location == "Lahore"
    assert record.job_description == ""
    assert record.benefits == []
    assert record.job_details == {}
    assert record.apply_now_url == "https://x.test/viewjob?jk=abc123"
    assert record.error is None


def test_description_falls_back_to_snippet(normalizer):
    listing = RawListing(title="Cashier", link="https://x.test/viewjob?jk=1", snippet="Great opportunity in retail")

    record = normalizer.normalize("indeed", "Clerk", listing)

    assert record.job_description == "Great opportunity in retail"


def test_snippet_markup_and_entities_are_decoded(normalizer):
    listing = RawListing(
        title="Research Engineer",
        link="https://x.test/viewjob?jk=2",
        snippet="Salary &amp; benefits <b>R&amp;D</b> team",
    )

    record = normalizer.normalize("indeed", "Developer", listing)

    assert record.job_description == "Salary & benefits R&D team"


def test_benefits_are_deduplicated():
    assert extract_benefits(["Health Insurance", "Health Insurance", "Paid Leave"]) == [
        "Health Insurance",
        "Paid Leave",
    ]


def test_benefit_boilerplate_is_filtered():
    assert extract_benefits(["Benefits:", "Pulled from the full job description", "Fuel allowance"]) == [
        "Fuel allowance"
    ]


def test_empty_facets_never_appear(normalizer):
    listing = RawListing(title="Clerk", link="https://x.test/viewjob?jk=2", facets={"jobIndustry": ""})
    detail = RawDetail(job_details={"jobType": "Full-time", "gender": "  ", "unknownFacet": "x"})

    record = normalizer.normalize("indeed", "Clerk", listing, detail)

    assert record.job_details == {"jobType": "Full-time"}


def test_detail_values_take_precedence(normalizer):
    listing = RawListing(
        title="Dev",
        link="https://x.test/viewjob?jk=3",
        company="Card Co",
        salary_hint="Competitive",
        posted_hint="3 days ago",
    )
    detail = RawDetail(
        title="Senior Developer",
        company_name="Acme Pvt Ltd",
        salary="PKR 150,000 - PKR 200,000",
        posted_at="Not provided",
        apply_url="https://apply.test/3",
    )

    record = normalizer.normalize("indeed", "Developer", listing, detail)

    assert record.job_role == "Senior Developer"
    assert record.company_name == "Acme Pvt Ltd"
    assert record.salary == "PKR 150,000 - PKR 200,000"
    assert record.posted_at == "3 days ago"
    assert record.apply_now_url == "https://apply.test/3"


def test_experience_and_education_derived_from_description_items(normalizer):
    listing = RawListing(title="Dev", link="https://x.test/viewjob?jk=4")
    detail = RawDetail(
        description_items=["Build APIs", "3+ years of experience with Python", "Bachelor's degree in CS"],
    )

    record = normalizer.normalize("indeed", "Developer", listing, detail)

    assert record.experience == "3+ years of experience with Python"
    assert record.education == "Bachelor's degree in CS"


def test_error_discards_detail_and_is_recorded(normalizer):
    listing = RawListing(title="Dev", link="https://x.test/viewjob?jk=5", snippet="Short summary")
    detail = RawDetail(description="Full description", benefits=["Medical"])

    record = normalizer.normalize("indeed", "Developer", listing, detail, error="detail page timed out")

    assert record.error == "detail page timed out"
    assert record.job_description == "Short summary"
    assert record.benefits == []


def test_empty_title_is_malformed(normalizer):
    listing = RawListing(title="   ", link="https://x.test/viewjob?jk=6")

    with pytest.raises(MalformedListingError) as exc_info:
        normalizer.normalize("indeed", "Developer", listing)

    assert exc_info.value.source == "indeed"
    assert "title" in exc_info.value.reason


def test_description_sections_are_joined_with_blank_lines():
    listing = RawListing(title="Dev", link="https://x.test/1", vacant_positions=["Driver", "Cook"])
    detail = RawDetail(
        description="Intro text",
        sections=[
            DescriptionSection(heading="Key Responsibilities", items=["Drive", "Cook"]),
            DescriptionSection(heading="Required Qualifications", items=[]),
        ],
        key_facts=["Newspaper: Dawn"],
    )

    assert build_description(listing, detail) == (
        "Intro text\n\n"
        "Key Responsibilities:\n- Drive\n- Cook\n\n"
        "Vacant Positions:\n- Driver\n- Cook\n\n"
        "Newspaper: Dawn"
    )


def test_pick_posted_at_skips_placeholders():
    assert pick_posted_at("N/A", "", "Posted 2 days ago") == "Posted 2 days ago"
