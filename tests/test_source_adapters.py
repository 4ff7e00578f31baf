import pytest

from jobboard_scraper.service.normalizer_service import RecordNormalizer
from jobboard_scraper.service.source_adapters import (
    extract_list_section,
    format_salary_range,
    get_adapter,
)


def test_format_salary_range():
    assert format_salary_range("50000", "80,000") == "PKR 50,000 - PKR 80,000"
    assert format_salary_range("60000", "60000") == "PKR 60,000"
    assert format_salary_range(None, "0", "Market competitive") == "Market competitive"


def test_extract_list_section_reads_bullets_until_next_heading():
    html = "<b>Required Qualifications</b><br>- BS CS<br>- 2 years<b>Other</b><br>- ignored"

    assert extract_list_section(html, "Required Qualifications") == ["BS CS", "2 years"]
    assert extract_list_section(html, "Missing") == []


def test_unknown_source_is_rejected():
    with pytest.raises(ValueError):
        get_adapter("monster")


def test_indeed_detail_labels_become_facets():
    adapter = get_adapter("indeed")
    listing = adapter.to_listing({
        "title": "Python Developer",
        "link": "https://pk.indeed.com/viewjob?jk=9f9f",
        "company": "Acme",
        "salaryOnCard": "PKR 90,000 a month",
    })
    detail = adapter.to_detail({
        "jobDescription": "Build services.",
        "detailSections": {
            "Job type:": "Full-time",
            "Shift and schedule": "Morning shift",
            "Pay": "PKR 100,000 a month",
        },
        "benefits": ["Health insurance", "Health insurance"],
    })

    record = RecordNormalizer().normalize("indeed", "Developer", listing, detail)

    assert listing.salary_hint == "PKR 90,000 a month"
    assert record.salary == "PKR 100,000 a month"
    assert record.job_details == {"jobType": "Full-time", "shiftAndSchedule": "Morning shift"}
    assert record.benefits == ["Health insurance"]
    assert record.job_id == "indeed-9f9f"


def test_rozee_sections_and_benefits():
    adapter = get_adapter("rozee")
    listing = adapter.to_listing({
        "title": "Backend Engineer",
        "link": "https://www.rozee.pk/acme-backend-engineer-lahore-jobs-1234567",
        "company": "Acme",
        "city": "Lahore",
        "salaryMin": "50000",
        "salaryMax": "80000",
    })
    detail = adapter.to_detail({
        "jobDescription": "Join our platform team.",
        "descriptionHtml": "<b>Required Qualifications</b><br>- BS CS<br>- 2 years",
        "keyResponsibilities": ["Design APIs", "Review code"],
        "skills": ["Python", "MongoDB"],
        "preferredQualifications": ["Medical"],
        "jobDetails": {
            "Industry": "Information Technology",
            "Total Positions": "3",
            "Minimum Experience": "2 Years",
            "Minimum Education": "Bachelors",
        },
    })

    record = RecordNormalizer().normalize("rozee", "Developer", listing, detail)

    assert record.job_id == "rozee-1234567"
    assert record.location == "Lahore"
    assert record.salary == "PKR 50,000 - PKR 80,000"
    assert record.benefits == ["Python", "MongoDB", "Medical"]
    assert record.experience == "2 Years"
    assert record.education == "Bachelors"
    assert record.job_details == {"jobIndustry": "Information Technology", "totalPositions": "3"}
    assert "Key Responsibilities:\n- Design APIs\n- Review code" in record.job_description
    assert "Required Qualifications:\n- BS CS\n- 2 years" in record.job_description


def test_jobz_key_facts_and_external_apply_url():
    adapter = get_adapter("jobz")
    listing = adapter.to_listing({
        "title": "Driver Jobs 2025",
        "link": "https://www.jobz.pk/driver-jobs-555/",
        "city": "Karachi",
        "date": "Jan 5, 2025",
        "industry": "Transport",
        "vacantPositions": ["Driver", "Cook"],
    })
    detail = adapter.to_detail({
        "detailMap": {
            "Organization": "Acme Logistics",
            "Apply Online if applicable": {"text": "Apply", "href": "https://careers.acme.test/apply"},
            "Newspaper": "Dawn",
            "Facilities": "Medical, Transport",
        },
        "bulletHighlights": ["Government jobs"],
    })

    record = RecordNormalizer().normalize("jobz", "Driver", listing, detail)

    assert record.job_id == "jobz-555"
    assert record.company_name == "Acme Logistics"
    assert record.external_apply_url == "https://careers.acme.test/apply"
    assert record.apply_now_url == "https://careers.acme.test/apply"
    assert record.benefits == ["Medical", "Transport"]
    assert record.job_details["totalPositions"] == "2"
    assert record.job_details["jobIndustry"] == "Transport"
    assert "Vacant Positions:\n- Driver\n- Cook" in record.job_description
    assert "Apply Online: Apply (https://careers.acme.test/apply)" in record.job_description
    assert "Newspaper: Dawn" in record.job_description


def test_jobz_on_site_apply_link_is_not_external():
    detail = get_adapter("jobz").to_detail({
        "detailMap": {"Apply Online if applicable": {"text": "Apply", "href": "https://www.jobz.pk/apply/555"}},
    })

    assert detail.apply_url == "https://www.jobz.pk/apply/555"
    assert detail.external_apply_url == ""


def test_extract_list_section_reads_strong_headings_inside_paragraphs():
    html = "<p><strong>Key Responsibilities</strong><br>- Build APIs<br>- Review code</p><p><strong>Perks</strong></p>"

    assert extract_list_section(html, "Key Responsibilities") == ["Build APIs", "Review code"]


def test_extract_list_section_reads_list_items_and_entities():
    html = "<div><b>Required Qualifications:</b><ul><li>BS &amp; MS</li><li>SQL</li></ul></div><b>Benefits</b>"

    assert extract_list_section(html, "Required Qualifications") == ["BS & MS", "SQL"]


def test_link_cells_give_their_href():
    listing = get_adapter("jobz").to_listing({
        "title": "Dev",
        "link": {"text": "Dev", "href": "https://www.jobz.pk/dev-jobs-2"},
    })

    assert listing.link == "https://www.jobz.pk/dev-jobs-2"
