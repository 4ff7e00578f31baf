import re

from jobboard_scraper.service.identity_service import (
    MAX_URL_TOKEN_LENGTH,
    extract_structural_token,
    resolve_job_id,
    sanitize_url_token,
)


def test_query_parameter_token_is_used():
    assert resolve_job_id("https://x.test/viewjob?jk=abc123", "indeed") == "indeed-abc123"
    assert resolve_job_id("https://pk.indeed.com/jobs?q=dev&vjk=f00d42", "indeed") == "indeed-f00d42"


def test_path_number_token_is_used():
    assert resolve_job_id("https://www.jobz.pk/software-developer-jobs-123/", "jobz") == "jobz-123"
    assert extract_structural_token("https://www.rozee.pk/company/job/1750020") == "1750020"


def test_identity_is_deterministic():
    url = "https://www.rozee.pk/acme-developer-lahore-jobs-998877"
    assert resolve_job_id(url, "rozee") == resolve_job_id(url, "rozee")


def test_sanitized_url_fallback():
    job_id = resolve_job_id("https://careers.example.com/openings/backend-engineer", "indeed")

    assert job_id.startswith("indeed-")
    token = job_id[len("indeed-"):]
    assert token == sanitize_url_token("https://careers.example.com/openings/backend-engineer")
    assert len(token) <= MAX_URL_TOKEN_LENGTH
    assert re.fullmatch(r"[A-Za-z0-9-]+", token)
    assert not token.startswith("-") and not token.endswith("-")


def test_missing_url_falls_back_to_random_id():
    first = resolve_job_id("", "jobz")
    second = resolve_job_id(None, "jobz")

    assert re.fullmatch(r"jobz-[0-9a-f]{12}", first)
    assert first != second
