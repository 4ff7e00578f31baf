"""
Job identity resolution.

Every stored job is keyed by ``<source>-<token>``. The token comes from the
listing URL whenever the URL carries any usable signal, so re-scraping the same
posting always yields the same id. Only a missing or signal-free URL falls back
to a random token; such records cannot be deduplicated on later runs.
"""

import re
import secrets
from typing import Optional
from urllib.parse import parse_qs, urlparse

from jobboard_scraper.utils.logging import setup_logger

logger = setup_logger(__name__)


ID_QUERY_PARAMS = ("vjk", "jk", "jobId", "job_id", "id")
PATH_ID_PATTERN = re.compile(r"jobs?-([0-9]+)", re.IGNORECASE)
NUMERIC_SEGMENT_PATTERN = re.compile(r"^[0-9]+$")
UNSAFE_TOKEN_PATTERN = re.compile(r"[^a-zA-Z0-9_-]")
PROTOCOL_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
SEPARATOR_RUN_PATTERN = re.compile(r"[^a-zA-Z0-9]+")

MAX_URL_TOKEN_LENGTH = 40
RANDOM_TOKEN_BYTES = 6


def extract_structural_token(url: Optional[str]) -> Optional[str]:
    """Return the listing's native id from a query parameter or path segment."""
    if not url:
        return None

    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    query = parse_qs(parsed.query)
    for param in ID_QUERY_PARAMS:
        for value in query.get(param, []):
            token = UNSAFE_TOKEN_PATTERN.sub("", value)
            if token:
                return token

    match = PATH_ID_PATTERN.search(parsed.path)
    if match:
        return match.group(1)

    segments = [segment for segment in parsed.path.split("/") if segment]
    for segment in reversed(segments):
        if NUMERIC_SEGMENT_PATTERN.match(segment):
            return segment

    return None


def sanitize_url_token(url: Optional[str]) -> str:
    if not url:
        return ""
    token = PROTOCOL_PATTERN.sub("", url.strip())
    token = SEPARATOR_RUN_PATTERN.sub("-", token).strip("-")
    return token[-MAX_URL_TOKEN_LENGTH:].strip("-")


def random_job_id(source: str) -> str:
    return f"{source}-{secrets.token_hex(RANDOM_TOKEN_BYTES)}"


def resolve_job_id(url: Optional[str], source: str) -> str:
    """Derive the namespaced job id for a listing URL."""
    token = extract_structural_token(url)
    if token:
        return f"{source}-{token}"

    token = sanitize_url_token(url)
    if token:
        return f"{source}-{token}"

    job_id = random_job_id(source)
    logger.warning(f"No identity signal in URL {url!r}; using random id {job_id} (will not dedupe)")
    return job_id
