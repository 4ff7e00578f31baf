import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup


# =============================================================================
# Text Processing Utilities
# =============================================================================


NBSP_PATTERN = re.compile(r"\u00a0|&nbsp;", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")
UNSAFE_FILENAME_PATTERN = re.compile(r'[<>:"/\\|?*]+')

PLACEHOLDER_PATTERNS = [
    re.compile(r"if you require alternative methods", re.IGNORECASE),
    re.compile(r"information not (provided|available)", re.IGNORECASE),
    re.compile(r"details not (provided|available)", re.IGNORECASE),
    re.compile(r"^not (provided|available)$", re.IGNORECASE),
    re.compile(r"^n/?a$", re.IGNORECASE),
]


class TextProcessor:
    @staticmethod
    def clean_text(value: Optional[str]) -> str:
        """Trim and single-space a raw text fragment; falsy input gives ""."""
        if not value:
            return ""
        text = NBSP_PATTERN.sub(" ", str(value))
        return WHITESPACE_PATTERN.sub(" ", text).strip()

    @staticmethod
    def clean_multiline(value: Optional[str]) -> list[str]:
        if not value:
            return []
        lines = (TextProcessor.clean_text(line) for line in str(value).splitlines())
        return [line for line in lines if line]

    @staticmethod
    def strip_tags(html: Optional[str]) -> str:
        """Visible text of an HTML fragment, entities decoded."""
        if not html:
            return ""
        if "<" not in html and "&" not in html:
            return TextProcessor.clean_text(html)
        return TextProcessor.clean_text(BeautifulSoup(html, "html.parser").get_text(" ", strip=True))

    @staticmethod
    def split_items(value: Optional[str], separators: str = r",|;|\n") -> list[str]:
        if not value:
            return []
        items = (TextProcessor.clean_text(item) for item in re.split(separators, str(value)))
        return [item for item in items if item]

    @staticmethod
    def first_non_empty(*values: Optional[str]) -> str:
        for value in values:
            text = TextProcessor.clean_text(value)
            if text:
                return text
        return ""

    @staticmethod
    def is_placeholder(value: Optional[str]) -> bool:
        text = TextProcessor.clean_text(value)
        return any(pattern.search(text) for pattern in PLACEHOLDER_PATTERNS)

    @staticmethod
    def dedupe(items: Iterable[str]) -> list[str]:
        seen = set()
        unique = []
        for item in items:
            if item and item not in seen:
                seen.add(item)
                unique.append(item)
        return unique

    @staticmethod
    def safe_role_filename(role: Optional[str]) -> str:
        if not role:
            return "role"
        cleaned = UNSAFE_FILENAME_PATTERN.sub("", role)
        return WHITESPACE_PATTERN.sub(" ", cleaned).strip() or "role"

    @staticmethod
    def normalize_url(url: str, domain: str) -> str:
        if not url:
            return ""
        if url.startswith("http"):
            return url
        if url.startswith("//"):
            return f"https:{url}"
        if url.startswith("/"):
            return f"https://{domain}{url}"
        return f"https://{domain}/{url}"
