from dataclasses import dataclass, field
from typing import List, Optional

from pydantic_settings import BaseSettings


DEFAULT_JOB_ROLES = [
    "Computer Operator",
    "Clerk",
    "Data Entry",
    "Intern",
    "Construction Worker",
    "Construction Manager",
    "Construction Project Manager",
    "Construction Coordinator",
    "Site Supervisor",
    "Developer",
    "Social Media Manager",
    "Graphic Designer",
    "Content Writer",
    "Automation",
    "AI",
]
DEFAULT_RESULTS_PER_ROLE = 1
DEFAULT_DETAIL_DELAY = 0.75
DEFAULT_ROLE_DELAY = 2.0
DEFAULT_CATEGORY_IDS = [242]


class Settings(BaseSettings):
    # Mongodb configuration
    MONGO_URI: str = "mongodb://127.0.0.1:27017"
    DATABASE_NAME: str = "job_scraper"
    JOBS_COLLECTION: str = "jobs"

    LOG_LEVEL: str = "INFO"

    # Role selection
    JOB_SCRAPER_ROLES: Optional[str] = None
    JOB_SCRAPER_LIMIT: Optional[int] = None
    JOB_SCRAPER_RESULTS_PER_ROLE: int = DEFAULT_RESULTS_PER_ROLE

    # Local storage
    SNAPSHOT_DIR: str = "jobs"
    GENERATED_POSTS_DIR: str = "generated_posts"

    # Article rewriting
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4.1-mini"

    # WordPress sites
    WORDPRESS_BASE_URL: str = ""
    WORDPRESS_USERNAME: str = ""
    WORDPRESS_PASSWORD: str = ""
    WORDPRESS_CATEGORY_IDS: Optional[str] = None
    WORDPRESS_PRIMARY_LABEL: str = "Primary WordPress Site"

    WORDPRESS_SECOND_BASE_URL: str = ""
    WORDPRESS_SECOND_USERNAME: str = ""
    WORDPRESS_SECOND_PASSWORD: str = ""
    WORDPRESS_SECOND_CATEGORY_IDS: Optional[str] = None
    WORDPRESS_SECOND_LABEL: str = "JobsMagzine"

    class Config:
        env_file = ".env"  # Load values from .env file
        extra = "ignore"


def parse_category_ids(raw_value: Optional[str], fallback: List[int]) -> List[int]:
    """Parse a comma-separated list of positive category ids."""
    if not raw_value:
        return list(fallback)

    parsed = []
    for segment in str(raw_value).split(","):
        segment = segment.strip()
        if segment.isdigit() and int(segment) > 0:
            parsed.append(int(segment))

    return parsed or list(fallback)


def parse_role_filter(raw_value: Optional[str]) -> List[str]:
    if not raw_value:
        return []
    return [role.strip() for role in raw_value.split(",") if role.strip()]


@dataclass
class PipelineConfig:
    """Run-time options handed to the scrape pipeline."""

    roles: List[str] = field(default_factory=lambda: list(DEFAULT_JOB_ROLES))
    results_per_role: Optional[int] = DEFAULT_RESULTS_PER_ROLE
    detail_delay: float = DEFAULT_DETAIL_DELAY
    role_delay: float = DEFAULT_ROLE_DELAY
    role_timeout: Optional[float] = None

    @classmethod
    def from_settings(cls, app_settings: "Settings") -> "PipelineConfig":
        roles = list(DEFAULT_JOB_ROLES)

        role_filter = [role.lower() for role in parse_role_filter(app_settings.JOB_SCRAPER_ROLES)]
        if role_filter:
            roles = [role for role in roles if role.lower() in role_filter]

        limit = app_settings.JOB_SCRAPER_LIMIT
        if limit and limit > 0:
            roles = roles[:limit]

        results_per_role = app_settings.JOB_SCRAPER_RESULTS_PER_ROLE
        return cls(
            roles=roles,
            results_per_role=results_per_role if results_per_role and results_per_role > 0 else None,
        )


settings = Settings()
