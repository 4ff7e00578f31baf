"""
WordPress REST client for draft posts.

Drafts are created through ``/wp-json/wp/v2/posts`` with HTTP basic auth
(application passwords). Plugins and proxies in front of WordPress do not
always answer with the stock post object, so the post id and link are
looked up in every place they have been seen.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import aiohttp

from jobboard_scraper.core.config import DEFAULT_CATEGORY_IDS, Settings, parse_category_ids, settings
from jobboard_scraper.models.errors import WordPressPublishError
from jobboard_scraper.utils.logging import setup_logger, RUNTIME

logger = setup_logger(__name__)

POSTS_ENDPOINT = "/wp-json/wp/v2/posts"
PREVIEW_LENGTH = 400


@dataclass
class WordPressSite:
    key: str
    label: str
    base_url: str
    username: str
    password: str
    categories: List[int] = field(default_factory=lambda: list(DEFAULT_CATEGORY_IDS))

    @property
    def name(self) -> str:
        return self.label or self.key

    def missing_settings(self) -> List[str]:
        prefix = "WORDPRESS_" if self.key == "primary" else "WORDPRESS_SECOND_"
        missing = []
        if not self.base_url:
            missing.append(f"{self.name}: {prefix}BASE_URL")
        if not self.username:
            missing.append(f"{self.name}: {prefix}USERNAME")
        if not self.password:
            missing.append(f"{self.name}: {prefix}PASSWORD")
        return missing


@dataclass
class WordPressPost:
    id: Optional[Any]
    link: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict)


def sites_from_settings(app_settings: Optional[Settings] = None) -> Dict[str, WordPressSite]:
    app_settings = app_settings or settings
    primary_categories = parse_category_ids(app_settings.WORDPRESS_CATEGORY_IDS, DEFAULT_CATEGORY_IDS)
    return {
        "primary": WordPressSite(
            key="primary",
            label=app_settings.WORDPRESS_PRIMARY_LABEL,
            base_url=app_settings.WORDPRESS_BASE_URL.rstrip("/"),
            username=app_settings.WORDPRESS_USERNAME,
            password=app_settings.WORDPRESS_PASSWORD,
            categories=primary_categories,
        ),
        "secondary": WordPressSite(
            key="secondary",
            label=app_settings.WORDPRESS_SECOND_LABEL,
            base_url=app_settings.WORDPRESS_SECOND_BASE_URL.rstrip("/"),
            username=app_settings.WORDPRESS_SECOND_USERNAME,
            password=app_settings.WORDPRESS_SECOND_PASSWORD,
            categories=parse_category_ids(app_settings.WORDPRESS_SECOND_CATEGORY_IDS, primary_categories),
        ),
    }


def get_site(site_key: str = "primary", app_settings: Optional[Settings] = None) -> WordPressSite:
    sites = sites_from_settings(app_settings)
    return sites.get(site_key) or sites["primary"]


def _preview(value: Any) -> str:
    text = value if isinstance(value, str) else json.dumps(value, indent=2, default=str)
    return text if len(text) <= PREVIEW_LENGTH else f"{text[:PREVIEW_LENGTH]}..."


def extract_post(payload: Any, headers: Optional[Mapping[str, str]] = None) -> WordPressPost:
    """
    Pull the post id and link out of a create-post response.

    Raises:
        WordPressPublishError: when the response is not an object, reports
            ``success: false`` or names neither an id nor a link.
    """
    if isinstance(payload, str) and payload.strip():
        try:
            payload = json.loads(payload)
        except ValueError:
            raise WordPressPublishError(f"Unexpected WordPress response format (text): {_preview(payload)}")

    if not payload or not isinstance(payload, dict):
        raise WordPressPublishError("WordPress API returned an empty response")

    data = payload.get("data") if isinstance(payload.get("data"), dict) else {}

    if payload.get("success") is False:
        message = payload.get("message") or "WordPress API rejected the request"
        extra = json.dumps(payload["data"]) if isinstance(payload.get("data"), dict) else payload.get("data") or ""
        raise WordPressPublishError(f"{message}: {extra}" if extra else message)

    guid = payload.get("guid") if isinstance(payload.get("guid"), dict) else {}

    post_id = next(
        (value for value in (payload.get("id"), payload.get("post_id"), data.get("id"), data.get("post_id")) if value),
        None,
    )
    link = next(
        (
            value
            for value in (
                payload.get("link"),
                guid.get("rendered"),
                data.get("link"),
                data.get("permalink"),
                (headers or {}).get("Location"),
            )
            if value
        ),
        None,
    )
    if isinstance(link, str) and link.startswith("<") and link.endswith(">"):
        link = link[1:-1]

    if not post_id and not link:
        raise WordPressPublishError(f"WordPress API response missing post identifier: {_preview(payload)}")

    return WordPressPost(id=post_id, link=link, raw=payload)


class WordPressClient:
    def __init__(self, site: WordPressSite, timeout: float = 30.0):
        self.site = site
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.site.base_url}{POSTS_ENDPOINT}"

    async def create_draft(self, title: str, content: str, excerpt: str = "") -> WordPressPost:
        if not self.site.base_url:
            raise WordPressPublishError("WordPress base URL is not configured")

        body = {
            "title": title,
            "status": "draft",
            "content": content,
            "excerpt": excerpt,
            "categories": self.site.categories or list(DEFAULT_CATEGORY_IDS),
        }
        auth = aiohttp.BasicAuth(self.site.username, self.site.password)
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout, auth=auth) as session:
                async with session.post(self.endpoint, json=body) as response:
                    text = await response.text()
                    if response.status >= 400:
                        raise WordPressPublishError(
                            f"WordPress returned HTTP {response.status} for {self.site.name}: {_preview(text)}"
                        )
                    post = extract_post(text, response.headers)
        except aiohttp.ClientError as e:
            raise WordPressPublishError(f"WordPress request to {self.site.name} failed: {e}") from e

        logger.info(
            f"Published WordPress post ({self.site.name}): {post.link or post.id}",
            extra={"operation": str(RUNTIME.PUBLISH)},
        )
        return post
