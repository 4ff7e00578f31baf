import re
from dataclasses import dataclass
from html import escape
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, Tag
from openai import OpenAI

from jobboard_scraper.core.config import settings
from jobboard_scraper.models.errors import ContentGenerationError
from jobboard_scraper.models.job_models import JobRecord
from jobboard_scraper.utils.llm_prompt import create_job_post_prompt
from jobboard_scraper.utils.logging import setup_logger, RUNTIME
from jobboard_scraper.utils.text_processor import TextProcessor

logger = setup_logger(__name__)


EXCERPT_LENGTH = 280
DIVIDER_CLASS = "divider"

ARTICLE_OPEN_PATTERN = re.compile(r"^<article[\s>]", re.IGNORECASE)
CODE_FENCE_PATTERN = re.compile(r"^```(?:html)?\s*|\s*```$", re.IGNORECASE)


# =============================================================================
# HTML helpers
# =============================================================================


def _visible_text(html: str) -> str:
    return TextProcessor.strip_tags(html)


def _node_text(node: PageElement) -> str:
    if isinstance(node, Tag):
        return TextProcessor.clean_text(node.get_text(" ", strip=True))
    return TextProcessor.clean_text(str(node))


def _is_divider(node: Optional[PageElement]) -> bool:
    return isinstance(node, Tag) and node.name == "div" and DIVIDER_CLASS in (node.get("class") or [])


def _is_blank(node: PageElement) -> bool:
    return isinstance(node, NavigableString) and not node.strip()


def _next_significant(node: PageElement) -> Optional[PageElement]:
    sibling = node.next_sibling
    while sibling is not None and _is_blank(sibling):
        sibling = sibling.next_sibling
    return sibling


def _previous_significant(node: PageElement) -> Optional[PageElement]:
    sibling = node.previous_sibling
    while sibling is not None and _is_blank(sibling):
        sibling = sibling.previous_sibling
    return sibling


def _section_body(heading: Tag) -> List[PageElement]:
    """Siblings after an ``h2`` up to the next ``h2`` or divider."""
    body = []
    for sibling in heading.next_siblings:
        if isinstance(sibling, Tag) and (sibling.name == "h2" or _is_divider(sibling)):
            break
        body.append(sibling)
    return body


def _drop_section(heading: Tag, body: List[PageElement]) -> None:
    wrapper = heading.parent
    for node in body:
        node.extract()
    heading.decompose()

    # A wrapper such as <section> left with nothing visible goes too
    while (
        isinstance(wrapper, Tag)
        and wrapper.name not in ("article", "[document]")
        and not _node_text(wrapper)
    ):
        parent = wrapper.parent
        wrapper.decompose()
        wrapper = parent


def ensure_article(html: str) -> str:
    html = CODE_FENCE_PATTERN.sub("", html.strip())
    if not ARTICLE_OPEN_PATTERN.match(html):
        html = f"<article>\n{html}\n</article>"
    return html


def clean_article_html(article_html: str) -> str:
    """
    Remove sections the model could not fill.

    An ``h2`` section disappears when its body is empty or only a
    placeholder such as "Not provided"; dividers left with nothing after
    them (or stacked against each other) are dropped as well.
    """
    soup = BeautifulSoup(ensure_article(article_html), "html.parser")

    for heading in soup.find_all("h2"):
        if heading.decomposed:
            continue
        body = _section_body(heading)
        content_text = " ".join(text for text in (_node_text(node) for node in body) if text)
        if not _node_text(heading) or not content_text or TextProcessor.is_placeholder(content_text):
            _drop_section(heading, body)

    for divider in soup.find_all(_is_divider):
        following = _next_significant(divider)
        if following is None or _is_divider(following):
            divider.decompose()

    for divider in soup.find_all(_is_divider):
        if _previous_significant(divider) is None and divider.parent is not None and divider.parent.name == "article":
            divider.decompose()

    return str(soup)


def build_excerpt(html: str, length: int = EXCERPT_LENGTH) -> str:
    plain = _visible_text(html)
    return plain[:length] if plain else ""


def derive_title(job: JobRecord, role: Optional[str] = None) -> str:
    return TextProcessor.first_non_empty(
        job.job_role,
        f"{role} Opportunity" if role else None,
        "Job Opportunity",
    )


def wrap_html_document(title: Optional[str], body_html: str) -> str:
    safe_title = escape(title or "Job Opportunity")
    return (
        "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n  <meta charset=\"utf-8\" />\n"
        f"  <title>{safe_title}</title>\n</head>\n<body>\n{body_html}\n</body>\n</html>"
    )


# =============================================================================
# Article Writer
# =============================================================================


@dataclass
class GeneratedArticle:
    title: str
    html: str
    excerpt: str


class ArticleWriter:
    """Rewrites stored job records into original article HTML."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[OpenAI] = None,
        attempts: int = 2,
    ):
        self._api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self._model = model or settings.OPENAI_MODEL
        self._client = client
        if self._client is None and self._api_key:
            self._client = OpenAI(api_key=self._api_key, base_url=base_url or settings.OPENAI_BASE_URL)
        self._attempts = max(1, attempts)

    @property
    def configured(self) -> bool:
        return self._client is not None

    def _complete(self, prompt: str) -> str:
        if self._client is None:
            raise ContentGenerationError("OPENAI_API_KEY is not set")

        error: Any = None
        for attempt in range(self._attempts):
            try:
                response = self._client.responses.create(
                    model=self._model,
                    input=prompt,
                )
                output = (response.output_text or "").strip()
                if not output:
                    raise ContentGenerationError("No content returned from OpenAI")
                return output
            except Exception as e:
                logger.warning(f"Article generation attempt {attempt + 1} failed: {e}")
                error = e

        raise ContentGenerationError(f"OpenAI request failed: {error}")

    def build_payload(self, job: JobRecord, role: Optional[str]) -> Dict[str, Any]:
        job_data = job.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude={"published_to_wordpress", "wordpress_post_id", "wordpress_post_url", "published_at"},
        )
        return {"role": role, "job": job_data}

    def write(self, job: JobRecord, role: Optional[str] = None) -> GeneratedArticle:
        role = role or job.search_role
        prompt = create_job_post_prompt(self.build_payload(job, role))
        logger.info(f"Generating article for {job.job_id}", extra={"operation": str(RUNTIME.PUBLISH)})

        article_html = clean_article_html(self._complete(prompt))
        return GeneratedArticle(
            title=derive_title(job, role),
            html=article_html,
            excerpt=build_excerpt(article_html),
        )
