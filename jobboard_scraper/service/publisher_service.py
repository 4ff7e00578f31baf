"""
Turns stored job records into WordPress drafts.

Each job is re-read from the store right before generation so a record
published by another pass in the meantime is not posted twice; the final
``mark_published`` is conditional for the same reason.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from jobboard_scraper.core.config import settings
from jobboard_scraper.models.job_models import JobRecord
from jobboard_scraper.service.content_service import ArticleWriter, wrap_html_document
from jobboard_scraper.service.mongodb_service import MongoDBService
from jobboard_scraper.service.wordpress_service import WordPressClient, WordPressPost, WordPressSite, get_site
from jobboard_scraper.utils.file_storage import GeneratedPostWriter
from jobboard_scraper.utils.logging import setup_logger, RUNTIME

logger = setup_logger(__name__)


@dataclass
class PublishResult:
    job_id: str
    role: str
    title: str
    html_path: Optional[Path] = None
    post: Optional[WordPressPost] = None
    site: str = "primary"
    marked: bool = False
    error: Optional[str] = None

    @property
    def published(self) -> bool:
        return self.post is not None


class ContentPublisher:
    def __init__(
        self,
        store: MongoDBService,
        writer: Optional[ArticleWriter] = None,
        wp_client: Optional[WordPressClient] = None,
        post_writer: Optional[GeneratedPostWriter] = None,
        site: Optional[WordPressSite] = None,
    ):
        self.store = store
        self.writer = writer or ArticleWriter()
        if wp_client is None:
            wp_client = WordPressClient(site or get_site("primary"))
        self.wp_client = wp_client
        self.post_writer = post_writer or GeneratedPostWriter(settings.GENERATED_POSTS_DIR)

    @property
    def site(self) -> WordPressSite:
        return self.wp_client.site

    def missing_configuration(self) -> List[str]:
        missing = []
        if not self.writer.configured:
            missing.append("OPENAI_API_KEY")
        missing.extend(self.site.missing_settings())
        return missing

    async def publish_one(self, job: JobRecord, index: int = 0) -> PublishResult:
        role = job.search_role
        article = self.writer.write(job, role)

        filename = self.post_writer.build_filename(role, job.job_id, article.title, index)
        html_path = self.post_writer.write(filename, wrap_html_document(article.title, article.html))

        result = PublishResult(
            job_id=job.job_id,
            role=role,
            title=article.title,
            html_path=html_path,
            site=self.site.key,
        )

        try:
            result.post = await self.wp_client.create_draft(article.title, article.html, article.excerpt)
        except Exception as e:
            result.error = str(e)
            logger.error(f"Failed to publish WordPress post for role {role} on {self.site.name}: {e}")
            return result

        result.marked = self.store.mark_published(job.job_id, result.post.id, result.post.link)
        return result

    async def publish(self, records: Sequence[JobRecord]) -> List[PublishResult]:
        if not records:
            logger.info("No jobs to publish.")
            return []

        missing = self.missing_configuration()
        if missing:
            logger.warning(
                f"Skipping AI content generation and WordPress publishing for \"{self.site.name}\" "
                f"because these settings are missing: {', '.join(missing)}"
            )
            return []

        logger.info(
            f"Publishing drafts to {self.site.name} ({self.site.base_url})",
            extra={"operation": str(RUNTIME.PUBLISH)},
        )

        results: List[PublishResult] = []
        for index, record in enumerate(records):
            if record.published_to_wordpress:
                logger.info(f"Already published to WordPress: {record.job_role} (jobId: {record.job_id})")
                continue

            try:
                latest = self.store.get_job(record.job_id)
                if latest is None:
                    logger.warning(f"Job not found in database: {record.job_id}")
                    continue
                if latest.published_to_wordpress:
                    logger.info(f"Already published (checked DB): {latest.job_role} (jobId: {latest.job_id})")
                    continue

                results.append(await self.publish_one(latest, index))
            except Exception as e:
                logger.error(f"Failed to generate post for job {record.job_id}: {e}")

        for result in results:
            logger.info(f"Generated document: {result.html_path} [{result.site}]")

        return results

    async def publish_backlog(self, limit: int = 50) -> List[PublishResult]:
        return await self.publish(self.store.find_unpublished(limit))
