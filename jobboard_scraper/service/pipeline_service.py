"""
Scrape pipeline: raw listings -> canonical records -> deduplicated store.

Listings for one role are enriched and persisted strictly one after another;
no two records from the same run race each other in-process.

The store is only checked for reachability when it is opened. If MongoDB
goes away mid-run, each insert comes back as a failed outcome and the run
carries on, so the outage shows up as ``failed`` counts in the summaries.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from jobboard_scraper.core.config import PipelineConfig
from jobboard_scraper.models.errors import EnrichmentError, MalformedListingError
from jobboard_scraper.models.job_models import JobRecord
from jobboard_scraper.models.outcome_models import RoleSummary, RunSummary
from jobboard_scraper.service.mongodb_service import MongoDBService
from jobboard_scraper.service.normalizer_service import RecordNormalizer
from jobboard_scraper.service.source_adapters import get_adapter
from jobboard_scraper.utils.file_storage import SnapshotFileManager
from jobboard_scraper.utils.logging import setup_logger, RUNTIME

logger = setup_logger(__name__)


# =============================================================================
# Listing sources
# =============================================================================


class ListingSource(Protocol):
    """What a scraper must provide for one job board."""

    source: str

    async def fetch_listings(self, role: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        ...

    async def fetch_detail(self, raw_listing: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...


class EntryListingSource:
    """
    Serves already-extracted entries of the form
    ``{"listing": {...}, "detail": {...} | None, "detailError": str | None}``.
    """

    def __init__(self, source: str, entries: Optional[Iterable[Dict[str, Any]]] = None):
        self.source = source
        self.adapter = get_adapter(source)
        self._entries: List[Dict[str, Any]] = list(entries or [])
        self._details: Dict[str, Dict[str, Any]] = {}

    def _load_entries(self, role: str) -> List[Dict[str, Any]]:
        return self._entries

    def _link_of(self, raw_listing: Any) -> str:
        try:
            return self.adapter.to_listing(raw_listing).link
        except Exception as e:
            logger.warning(f"Unreadable {self.source} listing, no detail lookup: {e}")
            return ""

    async def fetch_listings(self, role: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        listings = []
        self._details = {}
        for entry in self._load_entries(role):
            listing = entry.get("listing") or {}
            listings.append(listing)
            link = self._link_of(listing)
            if link:
                self._details[link] = entry
        return listings[:limit] if limit else listings

    async def fetch_detail(self, raw_listing: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        link = self._link_of(raw_listing)
        entry = self._details.get(link) if link else None
        if not entry:
            return None
        if entry.get("detailError"):
            raise EnrichmentError(entry["detailError"])
        return entry.get("detail")


class SnapshotListingSource(EntryListingSource):
    """Replays raw extractions saved under the snapshot directory."""

    def __init__(self, source: str, file_manager: SnapshotFileManager):
        super().__init__(source)
        self.file_manager = file_manager

    def _load_entries(self, role: str) -> List[Dict[str, Any]]:
        return self.file_manager.load_entries(self.source, role)


# =============================================================================
# Pipeline
# =============================================================================


class ScrapePipeline:
    def __init__(
        self,
        store: MongoDBService,
        config: Optional[PipelineConfig] = None,
        normalizer: Optional[RecordNormalizer] = None,
    ):
        self.store = store
        self.config = config or PipelineConfig()
        self.normalizer = normalizer or RecordNormalizer()

    async def collect_role_records(
        self,
        listing_source: ListingSource,
        role: str,
    ) -> Tuple[List[JobRecord], int, int]:
        """
        Fetch, enrich and normalize one role's listings.

        Returns:
            (records, dropped, degraded)
        """
        source = listing_source.source
        adapter = get_adapter(source)
        limit = self.config.results_per_role

        raw_listings = await listing_source.fetch_listings(role, limit)
        if limit and len(raw_listings) > limit:
            logger.info(f"Limiting to first {limit} job(s) for: {role} on {source}")
            raw_listings = raw_listings[:limit]
        logger.info(f"Found {len(raw_listings)} {source} listings for: {role}")

        records: List[JobRecord] = []
        dropped = 0
        degraded = 0

        for index, raw_listing in enumerate(raw_listings):
            try:
                listing = adapter.to_listing(raw_listing)
                self.normalizer.validate(source, listing)
            except MalformedListingError as e:
                dropped += 1
                logger.warning(f"Skipping malformed {source} listing at position {index + 1}: {e.reason}")
                continue
            except Exception as e:
                dropped += 1
                logger.error(f"Dropping unreadable {source} listing at position {index + 1}: {e}")
                continue

            detail = None
            error = None
            try:
                detail = adapter.to_detail(await listing_source.fetch_detail(raw_listing))
            except Exception as e:
                error = str(e) or e.__class__.__name__
                degraded += 1
                logger.warning(f"Unable to enrich job \"{listing.title}\": {error}")

            try:
                record = self.normalizer.normalize(source, role, listing, detail=detail, error=error)
            except Exception as e:
                dropped += 1
                logger.error(f"Dropping {source} listing \"{listing.title}\" that could not be normalized: {e}")
                continue
            records.append(record)
            logger.info(f"Collected job ({len(records)}/{len(raw_listings)}): {record.job_role}")

            if self.config.detail_delay and index < len(raw_listings) - 1:
                await asyncio.sleep(self.config.detail_delay)

        return records, dropped, degraded

    async def run_role(self, listing_source: ListingSource, role: str) -> Tuple[List[JobRecord], RoleSummary]:
        """Scrape and persist one role; returns the newly saved records."""
        source = listing_source.source
        logger.info(f"Scraping role: {role} on {source}", extra={"operation": str(RUNTIME.SCRAPE)})

        collect = self.collect_role_records(listing_source, role)
        try:
            if self.config.role_timeout:
                records, dropped, degraded = await asyncio.wait_for(collect, self.config.role_timeout)
            else:
                records, dropped, degraded = await collect
        except asyncio.TimeoutError:
            message = f"timed out after {self.config.role_timeout}s; nothing persisted"
            logger.error(f"Role \"{role}\" on {source} {message}")
            return [], RoleSummary(role=role, source=source, error=message)

        saved, outcomes = self.store.persist_role_jobs(role, records)
        summary = self.store.summarize(role, outcomes, dropped=dropped, source=source)
        summary.degraded = degraded
        return saved, summary

    async def run(
        self,
        listing_sources: Sequence[ListingSource],
        roles: Optional[Sequence[str]] = None,
    ) -> Tuple[List[JobRecord], RunSummary]:
        roles = list(roles or self.config.roles)
        run_summary = RunSummary()
        all_saved: List[JobRecord] = []

        if not roles:
            logger.info("No job roles to scrape.")
            return all_saved, run_summary

        for listing_source in listing_sources:
            logger.info(f"Starting {listing_source.source} scraper for {len(roles)} role(s)")
            for position, role in enumerate(roles):
                try:
                    saved, summary = await self.run_role(listing_source, role)
                except Exception as e:
                    logger.error(f"Error scraping {role} on {listing_source.source}: {e}")
                    saved, summary = [], RoleSummary(role=role, source=listing_source.source, error=str(e))

                all_saved.extend(saved)
                run_summary.add(summary)

                if self.config.role_delay and position < len(roles) - 1:
                    await asyncio.sleep(self.config.role_delay)

        logger.info(
            f"Scraping complete: saved={run_summary.saved} skipped={run_summary.skipped} "
            f"dropped={run_summary.dropped} failed={run_summary.failed}"
        )
        return all_saved, run_summary
