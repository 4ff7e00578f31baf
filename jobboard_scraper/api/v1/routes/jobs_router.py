"""
FastAPI Routes for the Job Store
Accepts raw listings from external scrapers and exposes stored jobs
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query, Request

from jobboard_scraper.core.config import PipelineConfig
from jobboard_scraper.schemas.api_schemas import (
    IngestRequest,
    IngestResponse,
    JobsListResponse,
    RoleSummaryResponse,
    StatsResponse,
)
from jobboard_scraper.service.mongodb_service import MongoDBService
from jobboard_scraper.service.pipeline_service import EntryListingSource, ScrapePipeline
from jobboard_scraper.utils.file_storage import SnapshotFileManager
from jobboard_scraper.utils.logging import setup_logger

logger = setup_logger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def get_job_store(request: Request) -> MongoDBService:
    """Dependency to get the job store opened by the app lifespan"""
    store = getattr(request.app.state, "job_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Job store is not available")
    return store


def get_snapshot_files(request: Request) -> Optional[SnapshotFileManager]:
    """Dependency to get the raw snapshot writer, if the app has one"""
    return getattr(request.app.state, "snapshot_files", None)


@router.post("/ingest", response_model=IngestResponse)
async def ingest_listings(
    request: IngestRequest,
    store: MongoDBService = Depends(get_job_store),
    snapshot_files: Optional[SnapshotFileManager] = Depends(get_snapshot_files),
):
    """
    Normalize and store raw listings of one role.

    The raw entries are first merged into the role's snapshot file, so
    ``scrape`` can replay them later. Listings that are already stored are
    skipped, malformed ones are dropped and entries with a ``detailError``
    are kept as degraded records.
    """
    source = request.source.value
    logger.info(f"Ingest request: {len(request.entries)} {source} entries for {request.role}")

    entries = [entry.model_dump() for entry in request.entries]

    snapshot_file = None
    if snapshot_files is not None and entries:
        try:
            snapshot_file = str(snapshot_files.merge_entries(source, request.role, entries))
        except (OSError, ValueError) as e:
            logger.error(f"Could not write {source} snapshot for {request.role}: {e}")

    listing_source = EntryListingSource(source, entries)
    pipeline = ScrapePipeline(
        store,
        PipelineConfig(roles=[request.role], results_per_role=request.limit, detail_delay=0, role_delay=0),
    )
    saved, summary = await pipeline.run_role(listing_source, request.role)

    return IngestResponse(
        success=summary.error is None,
        message=f"Saved {summary.saved} of {len(request.entries)} listing(s)",
        summary=RoleSummaryResponse(
            role=summary.role,
            source=summary.source,
            saved=summary.saved,
            skipped=summary.skipped,
            dropped=summary.dropped,
            failed=summary.failed,
            degraded=summary.degraded,
            error=summary.error,
        ),
        saved_job_ids=[record.job_id for record in saved],
        snapshot_file=snapshot_file,
    )


@router.get("/unpublished", response_model=JobsListResponse)
async def list_unpublished(
    limit: int = Query(50, ge=1, le=500),
    store: MongoDBService = Depends(get_job_store),
):
    """List stored jobs that have not been pushed to WordPress yet"""
    jobs = store.find_unpublished(limit)
    return JobsListResponse(
        success=True,
        total_count=store.count_jobs({"publishedToWordPress": {"$ne": True}}),
        jobs=[job.model_dump(mode="json", by_alias=True, exclude_none=True) for job in jobs],
    )


@router.get("/stats", response_model=StatsResponse)
async def get_stats(store: MongoDBService = Depends(get_job_store)):
    """Get database statistics"""
    return StatsResponse(**store.get_stats())


@router.get("/{job_id}")
async def get_job(job_id: str, store: MongoDBService = Depends(get_job_store)):
    job = store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job.model_dump(mode="json", by_alias=True, exclude_none=True)
