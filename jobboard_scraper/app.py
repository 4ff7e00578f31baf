"""
FastAPI service in front of the job store
"""

from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobboard_scraper.api.v1.routes.jobs_router import router as jobs_router
from jobboard_scraper.core.config import settings
from jobboard_scraper.models.heartbeat_models import HeartbeatModel
from jobboard_scraper.service.mongodb_service import MongoDBService
from jobboard_scraper.utils import APP_VERSION_INFO
from jobboard_scraper.utils.file_storage import SnapshotFileManager
from jobboard_scraper.utils.heartbeat import get_heartbeat
from jobboard_scraper.utils.logging import setup_logger

logger = setup_logger(__name__)


def default_store_factory() -> MongoDBService:
    return MongoDBService(
        database_name=settings.DATABASE_NAME,
        collection_name=settings.JOBS_COLLECTION,
        mongo_uri=settings.MONGO_URI,
    )


def create_app(
    store_factory: Optional[Callable[[], MongoDBService]] = None,
    snapshot_dir: Optional[str] = None,
) -> FastAPI:
    store_factory = store_factory or default_store_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # StoreUnavailableError propagates and aborts startup
        app.state.job_store = store_factory()
        app.state.snapshot_files = SnapshotFileManager(snapshot_dir or settings.SNAPSHOT_DIR)
        logger.info("Job store opened")
        try:
            yield
        finally:
            app.state.job_store.close()
            app.state.job_store = None

    app = FastAPI(title="Job Board Scraper API", version=str(APP_VERSION_INFO), lifespan=lifespan)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(jobs_router)

    @app.get("/health", response_model=HeartbeatModel)
    async def health_check():
        return await get_heartbeat(getattr(app.state, "job_store", None))

    @app.get("/")
    async def root():
        """API information"""
        return {
            "name": "Job Board Scraper API",
            "version": str(APP_VERSION_INFO),
            "endpoints": {
                "GET /health": "Service heartbeat and job counts",
                "POST /jobs/ingest": "Normalize and store raw listings of one role",
                "GET /jobs/unpublished": "List jobs not yet published to WordPress",
                "GET /jobs/stats": "Get database stats",
                "GET /jobs/{job_id}": "Get one stored job",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
