"""
MongoDB Service for Job Record Storage
Idempotent insert-by-jobId with duplicate detection, plus the publishing
lifecycle updates used by the content publisher.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from pymongo import MongoClient, ASCENDING, DESCENDING, IndexModel
from pymongo.errors import ConnectionFailure, DuplicateKeyError, PyMongoError

from jobboard_scraper.core.config import Settings, settings
from jobboard_scraper.models.errors import StoreUnavailableError
from jobboard_scraper.models.job_models import JobRecord
from jobboard_scraper.models.outcome_models import RoleSummary, SaveOutcome, SkipReason
from jobboard_scraper.utils.logging import setup_logger, RUNTIME

# Configure logging
logger = setup_logger(__name__)


class MongoDBService:
    """
    MongoDB-backed job store.

    Features:
    - Unique ``jobId`` index; the only deduplication key
    - Lookup-then-insert with the unique index as the race backstop
    - Per-role save/skip summaries
    - Conditional publish marking
    """

    def __init__(
        self,
        database_name: Optional[str] = None,
        collection_name: Optional[str] = None,
        mongo_uri: Optional[str] = None,
        create_indexes: bool = True,
        client: Optional[MongoClient] = None,
        collection=None,
    ):
        """
        Initialize MongoDB service.

        Args:
            database_name: Name of the MongoDB database
            collection_name: Name of the jobs collection
            mongo_uri: MongoDB connection URI (default: settings.MONGO_URI)
            create_indexes: Whether to create indexes on initialization
            client: Pre-built client (connection is still verified)
            collection: Pre-built collection; skips connecting entirely

        Raises:
            StoreUnavailableError: if MongoDB does not answer a ping
        """
        self.database_name = database_name or settings.DATABASE_NAME
        self.collection_name = collection_name or settings.JOBS_COLLECTION
        self.mongo_uri = mongo_uri or settings.MONGO_URI
        self.client = client

        if collection is not None:
            self.collection = collection
        else:
            try:
                self.client = client or MongoClient(str(self.mongo_uri))
                # Test connection
                self.client.admin.command("ping")
                logger.info(f"Connected to MongoDB at {self.mongo_uri}")
            except ConnectionFailure as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                raise StoreUnavailableError(f"MongoDB unreachable at {self.mongo_uri}: {e}") from e

            self.db = self.client[self.database_name]
            self.collection = self.db[self.collection_name]

        if create_indexes:
            self._create_indexes()

        self.stats = {
            "total_inserted": 0,
            "duplicates_skipped": 0,
            "missing_identity": 0,
            "errors": 0,
        }

    def __enter__(self) -> "MongoDBService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _create_indexes(self):
        """Create indexes for efficient querying."""
        try:
            indexes = [
                IndexModel([("jobId", ASCENDING)], unique=True),  # Sole dedup key
                IndexModel([("publishedToWordPress", ASCENDING)]),  # Unpublished backlog
                IndexModel([("scrapedAt", DESCENDING)]),
                IndexModel([("searchRole", ASCENDING)]),
            ]
            self.collection.create_indexes(indexes)
            logger.info("Database indexes created successfully")
        except PyMongoError as e:
            logger.warning(f"Error creating indexes: {e}")

    def ping(self) -> bool:
        if self.client is None:
            return True
        try:
            self.client.admin.command("ping")
            return True
        except PyMongoError:
            return False

    # ------------------------------------------------------------------
    # Dedup persistence
    # ------------------------------------------------------------------

    def upsert_if_absent(self, record: JobRecord) -> SaveOutcome:
        """
        Insert a job record unless its jobId is already stored.

        A DuplicateKeyError on insert means another run inserted the same
        jobId between our lookup and our insert; it is reported as a skip.
        """
        job_id = record.job_id
        if not job_id:
            self.stats["missing_identity"] += 1
            logger.warning(f"Skipping job without jobId: {record.job_role or 'Unknown'}")
            return SaveOutcome.skipped(job_id, SkipReason.MISSING_IDENTITY)

        try:
            if self.collection.find_one({"jobId": job_id}, {"_id": 1}) is not None:
                self.stats["duplicates_skipped"] += 1
                logger.info(f"Duplicate found, skipping: {record.job_role} (jobId: {job_id})")
                return SaveOutcome.skipped(job_id, SkipReason.ALREADY_EXISTS)

            document = record.to_document()
            now = datetime.now(timezone.utc)
            document["createdAt"] = now
            document["updatedAt"] = now
            self.collection.insert_one(document)

        except DuplicateKeyError:
            self.stats["duplicates_skipped"] += 1
            logger.info(f"Duplicate detected (race condition): {record.job_role} (jobId: {job_id})")
            return SaveOutcome.skipped(job_id, SkipReason.ALREADY_EXISTS)
        except PyMongoError as e:
            self.stats["errors"] += 1
            logger.error(f"Error saving job {job_id}: {e}", extra={"operation": str(RUNTIME.PERSIST)})
            return SaveOutcome.failed(job_id, str(e))

        self.stats["total_inserted"] += 1
        logger.info(f"Saved to MongoDB: {record.job_role} (jobId: {job_id})")
        return SaveOutcome.saved(job_id)

    def persist_role_jobs(
        self,
        role: str,
        records: Sequence[JobRecord],
    ) -> Tuple[List[JobRecord], List[SaveOutcome]]:
        """
        Save a role's records in order.

        Returns:
            The newly saved records (input order preserved) and one outcome
            per input record.
        """
        saved: List[JobRecord] = []
        outcomes: List[SaveOutcome] = []

        logger.info(
            f"Persisting {len(records)} job(s) for role \"{role}\"",
            extra={"operation": str(RUNTIME.PERSIST)},
        )
        for record in records:
            outcome = self.upsert_if_absent(record)
            outcomes.append(outcome)
            if outcome.is_saved:
                saved.append(record)

        logger.info(f"Role \"{role}\": {len(saved)} of {len(records)} job(s) newly saved")
        return saved, outcomes

    @staticmethod
    def summarize(
        role: str,
        outcomes: Sequence[SaveOutcome],
        dropped: int = 0,
        source: str = "",
    ) -> RoleSummary:
        summary = RoleSummary.from_outcomes(role, outcomes, dropped=dropped, source=source)
        logger.info(
            f"Summary for role \"{role}\"{f' on {source}' if source else ''}: "
            f"saved={summary.saved} skipped={summary.skipped} "
            f"dropped={summary.dropped} failed={summary.failed}"
        )
        return summary

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_job(self, job_id: str) -> Optional[JobRecord]:
        document = self.collection.find_one({"jobId": job_id})
        return JobRecord.from_document(document) if document else None

    def find_unpublished(self, limit: int = 50) -> List[JobRecord]:
        cursor = (
            self.collection.find({"publishedToWordPress": {"$ne": True}})
            .sort([("scrapedAt", ASCENDING)])
            .limit(limit)
        )
        return [JobRecord.from_document(document) for document in cursor]

    def count_jobs(self, filters: Optional[Dict[str, Any]] = None) -> int:
        try:
            return self.collection.count_documents(filters or {})
        except PyMongoError as e:
            logger.error(f"Error counting jobs: {e}")
            return 0

    def mark_published(self, job_id: str, post_id: Optional[int], post_url: Optional[str]) -> bool:
        """
        Flip the publishing fields once.

        The update only matches while ``publishedToWordPress`` is not yet
        true, so a concurrent publisher that already marked the job wins and
        this call returns False.
        """
        result = self.collection.update_one(
            {"jobId": job_id, "publishedToWordPress": {"$ne": True}},
            {
                "$set": {
                    "publishedToWordPress": True,
                    "wordPressPostId": post_id,
                    "wordPressPostUrl": post_url,
                    "publishedAt": datetime.now(timezone.utc),
                    "updatedAt": datetime.now(timezone.utc),
                }
            },
        )
        if result.modified_count:
            logger.info(f"Marked as published in MongoDB: {job_id}", extra={"operation": str(RUNTIME.PUBLISH)})
            return True

        logger.warning(f"Job {job_id} was already marked published by another pass")
        return False

    def get_stats(self) -> Dict[str, Any]:
        """Get database statistics."""
        return {
            "total_jobs": self.count_jobs(),
            "unpublished_jobs": self.count_jobs({"publishedToWordPress": {"$ne": True}}),
            "degraded_jobs": self.count_jobs({"error": {"$exists": True}}),
            **self.stats,
        }

    def close(self):
        """Close MongoDB connection."""
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")


@contextmanager
def connect_job_store(app_settings: Optional[Settings] = None) -> Iterator[MongoDBService]:
    """Open the job store for the duration of a block and always close it."""
    app_settings = app_settings or settings
    store = MongoDBService(
        database_name=app_settings.DATABASE_NAME,
        collection_name=app_settings.JOBS_COLLECTION,
        mongo_uri=app_settings.MONGO_URI,
    )
    try:
        yield store
    finally:
        store.close()
