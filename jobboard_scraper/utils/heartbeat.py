
from jobboard_scraper.utils import APP_VERSION_INFO
from jobboard_scraper.models.heartbeat_models import HeartbeatModel

from jobboard_scraper.utils.logging import setup_logger, RUNTIME
logger = setup_logger(__name__)

async def get_heartbeat(store=None) -> HeartbeatModel:
	logger.debug("", extra={
		"operation": str(RUNTIME.HEARTBEAT),
		"app_version": str(APP_VERSION_INFO),
		})
	if store is None:
		return HeartbeatModel(app_version=APP_VERSION_INFO)

	try:
		return HeartbeatModel(
			app_version=APP_VERSION_INFO,
			database="connected" if store.ping() else "unreachable",
			total_jobs=store.count_jobs(),
			unpublished_jobs=store.count_jobs({"publishedToWordPress": {"$ne": True}}),
			)
	except Exception as e:
		logger.warning(f"Heartbeat could not query the job store: {e}")
		return HeartbeatModel(status="DEGRADED", app_version=APP_VERSION_INFO, database="unreachable")
