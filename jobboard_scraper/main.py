"""
Job Board Scraper
CLI entry point for scraping, publishing and serving the job store.
"""

import argparse
import asyncio
import sys
from typing import Callable, List, Optional

from jobboard_scraper.core.config import PipelineConfig, parse_role_filter, settings
from jobboard_scraper.models.errors import StoreUnavailableError
from jobboard_scraper.service.mongodb_service import connect_job_store
from jobboard_scraper.service.pipeline_service import ScrapePipeline, SnapshotListingSource
from jobboard_scraper.service.publisher_service import ContentPublisher, PublishResult
from jobboard_scraper.service.source_adapters import INDEED, JOBZ, ROZEE
from jobboard_scraper.service.wordpress_service import WordPressClient, get_site
from jobboard_scraper.utils.file_storage import SnapshotFileManager
from jobboard_scraper.utils.logging import setup_logger

logger = setup_logger(__name__)


PLATFORM_LABELS = {
    INDEED: "Indeed.com",
    ROZEE: "Rozee.pk",
    JOBZ: "Jobz.pk",
}

PLATFORM_PROMPT = "\n".join([
    "",
    "Select the job platform to scrape first:",
    "  1) Indeed.com",
    "  2) Rozee.pk",
    "  3) Jobz.pk",
    "  4) All platforms",
    "",
])

PLATFORM_CHOICES = {
    "1": [INDEED],
    "indeed": [INDEED],
    "indeed.com": [INDEED],
    "2": [ROZEE],
    "rozee": [ROZEE],
    "rozee.pk": [ROZEE],
    "3": [JOBZ],
    "jobz": [JOBZ],
    "jobz.pk": [JOBZ],
    "4": [INDEED, ROZEE, JOBZ],
    "all": [INDEED, ROZEE, JOBZ],
    "both": [INDEED, ROZEE],
}


def parse_platform_selection(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return PLATFORM_CHOICES.get(value.strip().lower())


def request_platforms(ask: Callable[[str], str] = input) -> List[str]:
    while True:
        platforms = parse_platform_selection(ask(f"{PLATFORM_PROMPT}> "))
        if platforms:
            return platforms
        print("Please select 1, 2, 3 or 4 to continue.")


def request_roles(ask: Callable[[str], str] = input) -> List[str]:
    roles: List[str] = []
    while not roles:
        roles = parse_role_filter(ask("Enter the job role to scrape (comma-separated for multiple): "))
        if not roles:
            print("Please enter at least one job role.")
    return roles


def print_publish_results(results: List[PublishResult]) -> None:
    if not results:
        print("No AI-generated documents were created.")
        return

    print("\nAI-generated posts:")
    for result in results:
        print(f" - {result.html_path}")
        if result.post and result.post.link:
            print(f"   WordPress URL: {result.post.link}")


# =============================================================================
# Commands
# =============================================================================


async def run_scrape(args: argparse.Namespace) -> int:
    platforms = parse_platform_selection(args.platform) if args.platform else request_platforms()
    if not platforms:
        print(f"Unknown platform: {args.platform}")
        return 2

    if args.roles:
        roles = parse_role_filter(args.roles)
    elif args.default_roles:
        roles = PipelineConfig.from_settings(settings).roles
    else:
        roles = request_roles()

    config = PipelineConfig.from_settings(settings)
    config.roles = roles
    if args.results_per_role:
        config.results_per_role = args.results_per_role
    if args.role_timeout:
        config.role_timeout = args.role_timeout

    file_manager = SnapshotFileManager(args.snapshot_dir or settings.SNAPSHOT_DIR)
    sources = [SnapshotListingSource(platform, file_manager) for platform in platforms]

    with connect_job_store(settings) as store:
        pipeline = ScrapePipeline(store, config)
        saved, summary = await pipeline.run(sources, roles)

        for platform in platforms:
            platform_saved = sum(role.saved for role in summary.roles if role.source == platform)
            if platform_saved:
                print(f"{platform_saved} new jobs saved from {PLATFORM_LABELS[platform]}")
            else:
                print(f"No new jobs saved from {PLATFORM_LABELS[platform]}")

        if not args.publish:
            return 0

        if not saved:
            print("\nNo new jobs to publish (all were duplicates or already exist).")
            return 0

        publisher = ContentPublisher(store, wp_client=WordPressClient(get_site(args.site, settings)))
        print_publish_results(await publisher.publish(saved))

    return 0


async def run_publish(args: argparse.Namespace) -> int:
    with connect_job_store(settings) as store:
        publisher = ContentPublisher(store, wp_client=WordPressClient(get_site(args.site, settings)))
        print_publish_results(await publisher.publish_backlog(args.limit))
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("jobboard_scraper.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobboard-scraper",
        description="Job board scraper: dedupe listings into MongoDB and publish WordPress drafts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jobboard-scraper scrape
  jobboard-scraper scrape --platform rozee --roles "Developer, Clerk" --publish
  jobboard-scraper publish --site secondary --limit 10
  jobboard-scraper serve --port 8001
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scrape = subparsers.add_parser("scrape", help="Run the scrape pipeline over stored snapshots")
    scrape.add_argument(
        "--platform",
        type=str,
        default=None,
        help="1/indeed, 2/rozee, 3/jobz or 4/all (prompted when omitted)",
    )
    scrape.add_argument(
        "--roles",
        type=str,
        default=None,
        help="Comma-separated job roles (prompted when omitted)",
    )
    scrape.add_argument(
        "--default-roles",
        action="store_true",
        help="Use the built-in role list filtered by JOB_SCRAPER_ROLES / JOB_SCRAPER_LIMIT",
    )
    scrape.add_argument(
        "--results-per-role",
        type=int,
        default=None,
        help=f"Listings to process per role (default: {settings.JOB_SCRAPER_RESULTS_PER_ROLE})",
    )
    scrape.add_argument(
        "--role-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Abandon a role that takes longer than this",
    )
    scrape.add_argument(
        "--snapshot-dir",
        type=str,
        default=None,
        help=f"Directory holding raw extractions (default: {settings.SNAPSHOT_DIR})",
    )
    scrape.add_argument("--publish", action="store_true", help="Publish newly saved jobs as WordPress drafts")
    scrape.add_argument("--site", choices=["primary", "secondary"], default="primary")

    publish = subparsers.add_parser("publish", help="Publish the unpublished backlog")
    publish.add_argument("--site", choices=["primary", "secondary"], default="primary")
    publish.add_argument("--limit", type=int, default=50)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8001)
    serve.add_argument("--reload", action="store_true")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.command == "serve":
            return run_serve(args)
        if args.command == "publish":
            return asyncio.run(run_publish(args))
        return asyncio.run(run_scrape(args))
    except StoreUnavailableError as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        print("Please check MONGO_URI in your .env file")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
