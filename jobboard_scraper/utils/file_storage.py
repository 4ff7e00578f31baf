import json
import re
from pathlib import Path
from datetime import datetime
from typing import Any, Optional

from jobboard_scraper.utils.logging import setup_logger
from jobboard_scraper.utils.text_processor import TextProcessor

logger = setup_logger(__name__)


class SnapshotFileManager:
    """
    Stores raw listing extractions as JSON, one file per source and role.

    Layout: ``<output_dir>/<source>/<role>.json`` holding a list of entries
    ``{"listing": {...}, "detail": {...} | null, "detailError": "..."}``.
    """

    def __init__(self, output_dir: str = "jobs"):
        self.output_dir = Path(output_dir)

        # Create output directory if it doesn't exist
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def get_filepath(self, source: str, role: str) -> Path:
        filename = f"{TextProcessor.safe_role_filename(role)}.json"
        return self.output_dir / source / filename

    def load_entries(self, source: str, role: str) -> list[dict]:
        """Load a role's snapshot; missing files give an empty list."""
        filepath = self.get_filepath(source, role)
        if not filepath.exists():
            logger.info(f"No snapshot for {source}/{role} at {filepath}")
            return []

        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get("entries", [])
        if not isinstance(data, list):
            raise ValueError(f"Snapshot {filepath} must hold a list of entries")

        return [entry for entry in data if isinstance(entry, dict)]

    def save_entries(self, source: str, role: str, entries: list[dict]) -> Path:
        filepath = self.get_filepath(source, role)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(entries, f, indent=2, ensure_ascii=False, default=str)
        logger.info(f"Saved {len(entries)} entries to {filepath}")
        return filepath

    @staticmethod
    def entry_key(entry: dict) -> str:
        listing = entry.get("listing")
        if not isinstance(listing, dict):
            return ""
        link = listing.get("link") or listing.get("url")
        if isinstance(link, dict):
            link = link.get("href") or link.get("text")
        return str(link or "")

    def merge_entries(self, source: str, role: str, entries: list[dict]) -> Path:
        """
        Add entries to a role's snapshot.

        An entry whose listing link is already in the snapshot replaces the
        stored one; everything else is appended in order.
        """
        merged = self.load_entries(source, role)
        positions = {}
        for position, entry in enumerate(merged):
            key = self.entry_key(entry)
            if key:
                positions[key] = position

        for entry in entries:
            key = self.entry_key(entry)
            if key in positions:
                merged[positions[key]] = entry
                continue
            if key:
                positions[key] = len(merged)
            merged.append(entry)

        return self.save_entries(source, role, merged)

    def get_stats(self) -> dict:
        """Get current storage statistics."""
        files = list(self.output_dir.glob("*/*.json"))
        return {
            "output_dir": str(self.output_dir),
            "total_files": len(files),
            "sources": sorted({f.parent.name for f in files}),
        }


class GeneratedPostWriter:
    """Writes generated article HTML documents to disk."""

    def __init__(self, output_dir: str = "generated_posts"):
        self.output_dir = Path(output_dir)

    @staticmethod
    def to_filename_segment(value: Optional[Any]) -> str:
        if not value:
            return ""
        safe_value = TextProcessor.safe_role_filename(str(value))
        return re.sub(r"\s+", "-", safe_value).lower()

    def build_filename(self, role: str, job_id: str, title: str, index: int = 0) -> str:
        segments = [self.to_filename_segment(role) or "role"]

        job_id_segment = self.to_filename_segment(job_id)
        title_segment = self.to_filename_segment(title)
        if job_id_segment:
            segments.append(job_id_segment)
        if title_segment:
            segments.append(title_segment)

        segments.append(datetime.now().strftime("%Y%m%d%H%M%S%f"))

        if not job_id_segment and not title_segment:
            segments.append(f"job{index + 1}")

        return "-".join(segments) + ".html"

    def write(self, filename: str, html: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.output_dir / filename
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(html)
        logger.info(f"Saved job post: {filepath}")
        return filepath
