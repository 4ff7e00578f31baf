from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional


class SaveStatus(str, Enum):
    SAVED = "saved"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    ALREADY_EXISTS = "already_exists"
    MISSING_IDENTITY = "missing_identity"


@dataclass
class SaveOutcome:
    status: SaveStatus
    job_id: str = ""
    reason: Optional[SkipReason] = None
    error: Optional[str] = None

    @classmethod
    def saved(cls, job_id: str) -> "SaveOutcome":
        return cls(status=SaveStatus.SAVED, job_id=job_id)

    @classmethod
    def skipped(cls, job_id: str, reason: SkipReason) -> "SaveOutcome":
        return cls(status=SaveStatus.SKIPPED, job_id=job_id, reason=reason)

    @classmethod
    def failed(cls, job_id: str, error: str) -> "SaveOutcome":
        return cls(status=SaveStatus.FAILED, job_id=job_id, error=error)

    @property
    def is_saved(self) -> bool:
        return self.status == SaveStatus.SAVED


@dataclass
class RoleSummary:
    """Per-role audit counts.

    ``skipped`` counts listings already in the store, ``dropped`` counts
    malformed listings and records without an identifier, ``failed`` counts
    store errors.
    """

    role: str
    source: str = ""
    saved: int = 0
    skipped: int = 0
    dropped: int = 0
    failed: int = 0
    degraded: int = 0
    error: Optional[str] = None

    @property
    def total(self) -> int:
        return self.saved + self.skipped + self.dropped + self.failed

    @classmethod
    def from_outcomes(
        cls,
        role: str,
        outcomes: Iterable[SaveOutcome],
        dropped: int = 0,
        source: str = "",
    ) -> "RoleSummary":
        summary = cls(role=role, source=source, dropped=dropped)
        for outcome in outcomes:
            if outcome.status == SaveStatus.SAVED:
                summary.saved += 1
            elif outcome.status == SaveStatus.FAILED:
                summary.failed += 1
            elif outcome.reason == SkipReason.MISSING_IDENTITY:
                summary.dropped += 1
            else:
                summary.skipped += 1
        return summary


@dataclass
class RunSummary:
    roles: List[RoleSummary] = field(default_factory=list)

    def add(self, summary: RoleSummary) -> None:
        self.roles.append(summary)

    @property
    def saved(self) -> int:
        return sum(role.saved for role in self.roles)

    @property
    def skipped(self) -> int:
        return sum(role.skipped for role in self.roles)

    @property
    def dropped(self) -> int:
        return sum(role.dropped for role in self.roles)

    @property
    def failed(self) -> int:
        return sum(role.failed for role in self.roles)

    def as_dict(self) -> dict:
        return {
            "saved": self.saved,
            "skipped": self.skipped,
            "dropped": self.dropped,
            "failed": self.failed,
            "roles": [
                {
                    "role": role.role,
                    "source": role.source,
                    "saved": role.saved,
                    "skipped": role.skipped,
                    "dropped": role.dropped,
                    "failed": role.failed,
                    "degraded": role.degraded,
                    "error": role.error,
                }
                for role in self.roles
            ],
        }
