from pydantic import BaseModel, Field
from datetime import datetime


class VersionInfo(BaseModel):
    major: int
    minor: int
    patch: int
    suffix: str = ""

    def __str__(self) -> str:
        version = "{}.{}.{}".format(self.major, self.minor, self.patch)
        return f"{version}-{self.suffix}" if self.suffix else version

class HeartbeatModel(BaseModel):
    status: str = "OK"
    timestamp: datetime  = Field(default_factory=datetime.now)
    app_version: VersionInfo
    database: str = "unknown"
    total_jobs: int = 0
    unpublished_jobs: int = 0
