# src/models/outcomes.py

"""Tagged outcomes for every degradation path of a collection run."""

from dataclasses import dataclass, field
from enum import Enum

from src.models.price_sample import RunRecord


@dataclass
class FetchFailure:
    """A region whose price could not be fetched this run."""

    region: str
    reason: str  # "network", "http_error", "invalid_json", "empty",
    # "invalid_payload", "invalid_price", "ambiguous"
    status_code: int | None = None
    message: str = ""


class LoadStatus(Enum):
    """How the remote dataset load ended."""

    LOADED = "loaded"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    NOT_CONFIGURED = "not_configured"


@dataclass
class LoadResult:
    """Remote document contents plus the path the load took."""

    status: LoadStatus
    records: list[RunRecord] = field(
        default_factory=lambda: list[RunRecord]()
    )
    sha: str | None = None


class SaveStatus(Enum):
    """How the remote dataset write ended."""

    CREATED = "created"
    UPDATED = "updated"
    CONFLICT = "conflict"
    FAILED = "failed"
    NOT_CONFIGURED = "not_configured"


@dataclass
class SaveResult:
    """Outcome of a remote write, with the server's reply when there was one."""

    status: SaveStatus
    status_code: int | None = None
    body: str = ""
    commit_sha: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (SaveStatus.CREATED, SaveStatus.UPDATED)


class LocalSaveStatus(Enum):
    """How the local snapshot write ended."""

    SAVED = "saved"
    SKIPPED_READONLY = "skipped_readonly"
    FAILED = "failed"
