"""Git update types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Literal


@dataclass(frozen=True)
class CommitRef:
    """A commit hash. Two refs are equal iff they name the same commit."""
    sha: str

    @property
    def short(self) -> str:
        return self.sha[:8]

    def __str__(self) -> str:
        return self.sha


@dataclass(frozen=True)
class ChangeSet:
    """
    Repository-relative paths that differ between two commits.

    ``ok`` is False when the diff itself could not be computed; the set is
    then empty and ``error`` holds the reason.
    """
    paths: tuple[str, ...] = ()
    ok: bool = True
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> "ChangeSet":
        return cls(paths=(), ok=False, error=error)

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, path: object) -> bool:
        return path in self.paths


class ReconcilerState(Enum):
    """Where the reconciler currently is in a pass."""

    IDLE = "idle"
    CHECKING = "checking"
    APPLYING = "applying"
    INSTALLING = "installing"
    BUILDING = "building"
    RESTARTING = "restarting"
    FAILED = "failed"


@dataclass
class UpdateOutcome:
    """Result of one reconciliation pass."""
    status: Literal["no_change", "updated", "failed"]
    before: CommitRef | None = None
    after: CommitRef | None = None
    changes: ChangeSet = field(default_factory=ChangeSet)
    error: str | None = None
    failed_in: ReconcilerState | None = None  # State active when the pass failed
    steps_completed: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status != "failed"
