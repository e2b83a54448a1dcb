"""Git auto-update pipeline."""

from autoupdater.git_update.inspector import RepositoryInspector
from autoupdater.git_update.scheduler import UpdateScheduler
from autoupdater.git_update.service import UpdateReconciler
from autoupdater.git_update.types import ChangeSet, CommitRef, ReconcilerState, UpdateOutcome

__all__ = [
    "ChangeSet",
    "CommitRef",
    "ReconcilerState",
    "RepositoryInspector",
    "UpdateOutcome",
    "UpdateReconciler",
    "UpdateScheduler",
]
