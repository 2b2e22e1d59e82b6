"""Issue-to-marker synchronization.

Public API for refreshing the local markers of project files from the
remote issue server.

Modules:

- ``job``        -- ``SynchronizationJob``: orchestrates one pass.
- ``policy``     -- ``RefreshPolicy``: per-file staleness check.
- ``reconciler`` -- ``AnnotationReconciler``: atomic replace of a file's
  annotations plus refresh metadata.
- ``store``      -- ``MarkerStore``, ``RefreshMetadataStore``,
  ``StoreRegistry``: per-project JSON stores.
- ``state``      -- ``JsonStateFile``: atomic JSON persistence.
- ``models``     -- ``SyncRequest``, ``Annotation``, ``RefreshMetadata``,
  ``FileResult``, ``JobOutcome``: core data contracts.
- ``reporter``   -- Human-readable and JSON outcome formatting.

Usage example
-------------
::

    from issue_sync.remote import SnapshotRegistry
    from issue_sync.resources import Workspace
    from issue_sync.sync import (
        StoreRegistry, SyncRequest, SynchronizationJob, format_outcome,
    )

    workspace = Workspace({"demo": "/work/demo"})
    job = SynchronizationJob(
        tree=workspace,
        servers=SnapshotRegistry(default=Path("issues.yml")),
        stores=StoreRegistry(workspace.state_dir),
    )
    outcome = job.run(
        SyncRequest(resources=(workspace.resource("/work/demo"),), force=True)
    )
    print(format_outcome(outcome))
"""

from .job import SynchronizationJob
from .models import (
    Annotation,
    FileAction,
    FileResult,
    JobOutcome,
    JobStatus,
    RefreshMetadata,
    SyncRequest,
)
from .policy import RefreshPolicy
from .reconciler import AnnotationReconciler
from .reporter import format_outcome, outcome_to_json
from .state import JsonStateFile
from .store import (
    MarkerStore,
    ProjectStores,
    RefreshMetadataStore,
    StoreRegistry,
)

__all__ = [
    "Annotation",
    "AnnotationReconciler",
    "FileAction",
    "FileResult",
    "JobOutcome",
    "JobStatus",
    "JsonStateFile",
    "MarkerStore",
    "ProjectStores",
    "RefreshMetadata",
    "RefreshMetadataStore",
    "RefreshPolicy",
    "StoreRegistry",
    "SyncRequest",
    "SynchronizationJob",
    "format_outcome",
    "outcome_to_json",
]
