"""Service layer package.

Exports high-level services consumed by the CLI / presentation layers.
"""

from .history_service import ActivityDetail, ActivityHistory
from .upload_service import UploadItem, UploadQueue, UploadQueueConfig, UploadStatus
from .visit_service import VisitService, VisitsNearResult

__all__ = [
    "ActivityDetail",
    "ActivityHistory",
    "UploadItem",
    "UploadQueue",
    "UploadQueueConfig",
    "UploadStatus",
    "VisitService",
    "VisitsNearResult",
]
