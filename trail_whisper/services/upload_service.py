"""Upload queue for FIT files.

Files are decoded concurrently; every file ends up as a queue item, either
ready to upload or rejected with a human-readable error that can be retried.
Uploading walks the ready items one by one and records per-item failures
without stopping the batch.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
import logging
from pathlib import Path
import threading
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
import uuid

from ..config import DECODE_MAX_WORKERS
from ..errors import ActivityStoreError, DecodeFailure
from ..fit_decoder import decode_fit_bytes
from ..models import NormalizedActivity
from ..store.base import ActivityStore, build_activity_record

FileInput = Tuple[str, bytes]
Decoder = Callable[[bytes, str], NormalizedActivity]


def _default_decoder(data: bytes, name: str) -> NormalizedActivity:
    return decode_fit_bytes(data, name=name)


class UploadStatus(str, Enum):
    READY = "ready"
    UPLOADING = "uploading"
    DONE = "done"
    ERROR = "error"


@dataclass(slots=True)
class UploadItem:
    id: str
    file_name: str
    data: bytes = field(repr=False)
    parsed: Optional[NormalizedActivity] = None
    status: UploadStatus = UploadStatus.READY
    error: Optional[str] = None
    stored_id: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return self.status == UploadStatus.ERROR


@dataclass(slots=True)
class UploadQueueConfig:
    decoder: Decoder = _default_decoder
    max_workers: int = DECODE_MAX_WORKERS
    logger: logging.Logger | None = None


class UploadQueue:
    def __init__(self, config: UploadQueueConfig | None = None):
        self.config = config or UploadQueueConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self._items: Dict[str, UploadItem] = {}
        self._lock = threading.Lock()

    @property
    def items(self) -> List[UploadItem]:
        with self._lock:
            return list(self._items.values())

    @property
    def pending_count(self) -> int:
        return sum(1 for item in self.items if item.status == UploadStatus.READY)

    def get(self, item_id: str) -> UploadItem:
        with self._lock:
            try:
                return self._items[item_id]
            except KeyError:
                raise KeyError(f"Unknown upload item {item_id}") from None

    def add_paths(self, paths: Iterable[str | Path]) -> List[UploadItem]:
        files = [(Path(p).name, Path(p).read_bytes()) for p in paths]
        return self.add_files(files)

    def add_files(self, files: Sequence[FileInput]) -> List[UploadItem]:
        """Decode ``files`` concurrently and append one item per file.

        Returned items follow the input order. A file that fails to decode
        becomes an ``error`` item; the other files are unaffected.
        """

        if not files:
            return []
        items = [
            UploadItem(id=uuid.uuid4().hex, file_name=name, data=data)
            for name, data in files
        ]
        workers = max(1, min(self.config.max_workers, len(items)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self._decode_into, item): item for item in items}
            for future in as_completed(futures):
                future.result()
        with self._lock:
            for item in items:
                self._items[item.id] = item
        failed = [item.file_name for item in items if item.status == UploadStatus.ERROR]
        if failed:
            self._log.warning(
                "Could not parse %d of %d files: %s",
                len(failed),
                len(items),
                ", ".join(failed),
            )
        self._log.info("Parsed %d files", len(items) - len(failed))
        return items

    def remove(self, item_id: str) -> None:
        """Drop an item that has not started uploading."""

        with self._lock:
            item = self._items.get(item_id)
            if item is None or item.status == UploadStatus.UPLOADING:
                return
            del self._items[item_id]

    def retry(self, item_id: str) -> UploadItem:
        """Re-queue a failed item; items that never decoded are decoded again."""

        item = self.get(item_id)
        if not item.retryable:
            return item
        if item.parsed is None:
            self._decode_into(item)
        else:
            item.status = UploadStatus.READY
            item.error = None
        return item

    def upload_all(self, store: ActivityStore, user_id: str) -> List[UploadItem]:
        """Insert every ready item; returns the items that were attempted."""

        if not user_id:
            raise ValueError("A user id is required to upload activities")
        attempted: List[UploadItem] = []
        for item in self.items:
            if item.status != UploadStatus.READY or item.parsed is None:
                continue
            attempted.append(item)
            item.status = UploadStatus.UPLOADING
            item.error = None
            try:
                stored = store.insert_activity(build_activity_record(item.parsed, user_id))
            except (ActivityStoreError, ValueError) as exc:
                item.status = UploadStatus.ERROR
                item.error = str(exc) or "Upload failed"
                self._log.error("Failed to upload %s: %s", item.file_name, exc)
                continue
            item.status = UploadStatus.DONE
            item.stored_id = stored.id
            self._log.info("Uploaded %s as activity %s", item.file_name, stored.id)
        return attempted

    def _decode_into(self, item: UploadItem) -> None:
        try:
            parsed = self.config.decoder(item.data, item.file_name)
        except DecodeFailure as exc:
            item.parsed = None
            item.status = UploadStatus.ERROR
            item.error = str(exc)
            self._log.info("Rejected %s: %s", item.file_name, exc)
            return
        except Exception as exc:
            item.parsed = None
            item.status = UploadStatus.ERROR
            item.error = f"Could not parse {item.file_name}"
            self._log.error(
                "Unexpected error decoding %s: %s",
                item.file_name,
                exc,
                exc_info=True,
            )
            return
        item.parsed = parsed
        item.status = UploadStatus.READY
        item.error = None


__all__ = ["UploadItem", "UploadQueue", "UploadQueueConfig", "UploadStatus"]
