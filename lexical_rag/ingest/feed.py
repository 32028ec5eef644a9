from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Literal, Optional

from pydantic import BaseModel

from ..errors import DocumentReadError
from ..sessions import SessionRegistry
from ..utils.log import EventLog
from .chunker import DEFAULT_CHUNK_SIZE, process_document

logger = logging.getLogger(__name__)


class DocumentOutcome(BaseModel):
    path: str
    source: str
    status: Literal["ok", "empty", "error"]
    chunks: int = 0
    error: Optional[str] = None


class IngestReport(BaseModel):
    session_id: str
    documents: List[DocumentOutcome]

    @property
    def added(self) -> int:
        return sum(d.chunks for d in self.documents)

    @property
    def failed(self) -> List[DocumentOutcome]:
        return [d for d in self.documents if d.status == "error"]

    @property
    def ok(self) -> bool:
        return not self.failed


class IngestionJob:
    """Handle for a batch running in the background.

    ``done`` flips once the index has been updated (or the batch crashed);
    ``wait`` blocks on that signal.
    """

    def __init__(self, future: "Future[IngestReport]") -> None:
        self._future = future
        self._finished = threading.Event()
        future.add_done_callback(lambda _: self._finished.set())

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._finished.wait(timeout)

    def result(self, timeout: Optional[float] = None) -> IngestReport:
        return self._future.result(timeout)


class IngestionFeed:
    """Chunks documents and adds them to a session's index.

    Each document succeeds or fails on its own: a DocumentReadError is
    recorded in the report and the rest of the batch still goes in.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self.registry = registry
        self.chunk_size = chunk_size
        self.event_log = event_log
        # single worker: batches for the same feed never touch an index concurrently
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ingest")

    def ingest(self, session_id: str, paths: Iterable[str | Path]) -> IngestReport:
        index = self.registry.get_or_create(session_id)
        outcomes: List[DocumentOutcome] = []
        for p in paths:
            path = Path(p)
            try:
                chunks = process_document(path, chunk_size=self.chunk_size)
            except DocumentReadError as e:
                logger.error("Skipping %s: %s", path, e.reason)
                if self.event_log is not None:
                    self.event_log.write(
                        {"event": "parse_error", "session": session_id, "file": str(path), "error": e.reason}
                    )
                outcomes.append(
                    DocumentOutcome(path=str(path), source=e.source, status="error", error=e.reason)
                )
                continue

            index.add_chunks(chunks)
            outcomes.append(
                DocumentOutcome(
                    path=str(path),
                    source=path.name,
                    status="ok" if chunks else "empty",
                    chunks=len(chunks),
                )
            )

        report = IngestReport(session_id=session_id, documents=outcomes)
        logger.info(
            "Session %s: processed %d document(s), %d chunk(s), %d failure(s)",
            session_id,
            len(outcomes),
            report.added,
            len(report.failed),
        )
        return report

    def submit(self, session_id: str, paths: Iterable[str | Path]) -> IngestionJob:
        batch = list(paths)
        return IngestionJob(self._executor.submit(self.ingest, session_id, batch))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "IngestionFeed":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
