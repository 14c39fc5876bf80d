"""mdrelink session: serialized snapshot, plan and apply for each change event."""

from __future__ import annotations

import asyncio
import logging
import signal

from mdrelink.container import Container
from mdrelink.core import executor, planner
from mdrelink.core.errors import ReadFailureError
from mdrelink.core.models import (
    ApplyResult,
    ApplyStatus,
    ChangeEvent,
    Document,
    Edit,
    EventReport,
    SessionStatus,
)

logger = logging.getLogger(__name__)


class Session:
    """Processes change events one at a time against fresh corpus snapshots.

    Snapshot, plan and commit for an event all happen under one lock, so
    the next event's snapshot always sees the previous event's edits.
    """

    def __init__(self, container: Container) -> None:
        self._container = container
        self._status = SessionStatus.IDLE
        self._lock = asyncio.Lock()
        self._shutdown_event: asyncio.Event | None = None

    @property
    def status(self) -> SessionStatus:
        """Current session status."""
        return self._status

    async def snapshot(self) -> tuple[list[Document], list[ApplyResult]]:
        """Read every tracked document.

        Returns:
            The corpus, plus a failed ApplyResult for each unreadable document.
        """
        config = self._container.config
        corpus = self._container.corpus
        paths = await corpus.list(config.include, frozenset(config.exclude))

        documents: list[Document] = []
        failures: list[ApplyResult] = []
        for path in paths:
            try:
                content = await corpus.read(path)
            except ReadFailureError as e:
                logger.warning("Leaving %s out of the corpus: %s", path, e)
                failures.append(
                    ApplyResult(document=path, status=ApplyStatus.FAILED, reason=str(e))
                )
                continue
            documents.append(Document(path=path, content=content))
        return documents, failures

    async def handle(self, event: ChangeEvent) -> EventReport:
        """Plan and apply the edits for one event."""
        async with self._lock:
            self._status = SessionStatus.PLANNING
            try:
                documents, failures = await self.snapshot()
                edits = planner.plan(event, documents, self._container.options)
                logger.info(
                    "Planned %d edits for %s event across %d documents",
                    len(edits),
                    event.kind,
                    len(documents),
                )

                self._status = SessionStatus.APPLYING
                results = await executor.apply(edits, self._container.sink)
            except Exception:
                self._status = SessionStatus.ERROR
                logger.exception("Failed to process %s event", event.kind)
                raise

            self._status = SessionStatus.IDLE

        report = EventReport(event_kind=event.kind, planned=len(edits), results=failures + results)
        for failed in report.failed:
            logger.warning("Document %s failed: %s", failed.document, failed.reason)
        return report

    async def preview(self, event: ChangeEvent) -> list[Edit]:
        """Plan an event without applying anything."""
        async with self._lock:
            documents, _ = await self.snapshot()
            return planner.plan(event, documents, self._container.options)

    async def run(self, events: asyncio.Queue[ChangeEvent]) -> None:
        """Consume events from a queue until shutdown is requested.

        Events are handled strictly in arrival order. A failing event is
        logged and does not stop the loop.
        """
        self._shutdown_event = asyncio.Event()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except (NotImplementedError, RuntimeError):
                logger.debug("Signal handlers unavailable for %s", sig)

        try:
            while not self._shutdown_event.is_set():
                get_task = asyncio.create_task(events.get())
                shutdown_task = asyncio.create_task(self._shutdown_event.wait())

                done, pending = await asyncio.wait(
                    [get_task, shutdown_task],
                    return_when=asyncio.FIRST_COMPLETED,
                )

                for task in pending:
                    task.cancel()
                    try:
                        await task
                    except asyncio.CancelledError:
                        pass

                if get_task not in done:
                    break

                event = get_task.result()
                try:
                    await self.handle(event)
                except Exception:
                    logger.exception("Dropping %s event after error", event.kind)
                finally:
                    events.task_done()
        finally:
            self._status = SessionStatus.SHUTTING_DOWN
            logger.info("Shutting down...")
            self._status = SessionStatus.STOPPED

    def request_shutdown(self) -> None:
        """Signal the run loop to stop after the current event."""
        logger.info("Shutdown requested")
        if self._shutdown_event is not None:
            self._shutdown_event.set()
