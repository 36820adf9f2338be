"""
Coalescing coordinator between the gesture classifiers and the parameter store.

Per-frame updates are filtered by confidence, buffered per path and written
to the store only after the frame stream has been quiet for the debounce
window. Generation commits run behind a single-flight guard.
"""
import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .config import CoordinatorConfig
from .debounce import Debouncer
from .store import ParameterStore
from .types import FailureKind, GenerationHook, GestureUpdate

logger = logging.getLogger(__name__)

IN_PROGRESS_ERROR = "Generation already in progress"
COOLDOWN_ERROR = "Generation cooldown active"
NO_HOOK_ERROR = "No generation hook configured"
CANCELLED_ERROR = "Generation cancelled"


@dataclass
class CommitRecord:
    """One generation attempt and its outcome."""
    source: str
    document: Dict[str, Any]
    started_at: float
    finished_at: Optional[float] = None
    result: Any = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.finished_at is not None and self.error is None


@dataclass
class CommitTicket:
    """Synchronous answer to a commit request."""
    accepted: bool
    source: str
    error: Optional[str] = None
    kind: Optional[FailureKind] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)
    record: Optional[CommitRecord] = None


class SingleFlightGuard:
    """In-flight counter that is never re-entered while set."""

    def __init__(self):
        self.in_flight = 0

    @property
    def busy(self) -> bool:
        return self.in_flight > 0

    def try_acquire(self) -> bool:
        if self.in_flight:
            return False
        self.in_flight = 1
        return True

    def release(self) -> None:
        if not self.in_flight:
            raise RuntimeError("Single-flight guard released while not held")
        self.in_flight = 0


class CoalescingCoordinator:
    """
    Buffers gesture updates and arbitrates generation commits.

    Features:
    - Confidence admission control (updates at or below the threshold are dropped)
    - Last-write-wins buffer keyed by path
    - Debounced flush through ParameterStore.update
    - Single-flight commit with optional cooldown and a bounded history
    """

    def __init__(
        self,
        store: ParameterStore,
        hook: Optional[GenerationHook] = None,
        cfg: Optional[CoordinatorConfig] = None,
        on_update: Optional[Callable[[GestureUpdate], None]] = None,
        on_commit_start: Optional[Callable[[CommitRecord], None]] = None,
        on_commit_complete: Optional[Callable[[CommitRecord], None]] = None,
        on_commit_error: Optional[Callable[[CommitRecord, Exception], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.hook = hook
        self.cfg = cfg or CoordinatorConfig()
        self.on_update = on_update
        self.on_commit_start = on_commit_start
        self.on_commit_complete = on_commit_complete
        self.on_commit_error = on_commit_error
        self.clock = clock

        self.debouncer = Debouncer(window_s=self.cfg.debounce_ms / 1000.0)
        self.pending: Dict[str, GestureUpdate] = {}
        self.guard = SingleFlightGuard()
        self.history: deque = deque(maxlen=self.cfg.history_size)
        self.last_commit_time: Optional[float] = None

    # ---- coalescing -------------------------------------------------------

    def submit(self, update: Optional[GestureUpdate], now: Optional[float] = None) -> bool:
        """
        Offer a classifier output to the buffer.

        Args:
            update: Classifier output (None means "no gesture" and is ignored)
            now: Current time in seconds; defaults to the coordinator clock

        Returns:
            True if the update was admitted
        """
        if update is None or update.confidence <= self.cfg.min_confidence:
            return False

        now = self.clock() if now is None else now
        # Re-inserting moves the path to the end so flush order follows arrival order
        self.pending.pop(update.path, None)
        self.pending[update.path] = update
        self.debouncer.arm(now)
        return True

    def poll(self, now: Optional[float] = None) -> List[GestureUpdate]:
        """
        Flush the buffer if the debounce window has elapsed.

        Returns:
            Updates that were successfully applied to the store
        """
        now = self.clock() if now is None else now
        if not self.debouncer.poll(now):
            return []
        return self._flush()

    def _flush(self) -> List[GestureUpdate]:
        batch = list(self.pending.values())
        self.pending.clear()

        applied = []
        for update in batch:
            result = self.store.update(update.path, update.value)
            if not result.success:
                logger.warning("Dropped gesture update for %s: %s", update.path, result.error)
                continue
            applied.append(update)

        # Notify only after the whole batch is in the store
        for update in applied:
            self._notify(self.on_update, update)

        if applied:
            logger.debug("Flushed %d of %d buffered updates", len(applied), len(batch))
        return applied

    @staticmethod
    def _notify(callback: Optional[Callable[..., None]], *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("Callback %r failed", callback)

    def reset(self) -> None:
        """Cancel the debounce timer and drop buffered updates without applying them."""
        self.debouncer.cancel()
        dropped = len(self.pending)
        self.pending.clear()
        if dropped:
            logger.info("Coordinator reset, dropped %d pending updates", dropped)

    # ---- commit -----------------------------------------------------------

    @property
    def is_committing(self) -> bool:
        return self.guard.busy

    def try_commit(self, source: str = "manual") -> CommitTicket:
        """
        Start a generation commit if none is running.

        Rejection is decided synchronously; an accepted commit runs as an
        asyncio task on the running loop.

        Args:
            source: Who asked for the commit ("gesture", "manual", ...)

        Returns:
            CommitTicket; `task` is set when the commit was accepted. Without
            a generation hook the ticket is a NO_HOOK rejection.
        """
        if self.hook is None:
            logger.debug("Commit from %s rejected: %s", source, NO_HOOK_ERROR)
            return CommitTicket(accepted=False, source=source, error=NO_HOOK_ERROR,
                                kind=FailureKind.NO_HOOK)

        if not self.guard.try_acquire():
            logger.info("Commit from %s rejected: %s", source, IN_PROGRESS_ERROR)
            return CommitTicket(accepted=False, source=source, error=IN_PROGRESS_ERROR,
                                kind=FailureKind.IN_PROGRESS)

        if self._in_cooldown():
            self.guard.release()
            logger.info("Commit from %s rejected: %s", source, COOLDOWN_ERROR)
            return CommitTicket(accepted=False, source=source, error=COOLDOWN_ERROR,
                                kind=FailureKind.COOLDOWN)

        ticket = CommitTicket(accepted=True, source=source)
        record = CommitRecord(source=source, document=self.store.document, started_at=self.clock())
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.guard.release()
            raise
        ticket.task = loop.create_task(self._run_commit(record))
        # Runs even if the task is cancelled before its first step
        ticket.task.add_done_callback(lambda task: self._finish_commit(ticket, record, task))
        return ticket

    async def commit(self, source: str = "manual") -> CommitTicket:
        """Request a commit and wait for it to finish (rejections return immediately)."""
        ticket = self.try_commit(source)
        if ticket.task is not None:
            await ticket.task
        return ticket

    async def _run_commit(self, record: CommitRecord) -> CommitRecord:
        logger.info("Generation started (%s)", record.source)
        self._notify(self.on_commit_start, record)
        try:
            record.result = await self.hook.generate(record.document)
        except Exception as e:
            record.finished_at = self.clock()
            record.error = str(e) or type(e).__name__
            logger.error("Generation failed (%s): %s", record.source, record.error)
            self._notify(self.on_commit_error, record, e)
            return record

        record.finished_at = self.clock()
        self.last_commit_time = record.finished_at
        logger.info("Generation finished (%s)", record.source)
        self._notify(self.on_commit_complete, record)
        return record

    def _finish_commit(self, ticket: CommitTicket, record: CommitRecord, task: asyncio.Task) -> None:
        """Done callback of the commit task: the single place the guard is released."""
        if task.cancelled():
            record.finished_at = self.clock()
            record.error = CANCELLED_ERROR
            logger.warning("Generation cancelled (%s)", record.source)
        elif task.exception() is not None and record.error is None:
            record.finished_at = self.clock()
            record.error = str(task.exception()) or type(task.exception()).__name__
            logger.error("Generation aborted (%s): %s", record.source, record.error)
        self.guard.release()
        self.history.append(record)
        ticket.record = record

    def _in_cooldown(self) -> bool:
        if not self.cfg.generation_cooldown_ms or self.last_commit_time is None:
            return False
        elapsed_ms = (self.clock() - self.last_commit_time) * 1000
        return elapsed_ms < self.cfg.generation_cooldown_ms
