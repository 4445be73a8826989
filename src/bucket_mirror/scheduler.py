"""The mirror loop: one reconciliation pass, then a fixed wait, until cancelled."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from bucket_mirror import events
from bucket_mirror.cancellation import CancellationToken
from bucket_mirror.config import Config
from bucket_mirror.errors import MirrorCancelled, RemoteFault
from bucket_mirror.reconciler import Action, ObjectResult, Reconciler
from bucket_mirror.store import ObjectStore

logger = logging.getLogger(__name__)


class State(str, Enum):
    RUNNING_PASS = "running-pass"
    WAITING = "waiting"
    TERMINATED = "terminated"


class PassOutcome(str, Enum):
    COMPLETED = "completed"
    REMOTE_FAULT = "remote_fault"
    UNEXPECTED_FAULT = "unexpected_fault"
    CANCELLED = "cancelled"


@dataclass
class PassReport:
    """Counters and outcome of one reconciliation pass."""
    
    outcome: PassOutcome = PassOutcome.COMPLETED
    pages: int = 0
    created: int = 0
    skipped: int = 0
    downloaded: int = 0
    failed: int = 0
    error: Optional[str] = None
    
    def record(self, result: ObjectResult) -> None:
        if result.action == Action.CREATED:
            self.created += 1
        elif result.action == Action.SKIPPED:
            self.skipped += 1
        elif result.action == Action.DOWNLOADED:
            self.downloaded += 1
        elif result.action == Action.FAILED:
            self.failed += 1
    
    @property
    def completed(self) -> bool:
        return self.outcome == PassOutcome.COMPLETED


class MirrorScheduler:
    """
    Runs reconciliation passes on a fixed interval.
    
    No reconciliation fault stops the loop; only the cancellation token does.
    The interval is constant and does not back off after failed passes.
    """
    
    def __init__(
        self,
        store: ObjectStore,
        reconciler: Reconciler,
        interval_seconds: float,
        token: Optional[CancellationToken] = None,
    ):
        self.store = store
        self.reconciler = reconciler
        self.interval_seconds = interval_seconds
        self.token = token or CancellationToken()
        self.state = State.RUNNING_PASS
        self.last_report: Optional[PassReport] = None
    
    @classmethod
    def from_config(cls, config: Config, token: Optional[CancellationToken] = None) -> "MirrorScheduler":
        """Build the store, reconciler and scheduler from configuration."""
        store = ObjectStore.from_config(config)
        reconciler = Reconciler(store, config.mirror.local_root, chunk_size=config.mirror.chunk_size)
        return cls(store, reconciler, config.mirror.interval_seconds, token=token)
    
    def run_pass(self) -> PassReport:
        """
        Enumerate the whole bucket and reconcile every object.
        
        A remote or unexpected fault ends the pass early; the remaining pages
        are not fetched. The next pass starts again from the first page.
        """
        events.emit(events.PASS_STARTED, bucket=self.store.bucket)
        report = PassReport()
        
        try:
            for page in self.store.iter_pages(self.token):
                report.pages += 1
                for descriptor in page.objects:
                    self.token.raise_if_cancelled()
                    report.record(self.reconciler.reconcile(descriptor, self.token))
        except MirrorCancelled:
            report.outcome = PassOutcome.CANCELLED
        except RemoteFault as e:
            report.outcome = PassOutcome.REMOTE_FAULT
            report.error = e.describe()
            events.emit(events.ERROR, logging.ERROR, scope="pass", message=report.error)
        except Exception as e:
            report.outcome = PassOutcome.UNEXPECTED_FAULT
            report.error = f"{type(e).__name__}: {e}"
            events.emit(events.ERROR, logging.ERROR, scope="pass", message=report.error)
            logger.debug("Unexpected fault during pass", exc_info=True)
        
        events.emit(
            events.PASS_FINISHED,
            outcome=report.outcome.value,
            pages=report.pages,
            created=report.created,
            skipped=report.skipped,
            downloaded=report.downloaded,
            failed=report.failed,
        )
        self.last_report = report
        return report
    
    def run(self, max_passes: Optional[int] = None) -> int:
        """
        Alternate passes and waits until cancelled.
        
        Args:
            max_passes: Stop after this many passes instead of waiting again
            
        Returns:
            The number of passes run
        """
        events.emit(
            events.WORKER_STARTED,
            bucket=self.store.bucket,
            local_root=str(self.reconciler.local_root),
            time=datetime.now().astimezone().isoformat(timespec="seconds"),
        )
        passes = 0
        
        try:
            while not self.token.cancelled:
                self.state = State.RUNNING_PASS
                self.run_pass()
                passes += 1
                
                if self.token.cancelled:
                    break
                if max_passes is not None and passes >= max_passes:
                    break
                
                self.state = State.WAITING
                if self.token.wait(self.interval_seconds):
                    break
        finally:
            self.state = State.TERMINATED
            events.emit(events.WORKER_STOPPED, passes=passes, reason=self.token.reason or "finished")
        
        return passes
