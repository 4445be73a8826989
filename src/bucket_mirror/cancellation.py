"""Cooperative cancellation shared by every blocking operation."""

import threading
from typing import Optional

from bucket_mirror.errors import MirrorCancelled


class CancellationToken:
    """A one-way flag that long-running operations poll and wait on."""
    
    def __init__(self):
        self._event = threading.Event()
        self.reason: Optional[str] = None
    
    def cancel(self, reason: str = "cancelled") -> None:
        """Request cancellation. Safe to call from a signal handler or another thread."""
        if not self._event.is_set():
            self.reason = reason
        self._event.set()
    
    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
    
    def raise_if_cancelled(self) -> None:
        """Raise MirrorCancelled once cancellation has been requested."""
        if self._event.is_set():
            raise MirrorCancelled(self.reason or "cancelled")
    
    def wait(self, timeout: float) -> bool:
        """
        Sleep for up to ``timeout`` seconds.
        
        Returns:
            True if cancellation was requested before the timeout elapsed
        """
        return self._event.wait(timeout)
