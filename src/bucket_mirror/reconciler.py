"""Reconcile one remote object against the local mirror."""

import logging
from contextlib import closing
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from bucket_mirror import events
from bucket_mirror.cancellation import CancellationToken
from bucket_mirror.config import DEFAULT_CHUNK_SIZE
from bucket_mirror.errors import MirrorCancelled, RemoteFault, UnsafeKeyError
from bucket_mirror.store import ObjectDescriptor, ObjectStore


class Action(str, Enum):
    """What reconciling one object did."""
    
    CREATED = "created"
    EXISTS = "exists"
    SKIPPED = "skipped"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


@dataclass(frozen=True)
class ObjectResult:
    """Outcome of reconciling a single object."""
    
    key: str
    action: Action
    path: Optional[Path] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class LocalEntry:
    """The local side of a comparison, read fresh from the filesystem."""
    
    path: Path
    exists: bool
    size: Optional[int] = None
    
    @classmethod
    def probe(cls, path: Path) -> "LocalEntry":
        if path.is_file():
            return cls(path=path, exists=True, size=path.stat().st_size)
        return cls(path=path, exists=False)


def local_path_for(local_root: Path, key: str) -> Path:
    """
    Map an object key to its local path.
    
    The key is split on '/' and joined onto the root; empty segments are
    dropped so leading slashes cannot escape the root.
    
    Raises:
        UnsafeKeyError: If the key contains a '..' segment
    """
    segments = [segment for segment in key.split("/") if segment and segment != "."]
    if ".." in segments:
        raise UnsafeKeyError(key)
    return local_root.joinpath(*segments)


def is_in_sync(descriptor: ObjectDescriptor, entry: LocalEntry) -> bool:
    """
    Whether the local file already mirrors the object.
    
    Only sizes are compared: a same-size content change is not detected.
    """
    return entry.exists and entry.size == descriptor.size


class Reconciler:
    """Applies one descriptor to the local tree: create, skip or download."""
    
    def __init__(self, store: ObjectStore, local_root: Path, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.store = store
        self.local_root = Path(local_root)
        self.chunk_size = chunk_size
    
    def reconcile(self, descriptor: ObjectDescriptor, token: CancellationToken) -> ObjectResult:
        """
        Bring the local path for ``descriptor`` in line with the remote object.
        
        Download and write failures are reported in the result rather than
        raised, so the rest of the pass can continue.
        
        Raises:
            MirrorCancelled: If cancellation is observed mid-download
            OSError: If a folder marker's directory cannot be created or the
                local file cannot be inspected
        """
        try:
            path = local_path_for(self.local_root, descriptor.key)
        except UnsafeKeyError as e:
            return self._failed(descriptor, None, str(e))
        
        if descriptor.is_prefix_marker:
            return self._materialize_directory(descriptor, path)
        
        if is_in_sync(descriptor, LocalEntry.probe(path)):
            events.emit(events.FILE_SKIPPED, key=descriptor.key)
            return ObjectResult(key=descriptor.key, action=Action.SKIPPED, path=path)
        
        return self._download(descriptor, path, token)
    
    def _materialize_directory(self, descriptor: ObjectDescriptor, path: Path) -> ObjectResult:
        """Create the directory for a folder marker if it is missing."""
        if path.is_dir():
            return ObjectResult(key=descriptor.key, action=Action.EXISTS, path=path)
        
        path.mkdir(parents=True, exist_ok=True)
        events.emit(events.DIRECTORY_CREATED, path=str(path))
        return ObjectResult(key=descriptor.key, action=Action.CREATED, path=path)
    
    def _download(self, descriptor: ObjectDescriptor, path: Path, token: CancellationToken) -> ObjectResult:
        """Stream the object into ``path``, overwriting in place."""
        events.emit(events.FILE_DOWNLOADING, key=descriptor.key)
        
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            
            # Open the remote stream first so a failed request leaves the old file intact
            with closing(self.store.open_object(descriptor.key, token)) as body:
                with open(path, "wb") as f:
                    for chunk in body.iter_chunks(self.chunk_size):
                        token.raise_if_cancelled()
                        f.write(chunk)
        except MirrorCancelled:
            raise
        except RemoteFault as e:
            return self._failed(descriptor, path, e.describe(descriptor.key))
        except Exception as e:
            return self._failed(descriptor, path, f"Failed to download {descriptor.key}: {e}")
        
        events.emit(events.FILE_DOWNLOADED, path=str(path))
        return ObjectResult(key=descriptor.key, action=Action.DOWNLOADED, path=path)
    
    def _failed(self, descriptor: ObjectDescriptor, path: Optional[Path], message: str) -> ObjectResult:
        events.emit(events.ERROR, logging.ERROR, scope="object", key=descriptor.key, message=message)
        return ObjectResult(key=descriptor.key, action=Action.FAILED, path=path, error=message)
