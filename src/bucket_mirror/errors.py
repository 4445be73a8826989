"""Exception types for Bucket Mirror."""

from typing import Optional


class MirrorError(Exception):
    """Base class for all Bucket Mirror errors."""


class ConfigurationError(MirrorError):
    """Raised when required configuration is missing or invalid."""


class MirrorCancelled(MirrorError):
    """Raised at a cancellation point once shutdown has been requested."""


class UnsafeKeyError(MirrorError):
    """Raised when an object key would map outside the local root."""

    def __init__(self, key: str):
        super().__init__(f"Object key escapes the local root: {key!r}")
        self.key = key


class RemoteFault(MirrorError):
    """
    A fault reported by the object store.
    
    Attributes:
        operation: Store operation that failed (e.g. ListObjectsV2)
        code: Service error code, or the botocore exception name
        message: Human readable error message
        transient: True when a later attempt may succeed (throttling,
            server errors, timeouts); False for rejected requests
    """
    
    def __init__(self, operation: str, code: str, message: str, transient: bool):
        super().__init__(f"{operation} failed ({code}): {message}")
        self.operation = operation
        self.code = code
        self.message = message
        self.transient = transient
    
    @property
    def kind(self) -> str:
        """Short classification used in log events."""
        return "transient" if self.transient else "request"
    
    def describe(self, key: Optional[str] = None) -> str:
        """Format the fault for logging, optionally naming the object key."""
        target = f" for {key}" if key else ""
        return f"{self.kind} fault in {self.operation}{target}: [{self.code}] {self.message}"
