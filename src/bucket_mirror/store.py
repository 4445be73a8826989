"""Remote object store access: paginated enumeration and object streams."""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError, HTTPClientError
from botocore.exceptions import ConnectionError as BotoConnectionError

from bucket_mirror.cancellation import CancellationToken
from bucket_mirror.config import Config
from bucket_mirror.errors import RemoteFault

logger = logging.getLogger(__name__)

# Service error codes worth retrying on the next pass
TRANSIENT_ERROR_CODES = {
    "InternalError",
    "RequestTimeout",
    "RequestTimeTooSkewed",
    "ServiceUnavailable",
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
}


@dataclass(frozen=True)
class ObjectDescriptor:
    """One entry of the bucket listing."""
    
    key: str
    size: int
    
    @property
    def is_prefix_marker(self) -> bool:
        """True for folder placeholders (keys ending with '/')."""
        return self.key.endswith("/")


@dataclass(frozen=True)
class ListPage:
    """One page of the bucket listing."""
    
    objects: Tuple[ObjectDescriptor, ...]
    is_truncated: bool
    next_cursor: Optional[str] = None


def classify_fault(operation: str, error: Exception) -> RemoteFault:
    """Translate a botocore exception into a RemoteFault."""
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        code = details.get("Code", "Unknown")
        message = details.get("Message") or str(error)
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode") or 0
        transient = code in TRANSIENT_ERROR_CODES or status >= 500 or status == 429
        return RemoteFault(operation, code, message, transient)
    
    # Connection failures and timeouts may succeed later; credential and
    # parameter errors will not
    transient = isinstance(error, (BotoConnectionError, HTTPClientError))
    return RemoteFault(operation, type(error).__name__, str(error), transient)


@dataclass(frozen=True)
class ObjectStore:
    """
    A bucket bound to an S3 client.
    
    Built once at startup and passed to the scheduler; it holds no mutable
    state of its own.
    """
    
    client: object
    bucket: str
    
    @classmethod
    def from_config(cls, config: Config) -> "ObjectStore":
        """Create the S3 client described by the configuration."""
        config.validate_for_mirror()
        
        session = boto3.Session(**config.get_aws_session_kwargs())
        client = session.client(
            "s3",
            config=config.get_botocore_config(),
            **config.get_s3_client_kwargs(),
        )
        return cls(client=client, bucket=config.s3.bucket_name)
    
    def list_page(self, cursor: Optional[str], token: CancellationToken) -> ListPage:
        """
        Fetch one page of the bucket listing.
        
        Args:
            cursor: Continuation token from the previous page, or None for the first
            token: Cancellation token checked before the request
            
        Returns:
            The page, with the cursor for the next one when truncated
            
        Raises:
            RemoteFault: If the service rejects or fails the request
            MirrorCancelled: If cancellation was requested
        """
        token.raise_if_cancelled()
        
        request = {"Bucket": self.bucket}
        if cursor:
            request["ContinuationToken"] = cursor
        
        try:
            response = self.client.list_objects_v2(**request)
        except (ClientError, BotoCoreError) as e:
            raise classify_fault("ListObjectsV2", e) from e
        
        objects = tuple(
            ObjectDescriptor(key=item["Key"], size=int(item.get("Size", 0)))
            for item in response.get("Contents", [])
        )
        is_truncated = bool(response.get("IsTruncated", False))
        next_cursor = response.get("NextContinuationToken") if is_truncated else None
        
        return ListPage(objects=objects, is_truncated=is_truncated, next_cursor=next_cursor)
    
    def iter_pages(self, token: CancellationToken, cursor: Optional[str] = None) -> Iterator[ListPage]:
        """Yield pages, chaining continuation tokens until the listing is exhausted."""
        while True:
            page = self.list_page(cursor, token)
            yield page
            
            if not page.is_truncated:
                return
            if not page.next_cursor:
                logger.warning("Listing of %s is truncated but has no continuation token", self.bucket)
                return
            cursor = page.next_cursor
    
    def iter_objects(self, token: CancellationToken, cursor: Optional[str] = None) -> Iterator[ObjectDescriptor]:
        """Yield every object in the bucket, in listing order."""
        for page in self.iter_pages(token, cursor):
            yield from page.objects
    
    def open_object(self, key: str, token: CancellationToken):
        """
        Open a streaming body for an object's full content.
        
        The caller owns the returned body and must close it.
        """
        token.raise_if_cancelled()
        
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise classify_fault("GetObject", e) from e
        
        return response["Body"]
