"""Shared fixtures: an in-memory S3 client and event capture."""

import io
import logging
from typing import Callable, Dict, Optional

import pytest
from botocore.exceptions import ClientError
from botocore.response import StreamingBody

from bucket_mirror.store import ObjectStore


def client_error(code: str, status: int, operation: str = "ListObjectsV2") -> ClientError:
    """Build a ClientError the way botocore raises it."""
    return ClientError(
        error_response={
            "Error": {"Code": code, "Message": f"{code} message"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation_name=operation,
    )


class FakeS3Client:
    """
    Minimal stand-in for a boto3 S3 client.
    
    Objects are listed in insertion order, ``page_size`` per page, with
    continuation tokens of the form ``token-<offset>``.
    """
    
    def __init__(self, objects: Dict[str, bytes], page_size: int = 1000):
        self.objects = dict(objects)
        self.page_size = page_size
        self.list_calls = []
        self.get_calls = []
        self.list_failures: Dict[int, Exception] = {}
        self.get_failures: Dict[str, Exception] = {}
        self.on_get: Optional[Callable[[str], None]] = None
        self.bodies = []
    
    def list_objects_v2(self, **kwargs):
        call_index = len(self.list_calls)
        self.list_calls.append(kwargs)
        if call_index in self.list_failures:
            raise self.list_failures[call_index]
        
        keys = list(self.objects)
        token = kwargs.get("ContinuationToken")
        start = int(token.split("-", 1)[1]) if token else 0
        end = start + self.page_size
        page_keys = keys[start:end]
        
        response = {"IsTruncated": end < len(keys), "KeyCount": len(page_keys)}
        if page_keys:
            response["Contents"] = [{"Key": key, "Size": len(self.objects[key])} for key in page_keys]
        if end < len(keys):
            response["NextContinuationToken"] = f"token-{end}"
        return response
    
    def get_object(self, Bucket, Key):
        self.get_calls.append(Key)
        if self.on_get:
            self.on_get(Key)
        if Key in self.get_failures:
            raise self.get_failures[Key]
        
        data = self.objects[Key]
        body = StreamingBody(io.BytesIO(data), len(data))
        self.bodies.append(body)
        return {"Body": body, "ContentLength": len(data)}


class FailingBody:
    """A response body that breaks after the first chunk."""
    
    def __init__(self, first_chunk: bytes, error: Exception):
        self.first_chunk = first_chunk
        self.error = error
        self.closed = False
    
    def iter_chunks(self, chunk_size):
        yield self.first_chunk
        raise self.error
    
    def close(self):
        self.closed = True


@pytest.fixture
def photos_objects():
    """The photo bucket used by the end-to-end scenarios."""
    return {
        "photos/": b"",
        "photos/a.jpg": b"a" * 1000,
        "photos/b.jpg": b"b" * 2000,
    }


@pytest.fixture
def make_store():
    """Factory for an ObjectStore over a FakeS3Client."""
    def _make(objects: Dict[str, bytes], page_size: int = 1000):
        client = FakeS3Client(objects, page_size=page_size)
        return ObjectStore(client=client, bucket="test-bucket"), client
    
    return _make


@pytest.fixture
def mirror_events(caplog):
    """Return a function listing (event, fields) pairs emitted so far."""
    caplog.set_level(logging.DEBUG, logger="bucket_mirror")
    
    def _events(*names):
        found = [
            (record.event, record.event_fields)
            for record in caplog.records
            if hasattr(record, "event")
        ]
        if names:
            found = [item for item in found if item[0] in names]
        return found
    
    return _events
