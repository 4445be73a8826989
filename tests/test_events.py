"""Tests for structured log events."""

import io
import logging

from rich.console import Console
from rich.logging import RichHandler

from bucket_mirror import events


class TestEvents:
    """Test event emission and logging setup."""
    
    def test_format_event(self):
        assert events.format_event("file-skipped", {"key": "a.txt"}) == "file-skipped key=a.txt"
    
    def test_format_event_without_fields(self):
        assert events.format_event("pass-started", {}) == "pass-started"
    
    def test_emit_attaches_structured_fields(self, caplog):
        caplog.set_level(logging.INFO, logger="bucket_mirror")
        
        events.emit(events.FILE_DOWNLOADED, path="/data/a.jpg")
        
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.event == "file-downloaded"
        assert record.event_fields == {"path": "/data/a.jpg"}
        assert record.getMessage() == "file-downloaded path=/data/a.jpg"
    
    def test_emit_error_level(self, caplog):
        caplog.set_level(logging.INFO, logger="bucket_mirror")
        
        events.emit(events.ERROR, logging.ERROR, scope="pass", message="boom")
        
        assert caplog.records[-1].levelno == logging.ERROR
        assert caplog.records[-1].event_fields == {"scope": "pass", "message": "boom"}


class TestConfigureLogging:
    """Test the rich handler setup."""
    
    def teardown_method(self):
        for handler in list(events.logger.handlers):
            if isinstance(handler, RichHandler):
                events.logger.removeHandler(handler)
        events.logger.setLevel(logging.NOTSET)
        for name in ("boto3", "botocore", "s3transfer", "urllib3"):
            logging.getLogger(name).setLevel(logging.NOTSET)
    
    def test_single_handler_after_repeated_calls(self):
        events.configure_logging()
        events.configure_logging()
        
        rich_handlers = [h for h in events.logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert events.logger.level == logging.INFO
        assert logging.getLogger("botocore").level == logging.WARNING
    
    def test_verbose_enables_debug(self):
        events.configure_logging(verbose=True)
        
        assert events.logger.level == logging.DEBUG
    
    def test_events_render_to_console(self):
        buffer = io.StringIO()
        events.configure_logging(console=Console(file=buffer, width=200))
        
        events.emit(events.FILE_SKIPPED, key="photos/[a].jpg")
        
        assert "file-skipped key=photos/[a].jpg" in buffer.getvalue()
