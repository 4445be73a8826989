"""Bucket Mirror - Periodically mirror an S3 bucket onto a local directory."""

__version__ = "0.1.0"

from bucket_mirror.config import Config
from bucket_mirror.scheduler import MirrorScheduler

__all__ = ["MirrorScheduler", "Config", "__version__"]
