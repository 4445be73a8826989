"""Configuration management for Bucket Mirror."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from botocore.config import Config as BotoConfig
from pydantic import BaseModel, Field

from bucket_mirror.errors import ConfigurationError

ENV_PREFIX = "BUCKET_MIRROR_"

DEFAULT_INTERVAL_SECONDS = 60 * 60
DEFAULT_CHUNK_SIZE = 1024 * 1024


class AWSConfig(BaseModel):
    """AWS credentials and client settings."""
    
    profile: Optional[str] = None
    region: str = "us-east-1"
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint_url: Optional[str] = None
    
    # Bound every network call so a stalled request cannot block shutdown
    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    max_attempts: int = 3


class S3Config(BaseModel):
    """Source bucket settings."""
    
    bucket_name: Optional[str] = None


class MirrorConfig(BaseModel):
    """Local mirror settings."""
    
    local_root: Optional[Path] = None
    interval_seconds: float = Field(default=DEFAULT_INTERVAL_SECONDS, gt=0)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)


class Config(BaseModel):
    """Main configuration class."""
    
    aws: AWSConfig = Field(default_factory=AWSConfig)
    s3: S3Config = Field(default_factory=S3Config)
    mirror: MirrorConfig = Field(default_factory=MirrorConfig)
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".bucket-mirror")
    verbose: bool = False
    
    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Config":
        """
        Build a configuration from the flat mapping stored in the user config file.
        
        Unknown keys are ignored so older files keep loading.
        """
        config = cls()
        config.apply(data or {})
        return config
    
    @classmethod
    def from_env(cls, base: Optional["Config"] = None) -> "Config":
        """Create configuration from environment variables, layered over ``base``."""
        config = base.model_copy(deep=True) if base else cls()
        
        values = {}
        for name in (
            "profile",
            "region",
            "access_key_id",
            "secret_access_key",
            "endpoint_url",
            "bucket",
            "local_root",
            "interval",
            "verbose",
        ):
            value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if value is not None:
                values[name] = value
        
        config.apply(values)
        return config
    
    def apply(self, values: Dict[str, Any]) -> None:
        """Apply flat overrides (``bucket``, ``local_root``, ``profile`` ...)."""
        for name in ("profile", "region", "access_key_id", "secret_access_key", "endpoint_url"):
            if values.get(name):
                setattr(self.aws, name, values[name])
        
        if values.get("bucket"):
            self.s3.bucket_name = values["bucket"]
        if values.get("local_root"):
            self.mirror.local_root = Path(values["local_root"]).expanduser()
        if values.get("interval") is not None:
            interval = float(values["interval"])
            if interval <= 0:
                raise ConfigurationError(f"Interval must be positive, got {interval}")
            self.mirror.interval_seconds = interval
        if values.get("verbose") is not None:
            self.verbose = str(values["verbose"]).lower() in ("1", "true", "yes", "on")
    
    def validate_for_mirror(self) -> None:
        """Raise ConfigurationError unless a bucket and a local root are set."""
        if not self.s3.bucket_name:
            raise ConfigurationError("S3 bucket not configured")
        if not self.mirror.local_root:
            raise ConfigurationError("Local root directory not configured")
    
    def get_aws_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for creating boto3 session."""
        kwargs = {"region_name": self.aws.region}
        if self.aws.profile:
            kwargs["profile_name"] = self.aws.profile
        return kwargs
    
    def get_s3_client_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for creating S3 client."""
        kwargs = {"region_name": self.aws.region}
        
        if self.aws.access_key_id and self.aws.secret_access_key:
            kwargs["aws_access_key_id"] = self.aws.access_key_id
            kwargs["aws_secret_access_key"] = self.aws.secret_access_key
        if self.aws.endpoint_url:
            kwargs["endpoint_url"] = self.aws.endpoint_url
        
        return kwargs
    
    def get_botocore_config(self) -> BotoConfig:
        """Client config with bounded timeouts and retries."""
        return BotoConfig(
            connect_timeout=self.aws.connect_timeout,
            read_timeout=self.aws.read_timeout,
            retries={"max_attempts": self.aws.max_attempts, "mode": "standard"},
        )
    
    def masked(self) -> Dict[str, Any]:
        """Resolved settings for display, with secrets hidden."""
        secret = self.aws.secret_access_key
        return {
            "bucket": self.s3.bucket_name,
            "local_root": str(self.mirror.local_root) if self.mirror.local_root else None,
            "interval_seconds": self.mirror.interval_seconds,
            "profile": self.aws.profile,
            "region": self.aws.region,
            "endpoint_url": self.aws.endpoint_url,
            "access_key_id": self.aws.access_key_id,
            "secret_access_key": "****" if secret else None,
        }
