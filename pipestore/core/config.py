"""
Configuration module.

Dataclass configuration for the built-in storage adapters.
Every config accepts either the dataclass itself or a plain dict.
"""
import os
import ssl
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Dict, Any, Union, Sequence

from .exceptions import ConfigurationError

DEFAULT_CHUNK_SIZE = 64 * 1024


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.

    Allows customization of SSL behavior for security requirements.
    """
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """Create SSL context from configuration."""
        if not self.verify:
            return False  # Disable SSL verification

        context = ssl.create_default_context()

        if self.ca_file:
            context.load_verify_locations(self.ca_file)

        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )

        context.check_hostname = self.check_hostname

        return context

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SSLConfig':
        return cls(**_known_fields(cls, data))


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    Granular control over different timeout types.
    """
    total: Optional[float] = None  # No overall limit, transfers can be long
    connect: float = 30.0
    sock_read: float = 60.0
    sock_connect: float = 30.0

    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimeoutConfig':
        return cls(**_known_fields(cls, data))


@dataclass
class FilesystemConfig:
    """
    Filesystem adapter configuration.

    Attributes:
        root: Absolute directory all locations are relative to. A sequence
            of parts is joined. Defaults to the current working directory.
        chunk_size: Read size used for downloads
    """
    root: Union[str, Path, Sequence[str], None] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        """Validate and normalize config."""
        if self.root is None:
            self.root = Path(os.getcwd())
        elif isinstance(self.root, (list, tuple)):
            self.root = Path(*self.root)
        else:
            self.root = Path(self.root)

        if not self.root.is_absolute():
            raise ConfigurationError(f"Filesystem root must be absolute, got: {self.root}")

        if self.chunk_size <= 0:
            raise ConfigurationError("Chunk size must be positive")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'FilesystemConfig':
        return cls(**_known_fields(cls, data or {}))


@dataclass
class HttpConfig:
    """
    HTTP object store adapter configuration.

    Attributes:
        base_url: URL every location is appended to
        headers: Extra headers sent with every request
        timeout: Timeout configuration
        ssl: SSL configuration
        queue_size: Chunks buffered between the pipeline and the upload request
        chunk_size: Read size used for downloads
    """
    base_url: str = ''
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    ssl: SSLConfig = field(default_factory=SSLConfig)
    queue_size: int = 8
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        if not self.base_url:
            raise ConfigurationError("HTTP adapter requires a base_url")
        self.base_url = self.base_url.rstrip('/')
        if isinstance(self.timeout, dict):
            self.timeout = TimeoutConfig.from_dict(self.timeout)
        if isinstance(self.ssl, dict):
            self.ssl = SSLConfig.from_dict(self.ssl)
        if self.queue_size <= 0:
            raise ConfigurationError("Queue size must be positive")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'HttpConfig':
        return cls(**_known_fields(cls, data or {}))
