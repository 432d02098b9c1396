"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every knob the service has, in one dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m restkv --addr :9000                              │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── RESTKV_ADDR=:9000 python -m restkv                         │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
LISTEN ADDRESS
=============================================================================

The address is a single "host:port" string:

    ":8080"            → all interfaces, port 8080   (the default)
    "127.0.0.1:8080"   → loopback only
    "localhost:0"      → loopback, port picked by the OS

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Any, Callable, Optional

DEFAULT_ADDR = ":8080"

LOG_FORMATS = ("text", "json")


def parse_addr(addr: str) -> tuple[str, int]:
    """
    Split a "host:port" listen address.

    An empty host means every interface and becomes "0.0.0.0".

    Raises:
        ValueError: If there is no port or it is not a number.
    """
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"Invalid address {addr!r}: missing port (expected host:port)")

    host = host.strip("[]") or "0.0.0.0"
    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"Invalid address {addr!r}: port {port!r} is not a number") from None


def _env_number(name: str, default: str, cast: Callable[[str], Any]) -> Any:
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        kind = "an integer" if cast is int else "a number"
        raise ValueError(f"{name} must be {kind}, got {raw!r}") from None


@dataclass
class ServerConfig:
    """
    Configuration for the key-value HTTP service.

    Development:
        ServerConfig(addr="127.0.0.1:8080", log_level="DEBUG")

    Production:
        ServerConfig(addr=":8080", max_workers=32)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    addr: str = DEFAULT_ADDR
    """Listen address, "host:port". See parse_addr()."""

    backlog: int = 128
    """Connections the kernel queues before accept()."""

    buffer_size: int = 8192
    """Bytes read per recv() call."""

    timeout: Optional[float] = 30.0
    """Socket timeout for the first request on a connection (None = block)."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    keep_alive_timeout: float = 5.0
    """Idle seconds before a kept-alive connection is closed."""

    max_request_size: int = 1024 * 1024
    """Largest request accepted (413 above). Requests here carry no body."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16
    queue_size: int = 100
    """Connections waiting for a worker; beyond this clients get 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: "text" (Apache-like) or "json"."""

    server_name: str = "restkv/1.0"

    @property
    def host(self) -> str:
        return parse_addr(self.addr)[0]

    @property
    def port(self) -> int:
        return parse_addr(self.addr)[1]

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a configuration from environment variables.

            RESTKV_ADDR        Listen address      (default :8080)
            RESTKV_WORKERS     Max worker threads  (default 16)
            RESTKV_TIMEOUT     Request timeout, s  (default 30)
            RESTKV_LOG_LEVEL   Logging level       (default INFO)
            RESTKV_LOG_FORMAT  text | json         (default text)

        Raises:
            ValueError: If RESTKV_WORKERS or RESTKV_TIMEOUT is not a number.
        """
        max_workers = _env_number("RESTKV_WORKERS", "16", int)
        return cls(
            addr=os.getenv("RESTKV_ADDR", DEFAULT_ADDR),
            min_workers=min(cls.min_workers, max_workers),
            max_workers=max_workers,
            timeout=_env_number("RESTKV_TIMEOUT", "30", float),
            log_level=os.getenv("RESTKV_LOG_LEVEL", "INFO"),
            log_format=os.getenv("RESTKV_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Fail fast on bad values, before any socket is opened.

        Raises:
            ValueError: Describing the first invalid setting.
        """
        _, port = parse_addr(self.addr)
        if not 0 <= port < 65536:
            raise ValueError(f"Invalid port: {port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")
