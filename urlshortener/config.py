"""
Runtime configuration for the URL shortener
===========================================

Settings are resolved in layers, later layers winning:

    built-in defaults < .env file < command-line flags < environment variables

Environment
-----------
- SERVER_ADDRESS            : host:port to listen on (default "localhost:8080")
- BASE_URL                  : prefix for returned short URLs (default "http://localhost:8080")
- LOG_LEVEL                 : logging level name (default "info")
- FILE_STORAGE_PATH         : path of the append-only JSON log (file backend)
- DATABASE_DSN              : Postgres DSN (database backend)
- SECRET_KEY                : HMAC key for auth tokens
- SHORTENER_STORAGE_BACKEND : optional explicit "memory" | "file" | "postgres"

Deletion pipeline
-----------------
- SHORTENER_DELETE_FLUSH_INTERVAL : seconds between batched flushes (default 10)
- SHORTENER_DELETE_INTAKE_SIZE    : intake queue capacity (default 1)
- SHORTENER_DELETE_BATCH_SIZE     : batch queue capacity (default 64)
- SHORTENER_REQUEST_TIMEOUT       : per-request storage deadline in seconds (default 30)

Flags mirror the first five variables: -a, -b, -l, -f, -d.
SERVER_ADDRESS must carry a port ("host:port", "[v6]:port" or ":port" for all
interfaces); anything else raises ValueError when settings are built.
Read env vars here only; the rest of the codebase receives a `Settings` instance.
"""

import argparse
import os
from typing import Mapping, Optional, Sequence, Tuple

from dotenv import dotenv_values

DEFAULT_RUN_ADDR = "localhost:8080"
DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_SECRET_KEY = "change-me"

# env var -> attribute
_ENV_FIELDS = {
    "SERVER_ADDRESS": "run_addr",
    "BASE_URL": "base_url",
    "LOG_LEVEL": "log_level",
    "FILE_STORAGE_PATH": "file_storage_path",
    "DATABASE_DSN": "database_dsn",
    "SECRET_KEY": "secret_key",
    "SHORTENER_STORAGE_BACKEND": "storage_backend",
}


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def split_host_port(addr: str) -> Tuple[str, int]:
    """
    Split a listen address into (host, port).

    Accepts "host:port", "[ipv6]:port" and ":port"; an empty host means all
    interfaces.

    Raises:
        ValueError: The port is missing or invalid, or an IPv6 host is not bracketed.
    """
    host, sep, port = addr.strip().rpartition(":")
    if not sep:
        raise ValueError(f"address {addr!r}: missing port")
    if host.startswith("[") or host.endswith("]"):
        if not (host.startswith("[") and host.endswith("]")):
            raise ValueError(f"address {addr!r}: unbalanced brackets")
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"address {addr!r}: too many colons, bracket IPv6 hosts")
    if not (port.isascii() and port.isdigit()) or int(port) > 65535:
        raise ValueError(f"address {addr!r}: invalid port {port!r}")
    return host or "0.0.0.0", int(port)


class Settings:
    """Resolved application settings."""

    def __init__(
        self,
        run_addr: str = DEFAULT_RUN_ADDR,
        base_url: str = DEFAULT_BASE_URL,
        log_level: str = DEFAULT_LOG_LEVEL,
        file_storage_path: str = "",
        database_dsn: str = "",
        secret_key: str = DEFAULT_SECRET_KEY,
        storage_backend: str = "",
        request_timeout: float = 30.0,
        delete_flush_interval: float = 10.0,
        delete_intake_size: int = 1,
        delete_batch_size: int = 64,
    ) -> None:
        self.run_addr = run_addr
        self.host, self.port = split_host_port(run_addr)
        self.base_url = base_url.rstrip("/")
        self.log_level = log_level
        self.file_storage_path = file_storage_path
        self.database_dsn = database_dsn
        self.secret_key = secret_key
        self.storage_backend = storage_backend.strip().lower()
        self.request_timeout = request_timeout
        self.delete_flush_interval = delete_flush_interval
        self.delete_intake_size = max(1, delete_intake_size)
        self.delete_batch_size = max(1, delete_batch_size)

    def resolved_backend(self) -> str:
        """Backend name: explicit override, else DSN > file path > memory."""
        if self.storage_backend:
            return self.storage_backend
        if self.database_dsn:
            return "postgres"
        if self.file_storage_path:
            return "file"
        return "memory"

    @classmethod
    def load(
        cls,
        argv: Optional[Sequence[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = ".env",
    ) -> "Settings":
        """
        Build settings from .env, flags and the environment.

        Args:
            argv: command-line arguments (without program name); None skips flag parsing.
            environ: environment mapping; defaults to os.environ.
            dotenv_path: .env file to read; None or a missing file is ignored.
        """
        env = dict(os.environ if environ is None else environ)
        values = {}

        if dotenv_path and os.path.isfile(dotenv_path):
            for name, value in dotenv_values(dotenv_path).items():
                if name in _ENV_FIELDS and value is not None:
                    values[_ENV_FIELDS[name]] = value

        if argv is not None:
            args = build_arg_parser().parse_args(list(argv))
            for attr in ("run_addr", "base_url", "log_level", "file_storage_path", "database_dsn"):
                value = getattr(args, attr)
                if value is not None:
                    values[attr] = value

        for name, attr in _ENV_FIELDS.items():
            if name in env:
                values[attr] = env[name]

        return cls(
            request_timeout=_get_float(env, "SHORTENER_REQUEST_TIMEOUT", 30.0),
            delete_flush_interval=_get_float(env, "SHORTENER_DELETE_FLUSH_INTERVAL", 10.0),
            delete_intake_size=_get_int(env, "SHORTENER_DELETE_INTAKE_SIZE", 1),
            delete_batch_size=_get_int(env, "SHORTENER_DELETE_BATCH_SIZE", 64),
            **values,
        )

    def __repr__(self) -> str:
        # never print the secret or DSN credentials
        return (
            f"Settings(run_addr={self.run_addr!r}, base_url={self.base_url!r}, "
            f"log_level={self.log_level!r}, backend={self.resolved_backend()!r}, "
            f"file_storage_path={self.file_storage_path!r}, "
            f"database_dsn={('set' if self.database_dsn else 'unset')!r})"
        )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="URL shortener service")
    parser.add_argument("-a", dest="run_addr", help="address and port to run server")
    parser.add_argument("-b", dest="base_url", help="server address before shorten URL")
    parser.add_argument("-l", dest="log_level", help="log level")
    parser.add_argument("-f", dest="file_storage_path", help="full file name for saving URLs")
    parser.add_argument("-d", dest="database_dsn", help="database DSN")
    return parser
