"""Client library for the rspamd daemon's HTTP API."""

from importlib import metadata

from .client import Client, RspamdClient
from .config import ClientConfig, ConfigError, Credentials
from .errors import (
    MessageStreamError,
    RequestExecutionError,
    ResponseDecodeError,
    RspamdError,
    UnexpectedResponseError,
    is_already_learned_error,
    is_not_found,
)
from .stream import stream_email, stream_from_writer
from .types import (
    CheckRequest,
    CheckResponse,
    FuzzyRequest,
    FuzzyResponse,
    LearnRequest,
    LearnResponse,
    Operation,
    PingResponse,
    SymbolData,
)


def _discover_version() -> str:
    """Return the installed package version, falling back to dev marker."""
    try:
        return metadata.version("rspamd-client")
    except metadata.PackageNotFoundError:  # pragma: no cover - occurs in source checkouts
        return "0.0.0"


__version__ = _discover_version()

__all__ = [
    "__version__",
    "CheckRequest",
    "CheckResponse",
    "Client",
    "ClientConfig",
    "ConfigError",
    "Credentials",
    "FuzzyRequest",
    "FuzzyResponse",
    "LearnRequest",
    "LearnResponse",
    "MessageStreamError",
    "Operation",
    "PingResponse",
    "RequestExecutionError",
    "ResponseDecodeError",
    "RspamdClient",
    "RspamdError",
    "SymbolData",
    "UnexpectedResponseError",
    "is_already_learned_error",
    "is_not_found",
    "stream_email",
    "stream_from_writer",
]
