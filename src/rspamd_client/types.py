"""Core immutable data structures exchanged with the rspamd daemon."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import BinaryIO, TypeVar, Union

from requests.structures import CaseInsensitiveDict

Message = Union[bytes, BinaryIO, Iterable[bytes]]
PingResponse = str

QUEUE_ID_HEADER = "Queue-Id"
FLAG_HEADER = "Flag"
WEIGHT_HEADER = "Weight"
USER_HEADER = "User"

_RequestT = TypeVar("_RequestT", bound="_MessageRequest")


class Operation(Enum):
    """Daemon endpoints and the HTTP method each one expects."""

    CHECK = ("POST", "checkv2")
    LEARN_SPAM = ("POST", "learnspam")
    LEARN_HAM = ("POST", "learnham")
    FUZZY_ADD = ("POST", "fuzzyadd")
    FUZZY_DEL = ("POST", "fuzzydel")
    PING = ("GET", "ping")

    def __init__(self, method: str, path: str) -> None:
        self.method = method
        self.path = path

    @property
    def has_body(self) -> bool:
        return self is not Operation.PING


@dataclass(frozen=True)
class _MessageRequest:
    """Fields shared by every request that carries a message."""

    message: Message
    headers: Mapping[str, str] = field(default_factory=dict)
    queue_id: str | None = None

    def __post_init__(self) -> None:
        frozen = MappingProxyType(CaseInsensitiveDict(self.headers))
        object.__setattr__(self, "headers", frozen)

    def with_queue_id(self: _RequestT, queue_id: str) -> _RequestT:
        """Return a copy tagged with ``queue_id``."""

        return replace(self, queue_id=queue_id)

    def with_header(self: _RequestT, name: str, value: str) -> _RequestT:
        """Return a copy with one extra header."""

        headers = CaseInsensitiveDict(self.headers)
        headers[name] = value
        return replace(self, headers=headers)


@dataclass(frozen=True)
class CheckRequest(_MessageRequest):
    """Message submitted to ``/checkv2`` for scoring."""


@dataclass(frozen=True)
class LearnRequest(_MessageRequest):
    """Message submitted to ``/learnspam`` or ``/learnham``."""


@dataclass(frozen=True)
class FuzzyRequest(_MessageRequest):
    """Message submitted to ``/fuzzyadd`` or ``/fuzzydel``.

    ``flag`` selects the fuzzy storage category, ``weight`` is only sent when
    adding. Neither is range-checked; the daemon rejects invalid values.
    """

    flag: int = 0
    weight: int = 0


@dataclass(frozen=True)
class SymbolData:
    """Score contribution of a single rule reported by Check."""

    name: str
    score: float = 0.0
    metric_score: float = 0.0
    description: str = ""


@dataclass(frozen=True)
class CheckResponse:
    """Decoded ``/checkv2`` reply."""

    score: float = 0.0
    action: str = ""
    message_id: str = ""
    symbols: Mapping[str, SymbolData] = field(default_factory=dict)


@dataclass(frozen=True)
class LearnResponse:
    """Decoded ``/learnspam`` and ``/learnham`` reply."""

    success: bool = False


@dataclass(frozen=True)
class FuzzyResponse:
    """Decoded ``/fuzzyadd`` and ``/fuzzydel`` reply."""

    success: bool = False
    hashes: tuple[str, ...] = ()


__all__ = [
    "FLAG_HEADER",
    "QUEUE_ID_HEADER",
    "USER_HEADER",
    "WEIGHT_HEADER",
    "CheckRequest",
    "CheckResponse",
    "FuzzyRequest",
    "FuzzyResponse",
    "LearnRequest",
    "LearnResponse",
    "Message",
    "Operation",
    "PingResponse",
    "SymbolData",
]
