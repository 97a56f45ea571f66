"""Exceptions raised by the rspamd client and predicates to classify them."""

from __future__ import annotations

from http import HTTPStatus


class RspamdError(Exception):
    """Base class for every error surfaced by the client."""


class RequestExecutionError(RspamdError):
    """Raised when a request never produced an HTTP response."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"executing request: {cause}")
        self.cause = cause


class ResponseDecodeError(RspamdError):
    """Raised when a 200 response body does not match the expected shape."""


class UnexpectedResponseError(RspamdError):
    """Raised for any status other than 200.

    ``body`` keeps the raw reply text for diagnostics; it is never decoded.
    """

    def __init__(self, status: int, body: str = "") -> None:
        super().__init__(f"Unexpected response code: {status}")
        self.status = status
        self.body = body


class MessageStreamError(RspamdError):
    """Raised on read when the producer feeding a message pipe failed."""


def is_not_found(err: BaseException | None) -> bool:
    """Return True if ``err`` stems from a 404 reply.

    rspamd answers 404 on ``/checkv2`` when the message vanished from its
    queue before being scanned; callers usually retry or skip such messages.
    """

    return _status_of(err) == HTTPStatus.NOT_FOUND


def is_already_learned_error(err: BaseException | None) -> bool:
    """Return True if ``err`` stems from a 208 reply.

    rspamd answers 208 when a message was already learned as spam or ham.
    """

    return _status_of(err) == HTTPStatus.ALREADY_REPORTED


def _status_of(err: BaseException | None) -> int | None:
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, UnexpectedResponseError):
            return err.status
        seen.add(id(err))
        err = err.__cause__
    return None


__all__ = [
    "MessageStreamError",
    "RequestExecutionError",
    "ResponseDecodeError",
    "RspamdError",
    "UnexpectedResponseError",
    "is_already_learned_error",
    "is_not_found",
]
