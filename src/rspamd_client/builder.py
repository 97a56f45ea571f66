"""Translate typed request values into outgoing HTTP requests."""

from __future__ import annotations

import requests
from requests.structures import CaseInsensitiveDict

from .types import (
    FLAG_HEADER,
    QUEUE_ID_HEADER,
    USER_HEADER,
    WEIGHT_HEADER,
    CheckRequest,
    FuzzyRequest,
    LearnRequest,
    Operation,
)

RequestValue = CheckRequest | LearnRequest | FuzzyRequest


def endpoint_url(base_url: str, operation: Operation) -> str:
    """Join the daemon base URL with the operation path."""

    return f"{base_url.rstrip('/')}/{operation.path}"


def build_request(
    operation: Operation,
    base_url: str,
    request: RequestValue | None = None,
    *,
    username: str | None = None,
) -> requests.Request:
    """Assemble the HTTP request for one daemon operation.

    The message is attached untouched so the transport streams it; nothing
    here reads from it.
    """

    headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()
    if username:
        headers[USER_HEADER] = username

    if not operation.has_body:
        return requests.Request(
            method=operation.method,
            url=endpoint_url(base_url, operation),
            headers=headers,
        )
    if request is None:
        raise ValueError(f"{operation.name} requires a request carrying a message")

    headers.update(request.headers)
    if request.queue_id:
        headers[QUEUE_ID_HEADER] = request.queue_id
    if operation in (Operation.FUZZY_ADD, Operation.FUZZY_DEL):
        if not isinstance(request, FuzzyRequest):
            raise TypeError(f"{operation.name} expects a FuzzyRequest")
        headers[FLAG_HEADER] = str(request.flag)
        if operation is Operation.FUZZY_ADD:
            headers[WEIGHT_HEADER] = str(request.weight)

    return requests.Request(
        method=operation.method,
        url=endpoint_url(base_url, operation),
        headers=headers,
        data=request.message,
    )


__all__ = ["RequestValue", "build_request", "endpoint_url"]
