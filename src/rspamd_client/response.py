"""Classify daemon replies into typed results or exceptions."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from http import HTTPStatus
from typing import Any

import requests

from .errors import ResponseDecodeError, UnexpectedResponseError
from .types import (
    CheckResponse,
    FuzzyResponse,
    LearnResponse,
    Operation,
    PingResponse,
    SymbolData,
)


def classify_response(operation: Operation, response: requests.Response) -> Any:
    """Return the decoded result for a 200 reply, raise otherwise.

    The status is inspected before the body, so error replies are never
    decoded into the success shape even when they parse.
    """

    status = response.status_code
    if status != HTTPStatus.OK:
        raise UnexpectedResponseError(status, body=response.text)
    decoder = _DECODERS[operation]
    return decoder(response)


def decode_check(response: requests.Response) -> CheckResponse:
    payload = _json_object(response, Operation.CHECK)
    raw_symbols = payload.get("symbols") or {}
    if not isinstance(raw_symbols, Mapping):
        raise ResponseDecodeError(f"{_label(Operation.CHECK)} field 'symbols' must be an object")
    symbols = {
        str(key): _decode_symbol(str(key), value) for key, value in raw_symbols.items()
    }
    return CheckResponse(
        score=_number(payload, "score", Operation.CHECK),
        action=_string(payload, "action", Operation.CHECK),
        message_id=_string(payload, "message-id", Operation.CHECK),
        symbols=symbols,
    )


def decode_learn(response: requests.Response, operation: Operation) -> LearnResponse:
    payload = _json_object(response, operation)
    return LearnResponse(success=_boolean(payload, "success", operation))


def decode_fuzzy(response: requests.Response, operation: Operation) -> FuzzyResponse:
    payload = _json_object(response, operation)
    raw_hashes = payload.get("hashes") or []
    if not isinstance(raw_hashes, list) or not all(isinstance(h, str) for h in raw_hashes):
        raise ResponseDecodeError(f"{_label(operation)} field 'hashes' must be a list of strings")
    return FuzzyResponse(
        success=_boolean(payload, "success", operation),
        hashes=tuple(raw_hashes),
    )


def decode_ping(response: requests.Response) -> PingResponse:
    """Accept either a JSON string or the daemon's plain ``pong`` text."""

    content_type = response.headers.get("Content-Type", "")
    if "json" in content_type:
        try:
            payload = response.json()
        except ValueError as exc:
            raise ResponseDecodeError(f"decoding ping response: {exc}") from exc
        if not isinstance(payload, str):
            raise ResponseDecodeError("ping response must be a string")
        return payload.strip()
    return response.text.strip()


def _decode_symbol(key: str, value: Any) -> SymbolData:
    if not isinstance(value, Mapping):
        raise ResponseDecodeError(f"{_label(Operation.CHECK)} symbol '{key}' must be an object")
    name = _present(value, "name", key)
    description = _present(value, "description", "")
    if not isinstance(name, str) or not isinstance(description, str):
        raise ResponseDecodeError(f"{_label(Operation.CHECK)} symbol '{key}' has non-string fields")
    return SymbolData(
        name=name,
        score=_number(value, "score", Operation.CHECK),
        metric_score=_number(value, "metric_score", Operation.CHECK),
        description=description,
    )


def _json_object(response: requests.Response, operation: Operation) -> Mapping[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ResponseDecodeError(f"decoding {_label(operation)}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ResponseDecodeError(f"{_label(operation)} must be a JSON object")
    return payload


def _number(payload: Mapping[str, Any], key: str, operation: Operation) -> float:
    value = _present(payload, key, 0.0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ResponseDecodeError(f"{_label(operation)} field '{key}' must be a number")
    return float(value)


def _string(payload: Mapping[str, Any], key: str, operation: Operation) -> str:
    value = _present(payload, key, "")
    if not isinstance(value, str):
        raise ResponseDecodeError(f"{_label(operation)} field '{key}' must be a string")
    return value


def _boolean(payload: Mapping[str, Any], key: str, operation: Operation) -> bool:
    value = _present(payload, key, False)
    if not isinstance(value, bool):
        raise ResponseDecodeError(f"{_label(operation)} field '{key}' must be a boolean")
    return value


def _present(payload: Mapping[str, Any], key: str, default: Any) -> Any:
    """Treat an explicit JSON null like a missing field."""

    value = payload.get(key)
    return default if value is None else value


def _label(operation: Operation) -> str:
    return f"{operation.path} response"


_DECODERS: dict[Operation, Callable[[requests.Response], Any]] = {
    Operation.CHECK: decode_check,
    Operation.LEARN_SPAM: lambda response: decode_learn(response, Operation.LEARN_SPAM),
    Operation.LEARN_HAM: lambda response: decode_learn(response, Operation.LEARN_HAM),
    Operation.FUZZY_ADD: lambda response: decode_fuzzy(response, Operation.FUZZY_ADD),
    Operation.FUZZY_DEL: lambda response: decode_fuzzy(response, Operation.FUZZY_DEL),
    Operation.PING: decode_ping,
}


__all__ = [
    "classify_response",
    "decode_check",
    "decode_fuzzy",
    "decode_learn",
    "decode_ping",
]
