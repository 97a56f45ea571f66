"""Recordable stand-in for :class:`~rspamd_client.client.Client`.

Applications that talk to rspamd can swap :class:`FakeClient` in for the real
client in their own tests::

    fake = FakeClient()
    fake.stub(Operation.CHECK, CheckResponse(score=7.5, action="reject"))
    fake.stub(Operation.LEARN_SPAM, error=UnexpectedResponseError(208))

    handle_incoming(fake, message)

    assert fake.calls_for(Operation.CHECK)[0].request.queue_id == "abc"
"""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any

from .builder import RequestValue
from .types import (
    CheckRequest,
    CheckResponse,
    FuzzyRequest,
    FuzzyResponse,
    LearnRequest,
    LearnResponse,
    Operation,
    PingResponse,
)


@dataclass(frozen=True)
class RecordedCall:
    """A single operation invoked on a :class:`FakeClient`."""

    operation: Operation
    request: RequestValue | None


@dataclass(frozen=True)
class _Stub:
    result: Any
    error: BaseException | None


class FakeClient:
    """In-memory client that records calls and replays stubbed outcomes.

    Stubs for an operation are consumed in registration order; the last one
    keeps answering once the others are used up. Calling an operation with
    no stub raises :class:`LookupError`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stubs: dict[Operation, list[_Stub]] = defaultdict(list)
        self._calls: list[RecordedCall] = []

    def stub(
        self,
        operation: Operation,
        result: Any = None,
        *,
        error: BaseException | None = None,
    ) -> FakeClient:
        """Queue a result (or an exception to raise) for ``operation``."""

        if result is None and error is None:
            raise ValueError("stub requires a result or an error")
        with self._lock:
            self._stubs[operation].append(_Stub(result=result, error=error))
        return self

    @property
    def calls(self) -> list[RecordedCall]:
        with self._lock:
            return list(self._calls)

    def calls_for(self, operation: Operation) -> list[RecordedCall]:
        """Return recorded calls of a single operation."""

        return [call for call in self.calls if call.operation is operation]

    def reset(self) -> None:
        """Forget recorded calls and registered stubs."""

        with self._lock:
            self._stubs.clear()
            self._calls.clear()

    def check(self, request: CheckRequest) -> CheckResponse:
        return self._dispatch(Operation.CHECK, request)

    def learn_spam(self, request: LearnRequest) -> LearnResponse:
        return self._dispatch(Operation.LEARN_SPAM, request)

    def learn_ham(self, request: LearnRequest) -> LearnResponse:
        return self._dispatch(Operation.LEARN_HAM, request)

    def fuzzy_add(self, request: FuzzyRequest) -> FuzzyResponse:
        return self._dispatch(Operation.FUZZY_ADD, request)

    def fuzzy_del(self, request: FuzzyRequest) -> FuzzyResponse:
        return self._dispatch(Operation.FUZZY_DEL, request)

    def ping(self) -> PingResponse:
        return self._dispatch(Operation.PING, None)

    def _dispatch(self, operation: Operation, request: RequestValue | None) -> Any:
        with self._lock:
            self._calls.append(RecordedCall(operation=operation, request=request))
            pending = self._stubs.get(operation)
            if not pending:
                raise LookupError(f"No stubbed result for {operation.name}")
            stub = pending.pop(0) if len(pending) > 1 else pending[0]
        if stub.error is not None:
            raise stub.error
        return stub.result


__all__ = ["FakeClient", "RecordedCall"]
