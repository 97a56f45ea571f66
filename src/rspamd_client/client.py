"""HTTP client for the rspamd daemon."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import requests

from .builder import RequestValue, build_request
from .config import ClientConfig, Credentials
from .errors import MessageStreamError, RequestExecutionError
from .response import classify_response
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

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class RspamdClient(Protocol):
    """Operations offered by the daemon's controller API."""

    def check(self, request: CheckRequest) -> CheckResponse:
        """Scan a message, returning its spam score and matched symbols."""

    def learn_spam(self, request: LearnRequest) -> LearnResponse:
        """Train the Bayesian classifier with a spam sample."""

    def learn_ham(self, request: LearnRequest) -> LearnResponse:
        """Train the Bayesian classifier with a ham sample."""

    def fuzzy_add(self, request: FuzzyRequest) -> FuzzyResponse:
        """Add a message to fuzzy storage."""

    def fuzzy_del(self, request: FuzzyRequest) -> FuzzyResponse:
        """Remove a message from fuzzy storage."""

    def ping(self) -> PingResponse:
        """Check that the daemon is alive."""


class Client:
    """Blocking :class:`RspamdClient` backed by a :class:`requests.Session`.

    The configuration is frozen at construction. One client may be shared by
    several threads, but each request's message stream belongs to one call.
    Transport failures raise :class:`RequestExecutionError`; every status
    other than 200 raises :class:`UnexpectedResponseError`. Nothing is retried.
    """

    def __init__(
        self,
        url: str,
        *,
        credentials: Credentials | tuple[str, str] | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if isinstance(credentials, tuple):
            credentials = Credentials(*credentials)
        self._config = ClientConfig(url=url, credentials=credentials, timeout=timeout)
        self._session = session or requests.Session()

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        session: requests.Session | None = None,
    ) -> Client:
        """Build a client from an already validated :class:`ClientConfig`."""

        return cls(
            config.url,
            credentials=config.credentials,
            timeout=config.timeout,
            session=session,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.url

    def check(self, request: CheckRequest) -> CheckResponse:
        return self._call(Operation.CHECK, request)

    def learn_spam(self, request: LearnRequest) -> LearnResponse:
        return self._call(Operation.LEARN_SPAM, request)

    def learn_ham(self, request: LearnRequest) -> LearnResponse:
        return self._call(Operation.LEARN_HAM, request)

    def fuzzy_add(self, request: FuzzyRequest) -> FuzzyResponse:
        return self._call(Operation.FUZZY_ADD, request)

    def fuzzy_del(self, request: FuzzyRequest) -> FuzzyResponse:
        return self._call(Operation.FUZZY_DEL, request)

    def ping(self) -> PingResponse:
        return self._call(Operation.PING)

    def close(self) -> None:
        """Release pooled connections held by the underlying session."""

        self._session.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()

    def _call(self, operation: Operation, request: RequestValue | None = None) -> Any:
        outgoing = build_request(
            operation,
            self._config.url,
            request,
            username=self._config.username,
        )
        credentials = self._config.credentials
        if credentials is not None:
            outgoing.auth = (credentials.username, credentials.password)
        prepared = self._session.prepare_request(outgoing)
        LOGGER.debug("Sending %s %s", prepared.method, prepared.url)
        response = self._send(prepared)
        with response:
            LOGGER.debug("Daemon replied %s to %s", response.status_code, prepared.url)
            return classify_response(operation, response)

    def _send(self, prepared: requests.PreparedRequest) -> requests.Response:
        settings = self._session.merge_environment_settings(prepared.url, {}, None, None, None)
        try:
            return self._session.send(prepared, timeout=self._config.timeout, **settings)
        except (requests.RequestException, MessageStreamError) as exc:
            raise RequestExecutionError(exc) from exc


__all__ = ["Client", "RspamdClient"]
