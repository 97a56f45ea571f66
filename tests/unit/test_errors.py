from __future__ import annotations

import pytest

from rspamd_client.errors import (
    RequestExecutionError,
    RspamdError,
    UnexpectedResponseError,
    is_already_learned_error,
    is_not_found,
)


def test_unexpected_response_message_is_stable():
    err = UnexpectedResponseError(503)

    assert str(err) == "Unexpected response code: 503"
    assert err.status == 503
    assert isinstance(err, RspamdError)


@pytest.mark.parametrize(
    "status, not_found, already_learned",
    [(404, True, False), (208, False, True), (400, False, False), (200, False, False)],
)
def test_predicates_match_only_their_status(status, not_found, already_learned):
    err = UnexpectedResponseError(status)

    assert is_not_found(err) is not_found
    assert is_already_learned_error(err) is already_learned


def test_predicates_follow_cause_chain():
    try:
        try:
            raise UnexpectedResponseError(208)
        except UnexpectedResponseError as inner:
            raise RuntimeError("learning failed") from inner
    except RuntimeError as outer:
        wrapped = outer

    assert is_already_learned_error(wrapped)
    assert not is_not_found(wrapped)


def test_predicates_reject_unrelated_errors():
    execution = RequestExecutionError(ConnectionError("refused"))

    assert str(execution) == "executing request: refused"
    assert not is_not_found(execution)
    assert not is_already_learned_error(execution)
    assert not is_not_found(None)
    assert not is_already_learned_error(ValueError("nope"))
