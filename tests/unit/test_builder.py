from __future__ import annotations

import io

import pytest

from rspamd_client.builder import build_request, endpoint_url
from rspamd_client.types import CheckRequest, FuzzyRequest, LearnRequest, Operation

BASE_URL = "http://localhost:11333"


class _CountingStream(io.BytesIO):
    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.reads = 0

    def read(self, size: int | None = -1) -> bytes:
        self.reads += 1
        return super().read(size)


@pytest.mark.parametrize(
    "operation, method, url",
    [
        (Operation.CHECK, "POST", f"{BASE_URL}/checkv2"),
        (Operation.LEARN_SPAM, "POST", f"{BASE_URL}/learnspam"),
        (Operation.LEARN_HAM, "POST", f"{BASE_URL}/learnham"),
        (Operation.FUZZY_ADD, "POST", f"{BASE_URL}/fuzzyadd"),
        (Operation.FUZZY_DEL, "POST", f"{BASE_URL}/fuzzydel"),
        (Operation.PING, "GET", f"{BASE_URL}/ping"),
    ],
)
def test_operation_endpoints(operation, method, url):
    request = None if operation is Operation.PING else FuzzyRequest(message=b"x")

    built = build_request(operation, BASE_URL, request)

    assert built.method == method
    assert built.url == url


def test_endpoint_url_strips_trailing_slash():
    assert endpoint_url("http://rspamd:11333/", Operation.CHECK) == "http://rspamd:11333/checkv2"


def test_message_is_attached_without_reading():
    stream = _CountingStream(b"Subject: hi\r\n\r\nbody")

    built = build_request(Operation.CHECK, BASE_URL, CheckRequest(message=stream))

    assert built.data is stream
    assert stream.reads == 0


def test_caller_headers_are_copied_and_queue_id_added():
    request = CheckRequest(
        message=b"body",
        headers={"Rcpt": "user@example.com", "IP": "192.0.2.1"},
        queue_id="abc",
    )

    built = build_request(Operation.CHECK, BASE_URL, request)

    assert built.headers["Rcpt"] == "user@example.com"
    assert built.headers["ip"] == "192.0.2.1"
    assert built.headers["Queue-Id"] == "abc"
    assert "Flag" not in built.headers


def test_learn_request_without_queue_id_has_no_queue_header():
    built = build_request(Operation.LEARN_HAM, BASE_URL, LearnRequest(message=b"body"))

    assert "Queue-Id" not in built.headers


def test_fuzzy_add_sets_flag_and_weight():
    built = build_request(
        Operation.FUZZY_ADD,
        BASE_URL,
        FuzzyRequest(message=b"body", flag=1, weight=19),
    )

    assert built.headers["Flag"] == "1"
    assert built.headers["Weight"] == "19"


def test_fuzzy_del_sets_flag_only():
    built = build_request(
        Operation.FUZZY_DEL,
        BASE_URL,
        FuzzyRequest(message=b"body", flag=1, weight=19),
    )

    assert built.headers["Flag"] == "1"
    assert "Weight" not in built.headers


def test_fuzzy_parameters_replace_caller_values_case_insensitively():
    request = FuzzyRequest(message=b"body", headers={"flag": "7", "Deliver-To": "x"}, flag=2)

    built = build_request(Operation.FUZZY_DEL, BASE_URL, request)

    assert built.headers["Flag"] == "2"
    assert built.headers["Deliver-To"] == "x"
    assert len([key for key in built.headers if key.lower() == "flag"]) == 1


def test_negative_flag_and_weight_are_not_validated():
    built = build_request(
        Operation.FUZZY_ADD,
        BASE_URL,
        FuzzyRequest(message=b"body", flag=-3, weight=-1),
    )

    assert built.headers["Flag"] == "-3"
    assert built.headers["Weight"] == "-1"


def test_username_header_can_be_overridden_per_request():
    request = CheckRequest(message=b"body", headers={"user": "delegate"})

    built = build_request(Operation.CHECK, BASE_URL, request, username="admin")

    assert built.headers["User"] == "delegate"


def test_ping_has_no_body_or_message_headers():
    built = build_request(Operation.PING, BASE_URL, username="admin")

    assert built.data in (None, [], {})
    assert dict(built.headers) == {"User": "admin"}


def test_message_operations_require_request():
    with pytest.raises(ValueError, match="CHECK requires a request"):
        build_request(Operation.CHECK, BASE_URL)


def test_fuzzy_operations_require_fuzzy_request():
    with pytest.raises(TypeError, match="FuzzyRequest"):
        build_request(Operation.FUZZY_ADD, BASE_URL, CheckRequest(message=b"body"))
