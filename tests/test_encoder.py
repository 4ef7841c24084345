"""
Tests for the result encoder.

Test plan:
- append_query_item: no query, existing query, trailing "?", fragment kept
  after the new item, "+" percent-encoded, malformed callback → None
- Success: result=<base64>, launched once, base64 survives a decode
- Failure: symbolic and numeric identifiers, NONE rejected
- Malformed callback: nothing launched, no exception
"""

from __future__ import annotations

import base64

import pytest

from signlink.encoder import ResultEncoder, append_query_item
from signlink.errors import ErrorFormat, ErrorKind
from signlink.launcher import RecordingLauncher
from signlink.parser import query_params
from signlink.signer import SigningOutcome

MALFORMED_CALLBACK = "app://cb:notaport"


class TestAppendQueryItem:
    def test_no_query(self) -> None:
        assert append_query_item("app://cb", "result", "AQI=") == "app://cb?result=AQI="

    def test_existing_query_preserved(self) -> None:
        assert (
            append_query_item("https://example.com/cb?id=7&x=a%20b", "error", "cancelled")
            == "https://example.com/cb?id=7&x=a%20b&error=cancelled"
        )

    def test_trailing_question_mark(self) -> None:
        assert append_query_item("app://cb?", "error", "3") == "app://cb?error=3"

    def test_fragment_stays_last(self) -> None:
        assert (
            append_query_item("app://cb?x=1#done", "error", "unknown")
            == "app://cb?x=1&error=unknown#done"
        )

    def test_plus_is_encoded(self) -> None:
        assert append_query_item("app://cb", "result", "+/8=") == "app://cb?result=%2B/8="

    def test_malformed_callback(self) -> None:
        assert append_query_item(MALFORMED_CALLBACK, "result", "AQI=") is None


class TestEncodeSuccess:
    def test_example(self) -> None:
        launcher = RecordingLauncher()
        encoder = ResultEncoder(launcher)

        assert encoder.encode_success("app://cb", b"\x01\x02") is True
        assert launcher.launched == ["app://cb?result=AQI="]

    def test_payload_round_trips(self) -> None:
        payload = bytes(range(256))
        url = ResultEncoder(RecordingLauncher()).success_url("app://cb?k=v", payload)
        assert url is not None

        params = query_params(url.split("?", 1)[1])
        assert params["k"] == "v"
        assert base64.b64decode(params["result"] or "", validate=True) == payload

    def test_deliver_success_outcome(self) -> None:
        launcher = RecordingLauncher()
        ResultEncoder(launcher).deliver("app://cb", SigningOutcome.success(b"\x01\x02"))
        assert launcher.launched == ["app://cb?result=AQI="]

    def test_deliver_empty_payload_is_success(self) -> None:
        launcher = RecordingLauncher()
        assert ResultEncoder(launcher).deliver("app://cb", SigningOutcome.success(b"")) is True
        assert launcher.launched == ["app://cb?result="]


class TestEncodeFailure:
    def test_symbolic(self) -> None:
        launcher = RecordingLauncher()
        ResultEncoder(launcher).encode_failure("app://cb", ErrorKind.INVALID_REQUEST)
        assert launcher.launched == ["app://cb?error=invalidRequest"]

    def test_numeric(self) -> None:
        launcher = RecordingLauncher()
        encoder = ResultEncoder(launcher, error_format=ErrorFormat.NUMERIC)
        encoder.encode_failure("app://cb", ErrorKind.INVALID_REQUEST)
        assert launcher.launched == ["app://cb?error=3"]

    def test_deliver_failure_outcome(self) -> None:
        launcher = RecordingLauncher()
        ResultEncoder(launcher).deliver("app://cb", SigningOutcome.failure(ErrorKind.CANCELLED))
        assert launcher.launched == ["app://cb?error=cancelled"]

    def test_none_is_never_serialized(self) -> None:
        launcher = RecordingLauncher()
        with pytest.raises(ValueError):
            ResultEncoder(launcher).encode_failure("app://cb", ErrorKind.NONE)
        assert launcher.launched == []


class TestMalformedCallback:
    def test_success_not_launched(self) -> None:
        launcher = RecordingLauncher()
        assert ResultEncoder(launcher).encode_success(MALFORMED_CALLBACK, b"x") is False
        assert launcher.launched == []

    def test_failure_not_launched(self) -> None:
        launcher = RecordingLauncher()
        assert (
            ResultEncoder(launcher).encode_failure(MALFORMED_CALLBACK, ErrorKind.UNKNOWN)
            is False
        )
        assert launcher.launched == []
