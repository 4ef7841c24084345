"""
Tests for the signlink command line.

Test plan:
- parse: decoded command printed as JSON, invalid request flagged,
  unrecognised URL → exit 2
- handle: signer module loaded from sys.path, callback printed by the
  stdout launcher, exit 0; no signer → exit 1
- --config: numeric error format applied
- --log-level: unknown level rejected by argparse, case-insensitive
"""

from __future__ import annotations

import json
import textwrap
import uuid
from pathlib import Path

import pytest
from conftest import SAMPLE_ADDRESS, SAMPLE_ADDRESS_LOWER

from signlink.cli import EXIT_NOT_ACCEPTED, EXIT_OK, EXIT_UNHANDLED, load_signer, main

SIGNER_SOURCE = textwrap.dedent(
    """
    from signlink.signer import SigningOutcome


    class StaticSigner:
        async def sign_message(self, message, address):
            return SigningOutcome.success(b"\\x01\\x02")

        async def sign_personal_message(self, message, address):
            return SigningOutcome.success(b"\\x01\\x02")

        async def sign_transaction(self, transaction):
            return SigningOutcome.success(b"\\x01\\x02")


    signer = StaticSigner()
    """
)


@pytest.fixture
def signer_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    name = f"cli_signer_{uuid.uuid4().hex}"
    (tmp_path / f"{name}.py").write_text(SIGNER_SOURCE)
    monkeypatch.syspath_prepend(str(tmp_path))
    return name


class TestParseCommand:
    def test_sign_transaction(self, capsys: pytest.CaptureFixture[str]) -> None:
        url = (
            f"trust://sign-transaction?to={SAMPLE_ADDRESS_LOWER}"
            "&amount=1&gasPrice=2&gasLimit=21000&nonce=7"
        )
        assert main(["parse", url]) == EXIT_OK

        out = json.loads(capsys.readouterr().out)
        assert out["kind"] == "sign-transaction"
        assert out["to"] == SAMPLE_ADDRESS
        assert out["nonce"] == "7"

    def test_invalid_request(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["parse", "trust://sign-message?callback=app://cb"]) == EXIT_OK

        out = json.loads(capsys.readouterr().out)
        assert out["invalid"] is True
        assert out["problems"] == ["message"]

    def test_unhandled(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["parse", "trust://open-settings"]) == EXIT_UNHANDLED
        assert "unhandled" in capsys.readouterr().err


class TestHandleCommand:
    def test_signs_and_prints_callback(
        self, signer_module: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        url = "trust://sign-message?message=aGVsbG8=&callback=app://cb"
        assert main(["handle", url, "--signer-module", signer_module]) == EXIT_OK
        assert capsys.readouterr().out == "[signlink] app://cb?result=AQI=\n"

    def test_without_signer(self, capsys: pytest.CaptureFixture[str]) -> None:
        url = "trust://sign-message?message=aGVsbG8=&callback=app://cb"
        assert main(["handle", url]) == EXIT_NOT_ACCEPTED
        assert capsys.readouterr().out == ""

    def test_config_error_format(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str], signer_module: str
    ) -> None:
        config = tmp_path / "signlink.json"
        config.write_text(json.dumps({"schema_version": "0.1", "error_format": "numeric"}))

        code = main(
            [
                "--config",
                str(config),
                "handle",
                "trust://sign-transaction?callback=app://cb",
                "--signer-module",
                signer_module,
            ]
        )

        assert code == EXIT_OK
        assert capsys.readouterr().out == "[signlink] app://cb?error=3\n"


class TestLogLevel:
    def test_unknown_level_is_a_usage_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["--log-level", "LOUD", "parse", "trust://sign-message?message="])

        assert exc.value.code == 2
        assert "invalid choice" in capsys.readouterr().err

    def test_level_is_case_insensitive(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--log-level", "debug", "parse", "trust://sign-message?message="]) == EXIT_OK
        assert json.loads(capsys.readouterr().out)["kind"] == "sign-message"


class TestLoadSigner:
    def test_none(self) -> None:
        assert load_signer(None) is None

    def test_module_without_signer(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        name = f"cli_empty_{uuid.uuid4().hex}"
        (tmp_path / f"{name}.py").write_text("value = 1\n")
        monkeypatch.syspath_prepend(str(tmp_path))

        with pytest.raises(RuntimeError, match="must expose `signer`"):
            load_signer(name)
