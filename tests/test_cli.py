import json
from io import StringIO

import pytest

from bridged_evm import __version__
from bridged_evm.cli import main

PRESTATE = {
    "env": {"chainId": "0x1", "number": "0x2a"},
    "alloc": {
        "0x00000000000000000000000000000000000ca11e": {
            "balance": "0xde0b6b3a7640000",
        },
        "0x0000000000000000000000000000000000000b0b": {
            # NUMBER, then return it as a word.
            "code": "0x4360005260206000f3",
            "storage": {"0x01": "0x02"},
        },
    },
}


def test_run_prints_the_result() -> None:
    out = StringIO()
    assert main(["run", "0x600160005260206000f3"], out_file=out) == 0

    result = json.loads(out.getvalue())
    assert result["status"] == "success"
    assert result["returnData"] == "0x" + "00" * 31 + "01"
    assert result["error"] is None


def test_run_reports_failure_in_exit_code() -> None:
    out = StringIO()
    assert main(["run", "0xfe"], out_file=out) == 1
    result = json.loads(out.getvalue())
    assert result["status"] == "halt"
    assert result["returnData"] == "0x"


def test_run_with_storage_write_shows_the_post_state() -> None:
    out = StringIO()
    # SSTORE(0, 1)
    assert main(["run", "0x6001600055"], out_file=out) == 0
    post_state = json.loads(out.getvalue())["postState"]
    target = post_state["0x000000000000000000000000000000000000c0de"]
    assert target["storage"] == {"0x" + "00" * 32: "0x1"}


def test_call_against_a_prestate(tmp_path) -> None:  # type: ignore
    prestate = tmp_path / "prestate.json"
    prestate.write_text(json.dumps(PRESTATE))

    out = StringIO()
    args = [
        "call",
        "--prestate",
        str(prestate),
        "--to",
        "0x0000000000000000000000000000000000000b0b",
    ]
    assert main(args, out_file=out) == 0
    result = json.loads(out.getvalue())
    assert result["returnData"] == "0x" + "00" * 31 + "2a"


def test_version(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exit_info:
        main(["--version"])
    assert exit_info.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_no_command_prints_help() -> None:
    out = StringIO()
    assert main([], out_file=out) == 0
    assert "bridged-evm" in out.getvalue()
