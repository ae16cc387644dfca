import io
import subprocess
import sys
from pathlib import Path

import pytest

from tablecalc.session import run_session


def run(code: str) -> list[str]:
    out = io.StringIO()
    assert run_session(io.StringIO(code), out) == 0
    return out.getvalue().splitlines()


@pytest.mark.parametrize(
    "code, expected_output",
    [
        pytest.param("3 + 4 * 2\n", ["result = 11"]),
        pytest.param("5 - -3\n", ["result = 8"]),
        pytest.param("-(2+3)\n", ["result = -5"]),
        pytest.param("(1+2)*(3+4)\n", ["result = 21"]),
        pytest.param("20 - 5 - 3\n", ["result = 12"]),
        pytest.param("1+1\n2+2\n", ["result = 2", "result = 4"]),
        pytest.param("7/2\n", ["result = 3.5"]),
        pytest.param("1/0\n", ["result = inf"]),
        pytest.param("0/0\n", ["result = NaN"]),
        pytest.param("-0\n", ["result = -0"]),
        pytest.param("1+1", ["result = 2"]),
        pytest.param("\n", []),
        pytest.param("", []),
        pytest.param("\n\n4\n\n", ["result = 4"]),
    ],
)
def test_session_output(code: str, expected_output: list[str]) -> None:
    assert run(code) == expected_output


@pytest.mark.parametrize(
    "code, expected_results",
    [
        pytest.param("1 + + 2\n3 * 3\n", [None, "result = 9"]),
        pytest.param("1)\n2\n", [None, "result = 2"]),
        pytest.param("2 3\n(\n4\n", [None, None, "result = 4"]),
        pytest.param("1 + + 2", [None]),
    ],
)
def test_session_continues_after_syntax_error(code: str, expected_results: list) -> None:
    output = run(code)
    assert len(output) == len(expected_results)
    for line, expected in zip(output, expected_results):
        if expected is None:
            assert line.startswith("syntax error")
        else:
            assert line == expected


def test_unexpected_characters_do_not_reach_output(caplog: pytest.LogCaptureFixture) -> None:
    assert run("2 $+ 3\n") == ["result = 5"]
    assert "Unexpected character '$'" in caplog.text


REPL = Path(__file__).parent.parent / "repl.py"


def test_repl_reads_input_file(tmp_path: Path) -> None:
    input_file = tmp_path / "lines.clc"
    input_file.write_text("3 + 4 * 2\n1 + + 2\n20 - 5 - 3\n")
    proc = subprocess.run(
        [sys.executable, str(REPL), str(input_file)], cwd=REPL.parent, capture_output=True, text=True
    )
    assert proc.returncode == 0
    output = proc.stdout.splitlines()
    assert output[0] == "result = 11"
    assert output[1].startswith("syntax error")
    assert output[2] == "result = 12"


def test_repl_reads_stdin() -> None:
    proc = subprocess.run(
        [sys.executable, str(REPL)], cwd=REPL.parent, input="(1+2)*(3+4)\n", capture_output=True, text=True
    )
    assert proc.returncode == 0
    assert proc.stdout.splitlines() == ["result = 21"]


def test_repl_rejects_missing_file(tmp_path: Path) -> None:
    proc = subprocess.run(
        [sys.executable, str(REPL), str(tmp_path / "missing.clc")], cwd=REPL.parent, capture_output=True, text=True
    )
    assert proc.returncode == 2
    assert "can't open" in proc.stderr
