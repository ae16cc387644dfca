import io
import logging

import pytest

from tablecalc.tokenizer import MAX_KEPT_WARNINGS, Lexer, LexerWarning, TerminalType, Token, tokenize, untokenize

T = TerminalType


@pytest.mark.parametrize(
    "code, expected_tokens",
    [
        pytest.param("", [Token(T.END)]),
        pytest.param("\n", [Token(T.NEWLINE), Token(T.END)]),
        pytest.param(
            "12 + 3\n",
            [Token(T.NUMBER, 12.0), Token(T.PLUS), Token(T.NUMBER, 3.0), Token(T.NEWLINE), Token(T.END)],
        ),
        pytest.param(
            "(4-2)*7/1",
            [
                Token(T.BRACKET_OPEN),
                Token(T.NUMBER, 4.0),
                Token(T.MINUS),
                Token(T.NUMBER, 2.0),
                Token(T.BRACKET_CLOSE),
                Token(T.STAR),
                Token(T.NUMBER, 7.0),
                Token(T.SLASH),
                Token(T.NUMBER, 1.0),
                Token(T.NEWLINE),
                Token(T.END),
            ],
        ),
        pytest.param("007", [Token(T.NUMBER, 7.0), Token(T.NEWLINE), Token(T.END)]),
        pytest.param(" \t 5\t", [Token(T.NUMBER, 5.0), Token(T.NEWLINE), Token(T.END)]),
        pytest.param("1 2", [Token(T.NUMBER, 1.0), Token(T.NUMBER, 2.0), Token(T.NEWLINE), Token(T.END)]),
        pytest.param("\n\n", [Token(T.NEWLINE), Token(T.NEWLINE), Token(T.END)]),
        pytest.param("-3", [Token(T.MINUS), Token(T.NUMBER, 3.0), Token(T.NEWLINE), Token(T.END)]),
    ],
)
def test_tokenize(code: str, expected_tokens: list[Token]) -> None:
    assert tokenize(code) == expected_tokens


def test_large_literal_accumulates_as_float() -> None:
    tokens = tokenize("123456789012345678901234567890")
    assert tokens[0].type is T.NUMBER
    assert tokens[0].value == pytest.approx(1.2345678901234568e29)


class ExplodingSource:
    def read(self, size: int) -> str:
        raise AssertionError("source read after end of input")


def test_end_of_input_is_sticky() -> None:
    lexer = Lexer(io.StringIO("1"))
    assert lexer.next_token() == Token(T.NUMBER, 1.0)
    assert lexer.next_token() == Token(T.NEWLINE)
    assert lexer.next_token() == Token(T.END)
    lexer.source = ExplodingSource()  # type: ignore
    for _ in range(5):
        assert lexer.next_token() == Token(T.END)


def test_unexpected_characters_are_skipped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    lexer = Lexer(io.StringIO("1 $ 2\n3 ?\n"))
    tokens = [lexer.next_token() for _ in range(6)]
    assert tokens == [
        Token(T.NUMBER, 1.0),
        Token(T.NUMBER, 2.0),
        Token(T.NEWLINE),
        Token(T.NUMBER, 3.0),
        Token(T.NEWLINE),
        Token(T.END),
    ]
    assert list(lexer.warnings) == [LexerWarning("$", line=1, column=3), LexerWarning("?", line=2, column=3)]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert "Unexpected character '$'" in warnings[0].getMessage()


def test_unexpected_character_does_not_split_number() -> None:
    assert tokenize("1.5") == [Token(T.NUMBER, 1.0), Token(T.NUMBER, 5.0), Token(T.NEWLINE), Token(T.END)]


def test_line_of_only_garbage_yields_no_newline() -> None:
    assert tokenize("x") == [Token(T.END)]


def test_untokenize() -> None:
    assert untokenize(tokenize("(1+2)*3")) == "(1 + 2) * 3 \\n $"
    assert untokenize(tokenize("-(  4 /2)")[:-2]) == "- (4 / 2)"


def test_kept_warnings_are_bounded(caplog: pytest.LogCaptureFixture) -> None:
    lexer = Lexer(io.StringIO("$" * 5000 + "1\n"))
    assert lexer.next_token() == Token(T.NUMBER, 1.0)
    assert len(lexer.warnings) == MAX_KEPT_WARNINGS
    assert lexer.warnings[-1] == LexerWarning("$", line=1, column=5000)
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 5000
