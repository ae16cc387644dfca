import collections
import enum
import io
import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol, TextIO

from tablecalc.utils import PrintableEnum

logger = logging.getLogger(__name__)


@dataclass
class LexerWarning:
    char: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"[Lexer warning] Unexpected character {self.char!r} at line {self.line}, column {self.column}, skipped"


class TerminalType(PrintableEnum):
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()
    NUMBER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    NEWLINE = enum.auto()
    END = enum.auto()


@dataclass
class Token:
    type: TerminalType
    value: float = 0.0

    def __str__(self) -> str:
        if self.type is TerminalType.NUMBER:
            return f"<{self.type}>{self.value:g}"
        return f"<{self.type}>"


class TokenSource(Protocol):
    def next_token(self) -> Token:
        ...


SINGLE_CHAR_TOKENS = {
    "+": TerminalType.PLUS,
    "-": TerminalType.MINUS,
    "*": TerminalType.STAR,
    "/": TerminalType.SLASH,
    "(": TerminalType.BRACKET_OPEN,
    ")": TerminalType.BRACKET_CLOSE,
    "\n": TerminalType.NEWLINE,
}

WHITESPACE = " \t"

MAX_KEPT_WARNINGS = 100


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


class Lexer:
    """Reads one character at a time from `source` and hands out tokens on demand.

    Exactly one character of input is kept pending between calls, so the source
    never has to support un-reading. End of input is sticky: once END has been
    returned, every further call returns END without touching the source again.
    If the last line is not newline-terminated, a NEWLINE is produced before END.
    Only the most recent MAX_KEPT_WARNINGS warnings are kept in `warnings`; every one is logged.
    """

    def __init__(self, source: TextIO) -> None:
        self.source = source
        self.warnings: collections.deque[LexerWarning] = collections.deque(maxlen=MAX_KEPT_WARNINGS)
        self._char: Optional[str] = None
        self._ended = False
        self._line_has_tokens = False
        self._line = 1
        self._column = 0

    def _peek_char(self) -> str:
        if self._char is None:
            self._char = self.source.read(1)
            self._column += 1
        return self._char

    def _advance(self) -> None:
        if self._char == "\n":
            self._line += 1
            self._column = 0
        self._char = None

    def next_token(self) -> Token:
        token = self._scan()
        if token.type is TerminalType.NEWLINE:
            self._line_has_tokens = False
        elif token.type is not TerminalType.END:
            self._line_has_tokens = True
        return token

    def _scan(self) -> Token:
        if self._ended:
            return Token(TerminalType.END)
        while True:
            c = self._peek_char()
            if c == "":
                if self._line_has_tokens:
                    return Token(TerminalType.NEWLINE)
                self._ended = True
                return Token(TerminalType.END)
            elif c in WHITESPACE:
                self._advance()
            elif _is_digit(c):
                value = 0.0
                while _is_digit(c):
                    value = value * 10 + int(c)
                    self._advance()
                    c = self._peek_char()
                return Token(TerminalType.NUMBER, value)
            elif c in SINGLE_CHAR_TOKENS:
                self._advance()
                return Token(SINGLE_CHAR_TOKENS[c])
            else:
                warning = LexerWarning(char=c, line=self._line, column=self._column)
                self.warnings.append(warning)
                logger.warning("%s", warning)
                self._advance()


def tokenize(code: str) -> list[Token]:
    lexer = Lexer(io.StringIO(code))
    tokens: list[Token] = []
    while True:
        token = lexer.next_token()
        tokens.append(token)
        if token.type is TerminalType.END:
            return tokens


TOKEN_TEXT = {type_: char for char, type_ in SINGLE_CHAR_TOKENS.items() if char != "\n"}


def untokenize(tokens: list[Token]) -> str:
    parts = []
    for t in tokens:
        if t.type is TerminalType.NUMBER:
            parts.append(f"{t.value:.0f}")
        elif t.type is TerminalType.NEWLINE:
            parts.append("\\n")
        elif t.type is TerminalType.END:
            parts.append("$")
        else:
            parts.append(TOKEN_TEXT[t.type])
    result = " ".join(parts)

    # ( 1 + 2 ) => (1 + 2)
    result = re.sub(r"\(\s+", "(", result)
    result = re.sub(r"\s+\)", ")", result)
    return result
