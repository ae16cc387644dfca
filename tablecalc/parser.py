import logging
from dataclasses import dataclass
from typing import NoReturn, Optional

from tablecalc.grammar import PARSE_TABLE, Action, NonTerminal, ParseTable, Symbol
from tablecalc.runtime import InternalError, ValueStack, execute_action
from tablecalc.tokenizer import TerminalType, Token, TokenSource

logger = logging.getLogger(__name__)


@dataclass
class ParserError(Exception):
    errmsg: str
    found: TerminalType

    def __str__(self) -> str:
        return f"syntax error: {self.errmsg}"


class Engine:
    """Table-driven LL(1) parser that evaluates as it parses.

    The parse stack mixes terminals, non-terminals and actions. Terminals are
    matched against the lookahead, non-terminals are replaced by the right-hand
    side the table selects for the lookahead, and actions run immediately
    against the value stack. No parse tree is built.

    On a syntax error the engine drops input up to the end of the offending
    line, resets both stacks and raises ParserError, after which it is ready to
    evaluate the next line.
    """

    def __init__(self, tokens: TokenSource, table: ParseTable = PARSE_TABLE) -> None:
        self.tokens = tokens
        self.table = table
        self.symbols: list[Symbol] = [NonTerminal.START]
        self.values = ValueStack()
        self.lookahead: Optional[Token] = None
        self._operand = 0.0
        self._result: Optional[float] = None

    @property
    def finished(self) -> bool:
        return not self.symbols

    def _peek(self) -> Token:
        if self.lookahead is None:
            self.lookahead = self.tokens.next_token()
        return self.lookahead

    def evaluate_line(self) -> Optional[float]:
        """Evaluate input up to and including the next newline.

        Returns the line's value, or None for a blank line and at end of input.
        """
        self._result = None
        while self.symbols:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("    %s: %s", self.lookahead, " ".join(str(s) for s in self.symbols))

            symbol = self.symbols.pop()
            if isinstance(symbol, TerminalType):
                lookahead = self._peek()
                if symbol is not lookahead.type:
                    self._fail(f"expected {symbol}, found {lookahead.type}")
                if symbol is TerminalType.NUMBER:
                    self._operand = lookahead.value
                self.lookahead = None
                if symbol is TerminalType.NEWLINE:
                    result, self._result = self._result, None
                    return result
            elif isinstance(symbol, NonTerminal):
                lookahead = self._peek()
                production = self.table.get((lookahead.type, symbol))
                if production is None:
                    self._fail(f"unexpected {lookahead.type} in {symbol}")
                self.symbols.extend(reversed(production))
            elif isinstance(symbol, Action):
                result = execute_action(symbol, self.values, self._operand)
                if result is not None:
                    self._result = result
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("        %s", str(self.values))
            else:
                raise InternalError(f"Unexpected symbol on parse stack: {symbol!r}")
        return None

    def _fail(self, errmsg: str) -> NoReturn:
        found = self._peek().type
        logger.debug("syntax error: %s", errmsg)
        self._resynchronize()
        raise ParserError(errmsg, found=found)

    def _resynchronize(self) -> None:
        while True:
            token = self._peek()
            self.lookahead = None
            if token.type in (TerminalType.NEWLINE, TerminalType.END):
                break
        self.symbols = [NonTerminal.START]
        self.values.clear()
        self._result = None


def evaluate_line(tokens: TokenSource) -> Optional[float]:
    return Engine(tokens).evaluate_line()
