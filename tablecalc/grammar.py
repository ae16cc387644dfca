import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from tablecalc.tokenizer import TerminalType
from tablecalc.utils import PrintableEnum


@dataclass
class GrammarError(Exception):
    errmsg: str

    def __str__(self) -> str:
        return f"[Grammar error] {self.errmsg}"


class NonTerminal(PrintableEnum):
    START = enum.auto()
    LINE = enum.auto()
    EXPR = enum.auto()
    EXPR_TAIL = enum.auto()
    TERM = enum.auto()
    TERM_TAIL = enum.auto()
    FACTOR = enum.auto()


class Action(PrintableEnum):
    NEGATE = enum.auto()
    ADD = enum.auto()
    SUBTRACT = enum.auto()
    MULTIPLY = enum.auto()
    DIVIDE = enum.auto()
    PUSH_OPERAND = enum.auto()
    PRINT_RESULT = enum.auto()


Symbol = TerminalType | NonTerminal | Action
Production = tuple[NonTerminal, tuple[Symbol, ...]]
ParseTable = Mapping[tuple[TerminalType, NonTerminal], tuple[Symbol, ...]]

T = TerminalType
N = NonTerminal
A = Action

# Start    -> Line Start | <empty>
# Line     -> Expr PrintResult NL | NL
# Expr     -> Term ExprTail
# ExprTail -> + Term Add ExprTail | - Term Subtract ExprTail | <empty>
# Term     -> Factor TermTail
# TermTail -> * Factor Multiply TermTail | / Factor Divide TermTail | <empty>
# Factor   -> NUMBER PushOperand | ( Expr ) | - Factor Negate
PRODUCTIONS: list[Production] = [
    (N.START, (N.LINE, N.START)),
    (N.START, ()),
    (N.LINE, (N.EXPR, A.PRINT_RESULT, T.NEWLINE)),
    (N.LINE, (T.NEWLINE,)),
    (N.EXPR, (N.TERM, N.EXPR_TAIL)),
    (N.EXPR_TAIL, (T.PLUS, N.TERM, A.ADD, N.EXPR_TAIL)),
    (N.EXPR_TAIL, (T.MINUS, N.TERM, A.SUBTRACT, N.EXPR_TAIL)),
    (N.EXPR_TAIL, ()),
    (N.TERM, (N.FACTOR, N.TERM_TAIL)),
    (N.TERM_TAIL, (T.STAR, N.FACTOR, A.MULTIPLY, N.TERM_TAIL)),
    (N.TERM_TAIL, (T.SLASH, N.FACTOR, A.DIVIDE, N.TERM_TAIL)),
    (N.TERM_TAIL, ()),
    (N.FACTOR, (T.NUMBER, A.PUSH_OPERAND)),
    (N.FACTOR, (T.BRACKET_OPEN, N.EXPR, T.BRACKET_CLOSE)),
    (N.FACTOR, (T.MINUS, N.FACTOR, A.NEGATE)),
]

_LINE = (N.LINE, N.START)
_LINE_EXPR = (N.EXPR, A.PRINT_RESULT, T.NEWLINE)
_EXPR = (N.TERM, N.EXPR_TAIL)
_TERM = (N.FACTOR, N.TERM_TAIL)

PARSE_TABLE: ParseTable = MappingProxyType(
    {
        (T.END, N.START): (),
        (T.NUMBER, N.START): _LINE,
        (T.BRACKET_OPEN, N.START): _LINE,
        (T.MINUS, N.START): _LINE,
        (T.NEWLINE, N.START): _LINE,
        (T.NUMBER, N.LINE): _LINE_EXPR,
        (T.BRACKET_OPEN, N.LINE): _LINE_EXPR,
        (T.MINUS, N.LINE): _LINE_EXPR,
        (T.NEWLINE, N.LINE): (T.NEWLINE,),
        (T.NUMBER, N.EXPR): _EXPR,
        (T.BRACKET_OPEN, N.EXPR): _EXPR,
        (T.MINUS, N.EXPR): _EXPR,
        (T.PLUS, N.EXPR_TAIL): (T.PLUS, N.TERM, A.ADD, N.EXPR_TAIL),
        (T.MINUS, N.EXPR_TAIL): (T.MINUS, N.TERM, A.SUBTRACT, N.EXPR_TAIL),
        (T.BRACKET_CLOSE, N.EXPR_TAIL): (),
        (T.NEWLINE, N.EXPR_TAIL): (),
        (T.NUMBER, N.TERM): _TERM,
        (T.BRACKET_OPEN, N.TERM): _TERM,
        (T.MINUS, N.TERM): _TERM,
        (T.STAR, N.TERM_TAIL): (T.STAR, N.FACTOR, A.MULTIPLY, N.TERM_TAIL),
        (T.SLASH, N.TERM_TAIL): (T.SLASH, N.FACTOR, A.DIVIDE, N.TERM_TAIL),
        (T.PLUS, N.TERM_TAIL): (),
        (T.MINUS, N.TERM_TAIL): (),
        (T.BRACKET_CLOSE, N.TERM_TAIL): (),
        (T.NEWLINE, N.TERM_TAIL): (),
        (T.NUMBER, N.FACTOR): (T.NUMBER, A.PUSH_OPERAND),
        (T.BRACKET_OPEN, N.FACTOR): (T.BRACKET_OPEN, N.EXPR, T.BRACKET_CLOSE),
        (T.MINUS, N.FACTOR): (T.MINUS, N.FACTOR, A.NEGATE),
    }
)


def first_of(
    symbols: tuple[Symbol, ...], first: dict[NonTerminal, set[TerminalType]], nullable: set[NonTerminal]
) -> tuple[set[TerminalType], bool]:
    """FIRST set of a symbol sequence, plus whether the whole sequence can derive nothing.

    Actions consume no input, so they are skipped over as if they derived the empty string.
    """
    result: set[TerminalType] = set()
    for symbol in symbols:
        if isinstance(symbol, TerminalType):
            result.add(symbol)
            return result, False
        elif isinstance(symbol, NonTerminal):
            result |= first[symbol]
            if symbol not in nullable:
                return result, False
    return result, True


def compute_first(productions: list[Production]) -> tuple[dict[NonTerminal, set[TerminalType]], set[NonTerminal]]:
    first: dict[NonTerminal, set[TerminalType]] = {lhs: set() for lhs, _ in productions}
    nullable: set[NonTerminal] = set()
    while True:
        some_change = False
        for lhs, rhs in productions:
            rhs_first, rhs_nullable = first_of(rhs, first, nullable)
            if not rhs_first <= first[lhs]:
                first[lhs] |= rhs_first
                some_change = True
            if rhs_nullable and lhs not in nullable:
                nullable.add(lhs)
                some_change = True
        if not some_change:
            return first, nullable


def compute_follow(
    productions: list[Production],
    start: NonTerminal,
    first: dict[NonTerminal, set[TerminalType]],
    nullable: set[NonTerminal],
) -> dict[NonTerminal, set[TerminalType]]:
    """FOLLOW sets, see the Dragon book, 2nd Ed. p. 189. END follows the start symbol."""
    follow: dict[NonTerminal, set[TerminalType]] = {lhs: set() for lhs, _ in productions}
    follow[start].add(TerminalType.END)
    while True:
        some_change = False
        for lhs, rhs in productions:
            for i, symbol in enumerate(rhs):
                if not isinstance(symbol, NonTerminal):
                    continue
                rest_first, rest_nullable = first_of(rhs[i + 1 :], first, nullable)
                if rest_nullable:
                    rest_first |= follow[lhs]
                if not rest_first <= follow[symbol]:
                    follow[symbol] |= rest_first
                    some_change = True
        if not some_change:
            return follow


def build_parse_table(productions: list[Production], start: NonTerminal) -> ParseTable:
    """Derive the LL(1) parse table from the productions.

    Raises GrammarError if two productions compete for the same
    (lookahead, non-terminal) cell.
    """
    first, nullable = compute_first(productions)
    follow = compute_follow(productions, start, first, nullable)

    table: dict[tuple[TerminalType, NonTerminal], tuple[Symbol, ...]] = {}
    for lhs, rhs in productions:
        lookaheads, rhs_nullable = first_of(rhs, first, nullable)
        if rhs_nullable:
            lookaheads = lookaheads | follow[lhs]
        for terminal in lookaheads:
            key = (terminal, lhs)
            if key in table and table[key] != rhs:
                raise GrammarError(
                    f"Conflict for {lhs} on {terminal}: {_format_rhs(table[key])} vs {_format_rhs(rhs)}"
                )
            table[key] = rhs
    return MappingProxyType(table)


def _format_rhs(rhs: tuple[Symbol, ...]) -> str:
    return " ".join(str(s) for s in rhs) if rhs else "<empty>"
