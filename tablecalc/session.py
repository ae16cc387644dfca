from typing import TextIO

from tablecalc.parser import Engine, ParserError
from tablecalc.runtime import format_value
from tablecalc.tokenizer import Lexer


def run_session(source: TextIO, out: TextIO) -> int:
    """Evaluates every line of `source`, writing one report line per non-blank input line.

    Returns the exit status: 0 once end of input is reached.
    """
    engine = Engine(Lexer(source))
    while not engine.finished:
        try:
            result = engine.evaluate_line()
        except ParserError as e:
            print(e, file=out, flush=True)
            continue
        if result is not None:
            print(f"result = {format_value(result)}", file=out, flush=True)
    return 0
