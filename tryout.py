import io
import logging

from tablecalc.parser import Engine, ParserError
from tablecalc.runtime import format_value
from tablecalc.tokenizer import Lexer, tokenize, untokenize

logging.basicConfig(level=logging.DEBUG, format="%(message)s")

for code in [
    "5",
    "-1",
    "1 + 1",
    "-1 + 1",
    "1 + -1",
    "4 + 6 * 3",
    "(4 + 6)",
    "(4+6) * 3",
    "80225/+2",
    "7/6/2000",
    "20 - 5 - 3",
    "1 / 0",
    "2 $ 3",
    "(1 + 14 * (54 - 2))",
    "",
]:
    print("=" * 10)
    print(f"code: {code!r}")

    tokens = tokenize(code)
    print(f"tokens: {' '.join(str(t) for t in tokens)}")
    print(f"untokenized: {untokenize(tokens)}")

    engine = Engine(Lexer(io.StringIO(code)))
    try:
        result = engine.evaluate_line()
    except ParserError as e:
        print(e)
        continue
    print(f"result: {'<none>' if result is None else format_value(result)}")
