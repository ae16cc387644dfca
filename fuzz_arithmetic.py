import io
import math
import random
import re
import string
import warnings

from tablecalc.parser import Engine, ParserError
from tablecalc.tokenizer import Lexer

warnings.filterwarnings("ignore")


def eval_py(code: str) -> float | str:
    try:
        return eval(code)
    except ZeroDivisionError:
        return "division by zero"
    except Exception as e:
        return str(e)


def eval_my(code: str) -> float | str:
    try:
        result = Engine(Lexer(io.StringIO(code + "\n"))).evaluate_line()
    except ParserError as e:
        return str(e)
    if result is None:
        return "empty"
    if math.isinf(result) or math.isnan(result):
        return "division by zero"
    return result


if __name__ == "__main__":
    alphabet = string.digits + "()+-*/ "

    def generate(length: int) -> str:
        return "".join(random.choices(alphabet, k=length))

    while True:
        code = generate(10)

        if re.findall(r"\*\s*\*", code):
            continue  # avoid generating powers (10**4)

        if re.findall(r"/\s*/", code):
            continue  # avoid generating int devision (10 // 3)

        if re.findall(r"(^|[-+*/(])\s*\+", code):
            continue  # unary plus is not part of the language

        res_py = eval_py(code)
        res_my = eval_my(code)
        if isinstance(res_py, (int, float)) and isinstance(res_my, float) and math.isclose(float(res_py), res_my):
            continue
        if isinstance(res_py, str) and isinstance(res_my, str):
            continue
        if isinstance(res_py, str) and res_py.startswith("leading zeros in decimal integer literals are not permitted"):
            continue
        print(f"{code!r}\npy: {res_py}\nmy: {res_my}\n\n")
