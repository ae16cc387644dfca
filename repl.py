import argparse
import logging
import sys

from tablecalc.session import run_session


if __name__ == "__main__":
    argparser = argparse.ArgumentParser(description="Evaluate one arithmetic expression per line")
    argparser.add_argument("input_file", nargs="?", help="file to read expressions from, stdin by default")
    argparser.add_argument("--trace", action="store_true", help="log parse and value stacks at every step")
    args = argparser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.trace else logging.WARNING, format="%(message)s")

    if args.input_file is None:
        sys.exit(run_session(sys.stdin, sys.stdout))

    try:
        source = open(args.input_file, encoding="utf-8")
    except OSError as e:
        argparser.error(f"can't open {args.input_file!r}: {e}")
    with source:
        sys.exit(run_session(source, sys.stdout))
