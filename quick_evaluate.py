#!/usr/bin/env python3
"""
CLI tool to evaluate a word in the two-generator SL(2,C) representation.

Usage:
    python quick_evaluate.py -p 64 -z 2 0 --word ab
    python quick_evaluate.py -p 128 --random-z --random-word 40 --seed 7
    python quick_evaluate.py -p 256 -z 0.3 1.1 -r 5 8 --verbose
"""

import argparse
import sys
import warnings

import numpy as np

from sl2c_words import (
    DEFAULT_SEED,
    ExtendedRational,
    PrecisionWarning,
    build_generators,
    evaluate_word,
    make_context,
    parse_word,
    random_parameter,
)


def _positive_int(text):
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value


def _non_negative_int(text):
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {text}")
    return value


def _word(text):
    try:
        return parse_word(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser():
    parser = argparse.ArgumentParser(
        description="Matrix, trace and dominant eigenpair of a word in a "
                    "two-generator SL(2,C) representation."
    )
    parser.add_argument("-p", "--precision", type=_positive_int, required=True,
                        help="Bits of precision for complex arithmetic")

    param = parser.add_mutually_exclusive_group(required=True)
    param.add_argument("-z", nargs=2, type=float, metavar=("X", "Y"),
                       help="Parameter z = X + iY")
    param.add_argument("--random-z", action="store_true",
                       help="Draw z with real and imaginary parts uniform on [0, 1)")

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--word", type=_word,
                      help="Word over {a, b, A, B} (A, B are the inverses)")
    mode.add_argument("--random-word", type=_non_negative_int, metavar="N",
                      help="Uniform random (unreduced) word of length N")
    mode.add_argument("-r", nargs=2, type=_non_negative_int, metavar=("P", "Q"),
                      help="Word of the rational P/Q in the Stern-Brocot tree (Q=0 is infinity)")

    parser.add_argument("--seed", type=int, default=DEFAULT_SEED,
                        help=f"Seed for --random-z / --random-word (default: {DEFAULT_SEED})")
    parser.add_argument("--digits", type=_positive_int, default=None,
                        help="Significant digits to print (default: all at this precision)")
    parser.add_argument("--verbose", action="store_true",
                        help="Show the resolved parameter and word before the result")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    rng = np.random.default_rng(args.seed)

    ctx = make_context(args.precision)
    z = random_parameter(ctx, rng) if args.random_z else ctx.mpc(*args.z)
    target = ExtendedRational.from_pair(*args.r) if args.r is not None else None

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", PrecisionWarning)
        try:
            generators = build_generators(ctx, z)
            report = evaluate_word(generators, word=args.word,
                                   random_length=args.random_word,
                                   rational=target, rng=rng)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    for w in caught:
        if issubclass(w.category, PrecisionWarning):
            print(f"Warning: {w.message}", file=sys.stderr)
        else:
            warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)

    if args.verbose:
        print(f"precision = {ctx.prec} bits")
        print(f"z = {ctx.nstr(generators.z, ctx.dps)}")
        if report.mode == "rational":
            print(f"target = {report.target}")
        else:
            print(f"word = {report.word}")
        print()

    print(report.summary(digits=args.digits))


if __name__ == "__main__":
    main()
