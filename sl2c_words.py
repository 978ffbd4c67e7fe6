"""
SL(2,C) Word Evaluator for Two-Generator Groups

Evaluates words in the free group on two generators a, b (inverses A, B)
under a representation into SL(2,C) parameterized by a complex number z,
and reports the trace and dominant eigenpair of the resulting element.

Three ways to pick the word:
    - an explicit string over {a, b, A, B}
    - a uniformly random string of a given length
    - a non-negative rational p/q, whose word is found by exact search in
      the Stern-Brocot tree (no floating point involved in the search)

All complex arithmetic runs in a private mpmath context at a caller-chosen
bit precision. The global mpmath.mp context is never read or modified.

Usage:
    from sl2c_words import build_generators, evaluate_word, Finite

    gens = build_generators(64, 2.0)
    report = evaluate_word(gens, word="ab")
    print(report.summary())

    # Stern-Brocot mode
    from fractions import Fraction
    report = evaluate_word(gens, rational=Finite(Fraction(2, 3)))

    # Reproducible random word
    import numpy as np
    report = evaluate_word(gens, random_length=20, rng=np.random.default_rng(2))
"""

import functools
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Tuple, Union

import numpy as np
from mpmath import MPContext


# =============================================================================
# CONFIG
# =============================================================================

SYMBOLS = "abAB"            # draw order for random words: a, b, A, B
DEFAULT_SEED = 2
EIGENVECTOR_TOLERANCE = 1e-6
TRACE_TOLERANCE = 1e-6
ZERO_SLACK = 2 ** 8         # multiples of ctx.eps treated as zero

RIGHT = "R"
LEFT = "L"


# =============================================================================
# ERRORS AND WARNINGS
# =============================================================================

class ParameterDomainError(ValueError):
    """The parameter z makes a generator undefined (z = +1 or -1)."""


class EmptyWordError(ValueError):
    """A product was requested over an empty sequence of matrices."""


class DegenerateEigenvectorError(ArithmeticError):
    """Both rows of M - lambda*I vanish, so no eigenvector can be read off."""

    def __init__(self, message: str, eigenvalue=None):
        super().__init__(message)
        self.eigenvalue = eigenvalue


class PrecisionWarning(UserWarning):
    """Result failed a numerical self-check; more bits of precision needed."""


# =============================================================================
# PRECISION CONTEXT
# =============================================================================

def make_context(precision: int) -> MPContext:
    """Return a fresh mpmath context working at `precision` bits."""
    if isinstance(precision, bool) or not isinstance(precision, (int, np.integer)):
        raise ValueError(f"precision must be an integer bit count, got {precision!r}")
    if precision <= 0:
        raise ValueError(f"precision must be positive, got {precision}")
    ctx = MPContext()
    ctx.prec = int(precision)
    return ctx


def _resolve_context(precision) -> MPContext:
    if isinstance(precision, MPContext):
        return precision
    return make_context(precision)


def _to_complex(ctx: MPContext, value):
    # unary plus rounds values coming from a wider context
    return +ctx.mpc(value)


# =============================================================================
# EXTENDED RATIONALS
# =============================================================================

@functools.total_ordering
class ExtendedRational(ABC):
    """
    An exact rational, or the symbol 1/0.

    Two variants: Finite (wrapping a Fraction) and Infinity (singleton
    INFINITY). Infinity is the unique maximum of the order. Comparison is
    done case by case on the variant; nothing is ever coerced to a float.
    """

    @property
    @abstractmethod
    def numerator(self) -> int:
        pass

    @property
    @abstractmethod
    def denominator(self) -> int:
        pass

    @staticmethod
    def from_pair(p: int, q: int) -> "ExtendedRational":
        """p/q as an extended rational; q == 0 denotes infinity whatever p is."""
        if q == 0:
            return INFINITY
        return Finite(Fraction(p, q))

    def __eq__(self, other):
        if not isinstance(other, ExtendedRational):
            return NotImplemented
        if isinstance(self, Infinity) or isinstance(other, Infinity):
            return isinstance(self, Infinity) and isinstance(other, Infinity)
        return self.value == other.value

    def __lt__(self, other):
        if not isinstance(other, ExtendedRational):
            return NotImplemented
        if isinstance(self, Infinity):
            return False
        if isinstance(other, Infinity):
            return True
        return self.value < other.value

    def __hash__(self):
        return hash((self.numerator, self.denominator))


@dataclass(frozen=True, eq=False)
class Finite(ExtendedRational):
    value: Fraction

    def __post_init__(self):
        if isinstance(self.value, float):
            raise TypeError("Finite requires an exact rational, not a float")
        object.__setattr__(self, "value", Fraction(self.value))

    @property
    def numerator(self) -> int:
        return self.value.numerator

    @property
    def denominator(self) -> int:
        return self.value.denominator

    def __str__(self):
        return str(self.value)


class Infinity(ExtendedRational):
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def numerator(self) -> int:
        return 1

    @property
    def denominator(self) -> int:
        return 0

    def __repr__(self):
        return "INFINITY"

    def __str__(self):
        return "1/0"


INFINITY = Infinity()
ZERO = Finite(Fraction(0))
ONE = Finite(Fraction(1))


def mediant(x: ExtendedRational, y: ExtendedRational) -> ExtendedRational:
    """Farey mediant (n1 + n2) / (d1 + d2), with infinity read as 1/0."""
    n = x.numerator + y.numerator
    d = x.denominator + y.denominator
    if d == 0:
        return INFINITY
    return Finite(Fraction(n, d))


def continued_fraction(value) -> list:
    """Continued fraction terms [a0; a1, ..., ak] of a non-negative rational."""
    value = _coerce_target(value)
    if isinstance(value, Infinity):
        raise ValueError("infinity has no continued fraction expansion")
    if value.value < 0:
        raise ValueError(f"expected a non-negative rational, got {value}")
    n, d = value.numerator, value.denominator
    terms = []
    while d:
        q, r = divmod(n, d)
        terms.append(q)
        n, d = d, r
    return terms


# =============================================================================
# 2x2 COMPLEX MATRICES
# =============================================================================

@dataclass(frozen=True)
class Matrix2:
    """Immutable 2x2 complex matrix [[a, b], [c, d]] with mpc entries."""
    a: Any
    b: Any
    c: Any
    d: Any

    @property
    def context(self) -> MPContext:
        return self.a.context

    @property
    def entries(self) -> Tuple[Any, Any, Any, Any]:
        return (self.a, self.b, self.c, self.d)

    def __matmul__(self, other: "Matrix2") -> "Matrix2":
        return multiply(self, other)

    def __repr__(self):
        ctx = self.context
        a, b, c, d = (ctx.nstr(x, 8) for x in self.entries)
        return f"Matrix2([[{a}, {b}], [{c}, {d}]])"


def identity(ctx: MPContext) -> Matrix2:
    one = ctx.mpc(1)
    zero = ctx.mpc(0)
    return Matrix2(one, zero, zero, one)


def determinant(m: Matrix2):
    return m.a * m.d - m.b * m.c


def trace(m: Matrix2):
    return m.a + m.d


def multiply(m1: Matrix2, m2: Matrix2) -> Matrix2:
    return Matrix2(
        m1.a * m2.a + m1.b * m2.c,
        m1.a * m2.b + m1.b * m2.d,
        m1.c * m2.a + m1.d * m2.c,
        m1.c * m2.b + m1.d * m2.d,
    )


def inverse(m: Matrix2) -> Matrix2:
    """(1/det) * [[d, -b], [-c, a]]. A zero determinant is a hard error."""
    det = determinant(m)
    if det == 0:
        raise ZeroDivisionError("matrix with zero determinant has no inverse")
    k = 1 / det
    return Matrix2(k * m.d, k * (-m.b), k * (-m.c), k * m.a)


def product(matrices: Sequence[Matrix2]) -> Matrix2:
    """Left fold of multiply, seeded with the first matrix."""
    matrices = list(matrices)
    if not matrices:
        raise EmptyWordError("cannot take the product of an empty word")
    result = matrices[0]
    for m in matrices[1:]:
        result = multiply(result, m)
    return result


def matrices_close(m1: Matrix2, m2: Matrix2, tolerance: float = EIGENVECTOR_TOLERANCE) -> bool:
    """True when every entry of m1 - m2 has magnitude below `tolerance`."""
    return all(abs(x - y) < tolerance for x, y in zip(m1.entries, m2.entries))


def _numerically_zero(ctx: MPContext, v, scale=1) -> bool:
    """Both components within ZERO_SLACK ulps of zero, relative to `scale`."""
    threshold = ZERO_SLACK * ctx.eps * max(1, scale)
    return abs(v[0]) <= threshold and abs(v[1]) <= threshold


def _entry_scale(m: Matrix2):
    return max(abs(e) for e in m.entries)


def dominant_eigenpair(m: Matrix2):
    """
    Eigenvalue of larger magnitude and an eigenvector for it.

    Assumes det(m) = 1, so the characteristic polynomial is
    lambda^2 - t*lambda + 1 with t = trace(m):

        lambda_minus = (t - sqrt(t^2 - 4)) / 2
        lambda_plus  = (t + sqrt(t^2 - 4)) / 2

    On equal magnitudes the minus branch wins. Every row of m - lambda*I is
    orthogonal to the eigenvector, so the eigenvector is read off a row:
    (lambda - d, c) for the minus branch, (b, lambda - a) for the plus
    branch. If that row vanishes the other row is used. "Vanishes" is
    measured against the largest entry of m, so rounding error that grew
    with the entries of a long word still counts as zero.

    Returns
    -------
    (eigenvalue, (x, y))

    Raises
    ------
    DegenerateEigenvectorError
        Both rows are numerically zero (e.g. m = +/-I); no eigenvector can
        be recovered at this precision.
    """
    ctx = m.context
    t = trace(m)
    s = ctx.sqrt(t * t - 4)
    lambda_minus = (t - s) / 2
    lambda_plus = (t + s) / 2

    if abs(lambda_minus) >= abs(lambda_plus):
        eigenvalue = lambda_minus
        candidates = [(eigenvalue - m.d, m.c), (m.b, eigenvalue - m.a)]
    else:
        eigenvalue = lambda_plus
        candidates = [(m.b, eigenvalue - m.a), (eigenvalue - m.d, m.c)]

    scale = _entry_scale(m)
    for v in candidates:
        if not _numerically_zero(ctx, v, scale):
            return eigenvalue, v
    raise DegenerateEigenvectorError(
        "eigenvector is undefined: both rows of M - lambda*I vanish",
        eigenvalue=eigenvalue,
    )


def is_eigenvector(m: Matrix2, v, tolerance: float = EIGENVECTOR_TOLERANCE) -> bool:
    """
    Check that v = (x, y) is an eigenvector of m to absolute `tolerance`.

    The eigenvalue is estimated as (m v)_x / x and tested against the y
    component. When x is zero the components swap roles.
    """
    x, y = v
    ux = m.a * x + m.b * y
    uy = m.c * x + m.d * y
    if x != 0:
        observed = ux / x
        return abs(observed * y - uy) < tolerance
    if y != 0:
        observed = uy / y
        return abs(observed * x - ux) < tolerance
    raise ValueError("the zero vector is not an eigenvector")


def classify_trace(t, tolerance: float = TRACE_TOLERANCE) -> str:
    """
    Conjugacy type of an SL(2,C) element from its trace.

        non-real trace          -> loxodromic
        real, |trace| < 2       -> elliptic
        real, |trace| = 2       -> parabolic
        real, |trace| > 2       -> hyperbolic

    The trace alone cannot tell +/-I from a parabolic; use classify_matrix
    when the matrix is at hand.
    """
    if abs(t.imag) > tolerance:
        return "loxodromic"
    r = abs(t.real)
    if abs(r - 2) <= tolerance:
        return "parabolic"
    if r < 2:
        return "elliptic"
    return "hyperbolic"


def classify_matrix(m: Matrix2, tolerance: float = TRACE_TOLERANCE) -> str:
    """Like classify_trace, but +/-I (off-diagonal zero, a = d) is "trivial"."""
    if (abs(m.b) <= tolerance and abs(m.c) <= tolerance
            and abs(m.a - m.d) <= tolerance):
        return "trivial"
    return classify_trace(trace(m), tolerance)


# =============================================================================
# GENERATORS
# =============================================================================

def _inverse_sqrt(ctx: MPContext, w, label: str):
    if w == 0:
        raise ParameterDomainError(f"{label} is zero; the parameter must not be +1 or -1")
    return 1 / ctx.sqrt(w)


def generator_a(precision, z) -> Matrix2:
    """c = 1/sqrt(z^2 - 1);  a = [[c*z, c], [c, c*z]]."""
    ctx = _resolve_context(precision)
    z = _to_complex(ctx, z)
    c = _inverse_sqrt(ctx, z * z - 1, "z^2 - 1")
    cz = c * z
    return Matrix2(cz, c, c, cz)


def generator_b(precision, z) -> Matrix2:
    """y = -z/sqrt(z^2 - 1);  c = 1/sqrt(y^2 - 1);  b = [[c*y, c*i], [-c*i, c*y]]."""
    ctx = _resolve_context(precision)
    z = _to_complex(ctx, z)
    i = ctx.mpc(0, 1)
    y = -z * _inverse_sqrt(ctx, z * z - 1, "z^2 - 1")
    c = _inverse_sqrt(ctx, y * y - 1, "y^2 - 1")
    cy = c * y
    ci = c * i
    return Matrix2(cy, ci, -ci, cy)


@dataclass(frozen=True)
class GeneratorSet:
    """The two generators and their inverses, built once per parameter."""
    context: MPContext
    z: Any
    a: Matrix2
    b: Matrix2
    a_inv: Matrix2
    b_inv: Matrix2

    def matrix_for(self, symbol: str) -> Matrix2:
        if symbol == "a":
            return self.a
        if symbol == "b":
            return self.b
        if symbol == "A":
            return self.a_inv
        if symbol == "B":
            return self.b_inv
        raise ValueError(f"unknown generator symbol {symbol!r}")

    def word_matrix(self, word: str) -> Matrix2:
        """Product of the symbols' matrices, leftmost symbol first."""
        return product(self.matrix_for(s) for s in word)


def build_generators(precision, z) -> GeneratorSet:
    ctx = _resolve_context(precision)
    z = _to_complex(ctx, z)
    a = generator_a(ctx, z)
    b = generator_b(ctx, z)
    return GeneratorSet(ctx, z, a, b, inverse(a), inverse(b))


def random_parameter(ctx: MPContext, rng: np.random.Generator):
    """z = x + iy with x, y uniform on [0, 1), real part drawn first."""
    x = rng.random()
    y = rng.random()
    return ctx.mpc(x, y)


# =============================================================================
# STERN-BROCOT LOCATOR
# =============================================================================

def _coerce_target(target) -> ExtendedRational:
    if isinstance(target, ExtendedRational):
        return target
    if isinstance(target, (int, np.integer, Fraction)) and not isinstance(target, bool):
        return Finite(Fraction(target))
    raise TypeError(f"expected an exact rational or INFINITY, got {type(target).__name__}")


def _descend(target: ExtendedRational) -> Iterator[str]:
    """
    Yield the branch taken at each mediant until the target is hit.

    Bounds start at 0 and 1/0. RIGHT means the mediant was below the target
    and became the new low bound; LEFT means it became the new high bound.
    The caller guarantees the target is strictly between 0 and infinity.
    """
    low, high = ZERO, INFINITY
    while True:
        m = mediant(low, high)
        if m < target:
            low = m
            yield RIGHT
        elif target < m:
            high = m
            yield LEFT
        else:
            return


def _check_in_tree(target: ExtendedRational):
    if not isinstance(target, Infinity) and target.value < 0:
        raise ValueError(f"Stern-Brocot targets must be non-negative, got {target}")


def _fold_path(target, low_value, high_value, combine: Callable):
    target = _coerce_target(target)
    _check_in_tree(target)
    if isinstance(target, Infinity):
        return high_value
    if target == ONE or target == ZERO:
        return low_value

    low_acc, high_acc = low_value, high_value
    for step in _descend(target):
        if step == RIGHT:
            low_acc = combine(low_acc, high_acc)
        else:
            high_acc = combine(low_acc, high_acc)
    return combine(low_acc, high_acc)


def stern_brocot_word(target, a: Matrix2, b: Matrix2) -> Matrix2:
    """
    Matrix of the Stern-Brocot word of `target`, built without the word.

    The low bound 0 is paired with `a` and the high bound 1/0 with `b`. At
    every mediant the bound that moves takes the product low * high, so
    the matrices always track the words of the current bounds. Comparisons
    are exact rational comparisons.

    Infinity gives `b` and 1 gives `a` (the root's two immediate children);
    0 gives `a`, the matrix paired with the low bound. The loop ends after
    at most sum(continued_fraction(target)) steps.
    """
    return _fold_path(target, a, b, multiply)


def stern_brocot_symbols(target) -> str:
    """The explicit word over {a, b} whose product is stern_brocot_word(target)."""
    return _fold_path(target, "a", "b", lambda x, y: x + y)


def stern_brocot_path(target) -> str:
    """L/R branch string from the root 1/1 down to a positive rational."""
    target = _coerce_target(target)
    if isinstance(target, Infinity) or target.value <= 0:
        raise ValueError(f"{target} is not a node of the Stern-Brocot tree")
    return "".join(_descend(target))


# =============================================================================
# WORD EVALUATION
# =============================================================================

def parse_word(text: str) -> str:
    """Validate a word over {a, b, A, B}."""
    bad = sorted(set(ch for ch in text if ch not in SYMBOLS))
    if bad:
        raise ValueError(
            f"word may only contain the letters 'a', 'b', 'A', 'B' (got {''.join(bad)!r})"
        )
    return text


def random_word(length: int, rng: np.random.Generator) -> str:
    """Uniform, unreduced word of `length` symbols."""
    if length < 0:
        raise ValueError(f"word length must be non-negative, got {length}")
    draws = rng.integers(0, len(SYMBOLS), size=length)
    return "".join(SYMBOLS[int(k)] for k in draws)


@dataclass
class WordReport:
    """Result of evaluating one word."""
    matrix: Matrix2
    trace: Any
    eigenvalue: Any
    eigenvector: Optional[Tuple[Any, Any]]
    eigenvector_ok: bool
    classification: str
    mode: str
    word: Optional[str] = None
    target: Optional[ExtendedRational] = None

    def summary(self, digits: Optional[int] = None) -> str:
        ctx = self.matrix.context
        n = digits if digits is not None else ctx.dps

        def fmt(x):
            return ctx.nstr(x, n)

        a, b, c, d = self.matrix.entries
        if self.eigenvector is None:
            vec = "undefined"
        else:
            vec = f"{fmt(self.eigenvector[0])} {fmt(self.eigenvector[1])}"
        lines = [
            f"{fmt(a)} {fmt(b)}",
            f"{fmt(c)} {fmt(d)}",
            f"trace = {fmt(self.trace)}",
            f"dominant_eigenvalue = {fmt(self.eigenvalue)}",
            f"dominant_eigenvector = {vec}",
            f"classification = {self.classification}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        ctx = self.matrix.context
        return {
            "mode": self.mode,
            "word": self.word,
            "target": None if self.target is None else str(self.target),
            "matrix": [ctx.nstr(x, ctx.dps) for x in self.matrix.entries],
            "trace": ctx.nstr(self.trace, ctx.dps),
            "eigenvalue": ctx.nstr(self.eigenvalue, ctx.dps),
            "eigenvector": None if self.eigenvector is None
            else [ctx.nstr(x, ctx.dps) for x in self.eigenvector],
            "eigenvector_ok": self.eigenvector_ok,
            "classification": self.classification,
        }

    def __repr__(self):
        return f"WordReport(mode={self.mode!r}, classification={self.classification!r})"


def evaluate_word(
    generators: GeneratorSet,
    word: Optional[str] = None,
    random_length: Optional[int] = None,
    rational: Union[ExtendedRational, Fraction, int, None] = None,
    rng: Optional[np.random.Generator] = None,
) -> WordReport:
    """
    Evaluate a word and derive trace, dominant eigenpair and conjugacy type.

    Parameters
    ----------
    generators : GeneratorSet
        Output of build_generators.
    word : str, optional
        Explicit word over {a, b, A, B}; leftmost symbol is applied first.
    random_length : int, optional
        Length of a uniformly random word drawn from `rng`.
    rational : ExtendedRational, Fraction or int, optional
        Target of the Stern-Brocot search.
    rng : numpy.random.Generator, optional
        Random source for random_length; defaults to default_rng(DEFAULT_SEED).

    Exactly one of word / random_length / rational must be given.

    A failed eigenvector self-check emits a PrecisionWarning and is recorded
    in `eigenvector_ok`; it never aborts the evaluation.
    """
    chosen = [k for k, v in (("word", word), ("random", random_length),
                             ("rational", rational)) if v is not None]
    if len(chosen) != 1:
        raise ValueError(
            "exactly one of word, random_length, rational must be given "
            f"(got {', '.join(chosen) or 'none'})"
        )
    mode = chosen[0]
    target = None

    if mode == "rational":
        target = _coerce_target(rational)
        matrix = stern_brocot_word(target, generators.a, generators.b)
    else:
        if mode == "random":
            if rng is None:
                rng = np.random.default_rng(DEFAULT_SEED)
            word = random_word(random_length, rng)
        else:
            word = parse_word(word)
        matrix = generators.word_matrix(word)

    t = trace(matrix)
    try:
        eigenvalue, eigenvector = dominant_eigenpair(matrix)
        ok = is_eigenvector(matrix, eigenvector)
    except DegenerateEigenvectorError as exc:
        eigenvalue, eigenvector, ok = exc.eigenvalue, None, False
        warnings.warn(f"{exc}; increase precision", PrecisionWarning, stacklevel=2)
    else:
        if not ok:
            warnings.warn(
                "output is not very close to an eigenvector, increase precision",
                PrecisionWarning, stacklevel=2,
            )

    return WordReport(
        matrix=matrix,
        trace=t,
        eigenvalue=eigenvalue,
        eigenvector=eigenvector,
        eigenvector_ok=ok,
        classification=classify_matrix(matrix),
        mode=mode,
        word=word,
        target=target,
    )
