from fractions import Fraction

import pytest
from sl2c_words import (
    INFINITY,
    ExtendedRational,
    Finite,
    Infinity,
    continued_fraction,
    mediant,
)


def F(p, q=1):
    return Finite(Fraction(p, q))


def test_infinity_is_a_singleton():
    assert Infinity() is INFINITY
    assert INFINITY == Infinity()
    assert (INFINITY.numerator, INFINITY.denominator) == (1, 0)


def test_total_order():
    values = [INFINITY, F(1), F(0), F(2, 3), F(-1, 2), F(5)]
    assert sorted(values) == [F(-1, 2), F(0), F(2, 3), F(1), F(5), INFINITY]


def test_infinity_is_the_unique_maximum():
    for x in [F(0), F(10 ** 30), F(-7, 3)]:
        assert x < INFINITY
        assert INFINITY > x
        assert not INFINITY < x
        assert x != INFINITY
    assert not INFINITY < INFINITY
    assert INFINITY <= INFINITY


def test_equality_is_structural():
    assert F(2, 4) == F(1, 2)
    assert F(2, 4).numerator == 1
    assert F(2, 4).denominator == 2
    assert len({F(2, 4), F(1, 2), INFINITY, Infinity()}) == 2


def test_no_comparison_with_plain_numbers():
    assert F(1) != 1
    with pytest.raises(TypeError):
        F(1) < 2


def test_finite_rejects_floats():
    with pytest.raises(TypeError):
        Finite(0.5)


@pytest.mark.parametrize("p,q,expected", [
    (2, 3, F(2, 3)),
    (4, 6, F(2, 3)),
    (0, 5, F(0)),
    (7, 0, INFINITY),
    (0, 0, INFINITY),
])
def test_from_pair(p, q, expected):
    assert ExtendedRational.from_pair(p, q) == expected


@pytest.mark.parametrize("low,high", [
    (F(0), INFINITY),
    (F(0), F(1)),
    (F(1), INFINITY),
    (F(1, 2), F(1)),
    (F(1, 3), F(1, 2)),
    (F(-1), F(0)),
    (F(3, 7), F(5, 11)),
    (F(10 ** 20, 3), INFINITY),
])
def test_mediant_lies_strictly_between(low, high):
    m = mediant(low, high)
    assert low < m < high
    assert mediant(high, low) == m


def test_mediant_values():
    assert mediant(F(0), INFINITY) == F(1)
    assert mediant(F(1), INFINITY) == F(2)
    assert mediant(F(1, 2), F(2, 3)) == F(3, 5)
    assert mediant(INFINITY, INFINITY) is INFINITY


@pytest.mark.parametrize("value,terms", [
    (Fraction(2, 3), [0, 1, 2]),
    (Fraction(7, 3), [2, 3]),
    (Fraction(13, 8), [1, 1, 1, 1, 2]),
    (5, [5]),
    (0, [0]),
    (F(415, 93), [4, 2, 6, 7]),
])
def test_continued_fraction(value, terms):
    assert continued_fraction(value) == terms


def test_continued_fraction_rejects_infinity_and_negatives():
    with pytest.raises(ValueError):
        continued_fraction(INFINITY)
    with pytest.raises(ValueError):
        continued_fraction(Fraction(-1, 2))
