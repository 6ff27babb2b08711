"""
Tests for overlap suppression.
"""

import itertools

import numpy as np
import pytest

from facesweep.postprocessor import suppress
from facesweep.rectangle import Rectangle


def test_suppress_three_candidates():
    """Two overlapping candidates collapse to the first; the disjoint one stays."""
    candidates = [
        Rectangle(10, 10, 50, 50),
        Rectangle(15, 12, 50, 50),
        Rectangle(200, 200, 40, 40),
    ]

    assert suppress(candidates) == [
        Rectangle(10, 10, 50, 50),
        Rectangle(200, 200, 40, 40),
    ]


def test_first_seen_wins_regardless_of_size():
    small = Rectangle(40, 40, 20, 20)
    large = Rectangle(0, 0, 200, 200)

    assert suppress([small, large]) == [small]
    assert suppress([large, small]) == [large]


def test_no_overlap_is_noop():
    candidates = [
        Rectangle(0, 0, 30, 30),
        Rectangle(100, 0, 30, 30),
        Rectangle(0, 100, 30, 30),
        Rectangle(25, 25, 30, 30),  # 5x5 corner overlap, ratio 25/900
    ]

    assert suppress(candidates) == candidates


def test_ratio_equal_to_threshold_is_kept():
    a = Rectangle(0, 0, 10, 10)
    b = Rectangle(7, 0, 10, 10)  # 3x10 shared = exactly 0.3

    assert suppress([a, b]) == [a, b]


def test_empty_input():
    assert suppress([]) == []


def test_custom_threshold():
    a = Rectangle(0, 0, 10, 10)
    b = Rectangle(5, 0, 10, 10)  # ratio 0.5

    assert suppress([a, b], threshold=0.6) == [a, b]
    assert suppress([a, b], threshold=0.4) == [a]


def test_invalid_threshold():
    with pytest.raises(ValueError):
        suppress([Rectangle(0, 0, 1, 1)], threshold=-0.1)


def test_invariant_on_random_candidates():
    """Kept pairs never exceed the threshold; every dropped box hit a kept one."""
    rng = np.random.default_rng(1234)
    candidates = [
        Rectangle(int(x), int(y), int(s), int(s))
        for x, y, s in zip(
            rng.integers(0, 300, 60),
            rng.integers(0, 300, 60),
            rng.integers(20, 120, 60),
        )
    ]

    kept = suppress(candidates, threshold=0.3)

    for a, b in itertools.combinations(kept, 2):
        assert a.overlap_ratio(b) <= 0.3

    for dropped in (c for c in candidates if c not in kept):
        assert any(dropped.overlap_ratio(k) > 0.3 for k in kept)
