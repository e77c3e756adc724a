"""Tests for the seeded random source."""

import pytest

from grim.engine.prng import SeededRandom, derive, generate_seed


class TestDeterminism:
    def test_same_seed_same_sequence(self):
        a = SeededRandom("grim")
        b = SeededRandom("grim")
        assert [a.next() for _ in range(50)] == [b.next() for _ in range(50)]

    def test_different_seeds_differ(self):
        a = SeededRandom("grim-1")
        b = SeededRandom("grim-2")
        assert [a.next() for _ in range(10)] != [b.next() for _ in range(10)]

    def test_values_in_unit_interval(self):
        rng = SeededRandom("unit")
        for _ in range(1000):
            v = rng.next()
            assert 0.0 <= v < 1.0

    def test_derive_joins_parts(self):
        assert derive("abc", "deal", 3) == "abc_deal_3"
        assert derive("abc") == "abc"

    def test_generated_seeds_are_unique(self):
        assert len({generate_seed() for _ in range(20)}) == 20


class TestIntegers:
    def test_next_int_inclusive_bounds(self):
        rng = SeededRandom("ints")
        seen = {rng.next_int(1, 3) for _ in range(500)}
        assert seen == {1, 2, 3}

    def test_next_int_single_value(self):
        assert SeededRandom("x").next_int(5, 5) == 5

    def test_next_int_empty_range(self):
        with pytest.raises(ValueError):
            SeededRandom("x").next_int(3, 2)

    def test_next_bool_produces_both(self):
        rng = SeededRandom("bools")
        assert {rng.next_bool() for _ in range(100)} == {True, False}


class TestShuffle:
    def test_shuffle_is_permutation(self):
        items = list(range(32))
        out = SeededRandom("perm").shuffle(items)
        assert sorted(out) == items
        assert len(out) == 32

    def test_shuffle_does_not_mutate(self):
        items = list(range(10))
        SeededRandom("perm").shuffle(items)
        assert items == list(range(10))

    def test_shuffle_reproducible(self):
        items = list(range(32))
        assert SeededRandom("s").shuffle(items) == SeededRandom("s").shuffle(items)

    def test_shuffle_of_empty(self):
        assert SeededRandom("s").shuffle([]) == []


class TestChoice:
    def test_choice_from_sequence(self):
        rng = SeededRandom("choice")
        items = ["a", "b", "c"]
        assert {rng.choice(items) for _ in range(200)} == set(items)

    def test_choice_empty_raises(self):
        with pytest.raises(ValueError):
            SeededRandom("c").choice([])

    def test_weighted_choice_skips_zero_weight(self):
        rng = SeededRandom("weights")
        picks = {rng.weighted_choice(["x", "y", "z"], [1.0, 0.0, 3.0]) for _ in range(300)}
        assert "y" not in picks
        assert picks == {"x", "z"}

    def test_weighted_choice_validates(self):
        rng = SeededRandom("weights")
        with pytest.raises(ValueError):
            rng.weighted_choice(["x"], [1.0, 2.0])
        with pytest.raises(ValueError):
            rng.weighted_choice(["x"], [0.0])
