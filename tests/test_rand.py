import pytest

from fuzzcore.rand import Random


def test_first_value_is_multiplier():
    assert Random(1).raw() == 48271


def test_ten_thousandth_value_of_minstd():
    rng = Random(1)
    for _ in range(9999):
        rng.raw()
    assert rng.raw() == 399268537


def test_zero_seed_behaves_like_one():
    a, b = Random(0), Random(1)
    assert [a.raw() for _ in range(20)] == [b.raw() for _ in range(20)]


def test_modulus_seed_behaves_like_one():
    a, b = Random(2147483647), Random(1)
    assert [a.raw() for _ in range(20)] == [b.raw() for _ in range(20)]


def test_same_seed_same_sequence():
    a, b = Random(1234), Random(1234)
    assert [a.below(1000) for _ in range(50)] == [b.below(1000) for _ in range(50)]


def test_below_zero_returns_zero():
    assert Random(7).below(0) == 0


def test_below_stays_in_range():
    rng = Random(42)
    values = [rng.below(10) for _ in range(2000)]
    assert all(0 <= v < 10 for v in values)
    assert set(values) == set(range(10))


def test_between_stays_in_closed_range():
    rng = Random(3)
    values = {rng.between(5, 8) for _ in range(2000)}
    assert values == {5, 6, 7, 8}


def test_between_rejects_empty_range():
    with pytest.raises(ValueError):
        Random(3).between(8, 8)


def test_rand_bool_yields_both_values():
    rng = Random(9)
    values = {rng.rand_bool() for _ in range(200)}
    assert values == {0, 1}


def test_skew_towards_last_range():
    rng = Random(11)
    values = [rng.skew_towards_last(10) for _ in range(2000)]
    assert all(0 <= v < 10 for v in values)
    assert 9 in values


def test_skew_towards_last_of_one_is_zero():
    rng = Random(5)
    assert all(rng.skew_towards_last(1) == 0 for _ in range(20))


def test_skew_towards_last_prefers_high_values():
    rng = Random(17)
    values = [rng.skew_towards_last(10) for _ in range(5000)]
    high = sum(1 for v in values if v >= 5)
    assert high > len(values) - high