import pytest

from fractalpaper.rng import Rng


def test_same_seed_gives_same_sequence():
    a = Rng(42)
    b = Rng(42)
    assert [a.next_u64() for _ in range(20)] == [b.next_u64() for _ in range(20)]


def test_different_seeds_give_different_sequences():
    a = Rng(1)
    b = Rng(2)
    assert [a.next_u64() for _ in range(5)] != [b.next_u64() for _ in range(5)]


def test_next_u64_fits_in_64_bits():
    rng = Rng(7)
    values = [rng.next_u64() for _ in range(1000)]
    assert all(0 <= v < 2**64 for v in values)
    assert len(set(values)) == len(values)


def test_large_seed_is_wrapped():
    a = Rng(2**64 + 5)
    b = Rng(5)
    assert a.next_u64() == b.next_u64()


def test_f64_in_unit_interval():
    rng = Rng(123)
    values = [rng.f64() for _ in range(2000)]
    assert all(0.0 <= v < 1.0 for v in values)
    mean = sum(values) / len(values)
    assert 0.4 < mean < 0.6


def test_range_respects_bounds():
    rng = Rng(99)
    values = [rng.range(-3.0, 3.0) for _ in range(2000)]
    assert all(-3.0 <= v < 3.0 for v in values)
    assert min(values) < -2.0
    assert max(values) > 2.0


def test_range_matches_f64_scaling():
    a = Rng(5)
    b = Rng(5)
    assert a.range(10.0, 20.0) == 10.0 + b.f64() * 10.0


def test_choose_returns_member_and_covers_all():
    rng = Rng(2024)
    items = ["a", "b", "c", "d"]
    picks = [rng.choose(items) for _ in range(400)]
    assert set(picks) == set(items)


def test_choose_uses_modulo_of_next_u64():
    a = Rng(11)
    b = Rng(11)
    items = (10, 20, 30)
    assert a.choose(items) == items[b.next_u64() % 3]


def test_choose_empty_raises():
    with pytest.raises(IndexError):
        Rng(0).choose([])