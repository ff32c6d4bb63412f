import math

import pytest

from newsgrouper.vector import Vector


def test_empty_input_gives_ten_zero_coordinates():
    vec = Vector([])
    assert vec.capacity() == 10
    assert vec.is_point() is True


def test_init_converts_to_float():
    assert Vector([1, 2, 3]).to_list() == [1.0, 2.0, 3.0]


def test_zeros():
    assert Vector.zeros(3).to_list() == [0.0, 0.0, 0.0]
    assert Vector.zeros(0).capacity() == 0


def test_zeros_negative_raises():
    with pytest.raises(ValueError):
        Vector.zeros(-1)


def test_radius_added_to_start_gives_end():
    start, end = [1.0, 2.0, 3.0], [4.0, -1.0, 7.5]
    assert Vector(start).add(Vector.radius(start, end)).equals(Vector(end))


def test_radius_missing_coordinates_are_zero():
    assert Vector.radius([1, 2], []).equals(Vector([1, 2]).multiply(-1))
    assert Vector.radius([], [1, 2]).equals(Vector([1, 2]))


def test_copy_is_independent():
    vec = Vector([1, 2])
    dup = vec.copy()
    dup.multiply(3)
    assert vec.to_list() == [1.0, 2.0]


def test_to_list_is_a_copy():
    vec = Vector([1, 2])
    vec.to_list().append(9.0)
    assert vec.capacity() == 2


def test_clear_drops_coordinates():
    vec = Vector([1, 2])
    vec.clear()
    assert vec.capacity() == 0
    assert vec.to_pq_string() == "[]"


def test_module_matches_scalar_with_itself():
    vec = Vector([1.5, -2.0, 4.0])
    assert math.isclose(vec.module() ** 2, vec.scalar(vec))


def test_normalize_gives_unit_length():
    vec = Vector([3.0, -7.0, 2.0]).normalize()
    assert math.isclose(vec.module(), 1.0)


def test_normalize_zero_vector_is_unchanged():
    vec = Vector.zeros(3)
    assert vec.normalize().to_list() == [0.0, 0.0, 0.0]


def test_add_same_capacity():
    assert Vector([1, 2]).add(Vector([1, 2])).equals(Vector([1, 2]).multiply(2))


def test_add_mismatched_capacity_is_ignored():
    assert Vector([1, 2]).add(Vector([1, 2, 3])).to_list() == [1.0, 2.0]


def test_subtract_inverts_add():
    vec = Vector([1.0, 2.0]).add(Vector([3.0, 4.0])).subtract(Vector([3.0, 4.0]))
    assert vec.equals(Vector([1.0, 2.0]))


def test_subtract_many_and_longer_other():
    vec = Vector([5.0, 5.0]).subtract(Vector([5.0, 5.0, 1.0]), Vector([0.0, 0.0]))
    assert vec.is_point() is True


def test_subtract_shorter_raises():
    with pytest.raises(ValueError):
        Vector([1, 2, 3]).subtract(Vector([1, 2]))


def test_multiply_divide_round_trip():
    vec = Vector([1.0, 2.0, 4.0])
    assert vec.copy().multiply(4).divide(4).equals(vec)


def test_divide_by_zero_follows_ieee():
    values = Vector([1, -1, 0]).divide(0).to_list()
    assert values[0] == math.inf
    assert values[1] == -math.inf
    assert math.isnan(values[2])


def test_scalar_uses_shared_coordinates():
    assert Vector([1, 2, 3]).scalar(Vector([1, 2])) == Vector([1, 2]).scalar(Vector([1, 2]))


def test_equals():
    assert Vector([1, 2]).equals(Vector([1, 2])) is True
    assert Vector([1, 2]).equals(Vector([1, 3])) is False
    assert Vector([1, 2]).equals(Vector([1, 2, 0])) is False
    assert Vector([1, 2]) == Vector([1, 2])


def test_middle_is_half():
    vec = Vector([1.0, 3.0, -5.0])
    assert vec.middle() == vec.copy().divide(2).to_list()


def test_cos_distance_cases():
    a = Vector([1.0, 2.0])
    assert math.isclose(a.cos_distance(Vector([2.0, 4.0])), 1.0)
    assert math.isclose(a.cos_distance(Vector([-1.0, -2.0])), -1.0)
    assert Vector([1.0, 0.0]).cos_distance(Vector([0.0, 1.0])) == 0.0
    assert a.cos_distance(Vector.zeros(2)) == 0.0


def test_to_pq_string_formats_without_trailing_zeros():
    assert Vector([1, 0.5, -2]).to_pq_string() == "[1,0.5,-2]"
    assert Vector([100.0]).to_pq_string() == "[100]"


def test_to_pq_string_never_uses_exponent():
    assert Vector([1e-7]).to_pq_string() == "[0.0000001]"


def test_to_pq_string_special_values():
    assert Vector([math.inf, -math.inf, math.nan]).to_pq_string() == "[+Inf,-Inf,NaN]"


def test_minkowski_invalid_order_or_size():
    a = Vector([1.0, 2.0])
    assert a.minkowski_distance(Vector([3.0, 4.0]), 1) == -1
    assert a.minkowski_distance(Vector([3.0, 4.0]), 0.5) == -1
    assert a.minkowski_distance(Vector([3.0, 4.0, 5.0]), 2) == -1
    assert a.manhattan_distance(Vector([3.0, 4.0])) == -1


def test_euclidean_distance():
    assert Vector([0.0, 0.0]).euclidean_distance(Vector([3.0, 4.0])) == 5.0


def test_euclidean_is_symmetric_and_matches_difference_module():
    a, b = Vector([1.0, -2.0, 3.5]), Vector([0.5, 4.0, -1.0])
    diff = a.copy().subtract(b)
    assert math.isclose(a.euclidean_distance(b), b.euclidean_distance(a))
    assert math.isclose(a.euclidean_distance(b), diff.module())


def test_chebyshev_distance():
    assert Vector([0.0, 0.0]).chebyshev_distance(Vector([3.0, -4.0])) == 4.0
    a, b = Vector([1.0, 7.0]), Vector([2.0, 3.0])
    assert a.chebyshev_distance(b) <= a.euclidean_distance(b)