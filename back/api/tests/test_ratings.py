import pytest

from workspot.errors import ValidationError
from workspot.services.ratings import RatingSummary, aggregate_ratings, validate_rating


def test_mean_of_three():
    assert aggregate_ratings([5, 4, 3]) == RatingSummary(4.0, 3)


def test_empty_set_is_zero():
    assert aggregate_ratings([]) == RatingSummary(0.0, 0)


def test_rounds_to_one_decimal():
    assert aggregate_ratings([1, 1, 2]).average_rating == 1.3
    assert aggregate_ratings([5, 4]).average_rating == 4.5


def test_half_rounds_up():
    """4.25 -> 4.3 (not banker's rounding)."""
    assert aggregate_ratings([4, 5, 4, 4]) == RatingSummary(4.3, 4)
    assert aggregate_ratings([1, 2, 2, 2]).average_rating == 1.8


def test_accepts_generator():
    assert aggregate_ratings(r for r in [2, 2]) == RatingSummary(2.0, 2)


@pytest.mark.parametrize("rating", [1, 3, 5])
def test_valid_ratings(rating):
    assert validate_rating(rating) == rating


@pytest.mark.parametrize("rating", [0, 6, -1, 3.5, "4", None, True])
def test_invalid_ratings(rating):
    with pytest.raises(ValidationError):
        validate_rating(rating)
