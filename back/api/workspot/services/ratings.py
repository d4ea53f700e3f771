from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple

from workspot.errors import ValidationError

MIN_RATING = 1
MAX_RATING = 5


class RatingSummary(NamedTuple):
    average_rating: float
    review_count: int


def validate_rating(rating) -> int:
    # bool は int のサブクラスなので明示的に除外
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("rating must be an integer", details={"field": "rating"})
    if not (MIN_RATING <= rating <= MAX_RATING):
        raise ValidationError(
            f"rating must be between {MIN_RATING} and {MAX_RATING}",
            details={"field": "rating", "value": rating},
        )
    return rating


def aggregate_ratings(ratings: Iterable[int]) -> RatingSummary:
    """評価の集合から (平均★, 件数) を算出する。
    - 平均は小数1桁に四捨五入（0.05 は切り上げ）。float の round() は偶数丸めなので Decimal を使う
    - 空集合は (0.0, 0)
    """
    values = list(ratings)
    if not values:
        return RatingSummary(0.0, 0)
    mean = Decimal(sum(values)) / Decimal(len(values))
    average = mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return RatingSummary(float(average), len(values))
