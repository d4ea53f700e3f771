from typing import List

from workspot.services.contracts import SpotRecord, UserStats
from workspot.services.stores import FavoriteStore, ReviewStore, SpotStore


class UserActivityService:
    """ユーザーごとの投稿数・お気に入り数と、自分が登録したスポット一覧。"""

    def __init__(self, spots: SpotStore, reviews: ReviewStore, favorites: FavoriteStore):
        self._spots = spots
        self._reviews = reviews
        self._favorites = favorites

    def stats(self, user_id: str) -> UserStats:
        return UserStats(
            spots_created=self._spots.count_by_owner(user_id),
            reviews_written=self._reviews.count_by_user(user_id),
            favorite_spots=self._favorites.count_by_user(user_id),
        )

    def my_spots(self, user_id: str) -> List[SpotRecord]:
        return self._spots.list_by_owner(user_id)
